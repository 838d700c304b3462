"""Adaptive batch orchestration for per-token analysis.

Tokens are processed in sequential batches; tokens inside one batch run
concurrently. Batch size adapts with a threshold-triggered additive
controller:

- A fully successful batch increments the current size's streak. At
  success_threshold the size grows by 1 and the new size's streak starts at 1.
- A failed batch decrements the current size's streak. At fail_threshold the
  size shrinks by 1 (never below min_size) and the new size's streak starts
  at 0. The failed batch's tokens are re-queued once, at the back.
- An item that has raised in max_item_failures failed batches is dropped
  instead of re-queued, so one permanently failing token cannot stall the
  run. Its siblings are still re-queued.

Streaks are tracked per batch size, so returning to a size resumes its
history.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Generic, TypeVar

from agent.config import BatchSettings
from agent.exceptions import BatchRetryExhausted
from agent.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchController(Generic[T]):
    """Explicit batch sizing state: current size, per-size streaks, work queue.

    One controller belongs to one run; it is not shared between runs.
    """

    def __init__(
        self,
        initial_size: int = 5,
        success_threshold: int = 5,
        fail_threshold: int = -5,
        min_size: int = 1,
        max_item_failures: int | None = None,
    ) -> None:
        self._min_size = max(1, min_size)
        self._max_item_failures = max_item_failures
        self._batch_size = max(self._min_size, initial_size)
        self._success_threshold = success_threshold
        self._fail_threshold = fail_threshold
        self._streaks: dict[int, int] = {}
        self._pending: deque[T] = deque()
        # failed attempts per item, keyed by identity
        self._item_failures: dict[int, int] = {}

    @classmethod
    def from_settings(cls, settings: BatchSettings) -> "BatchController[T]":
        return cls(
            initial_size=settings.initial_size,
            success_threshold=settings.success_threshold,
            fail_threshold=settings.fail_threshold,
            min_size=settings.min_size,
            max_item_failures=settings.max_item_failures,
        )

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def pending(self) -> list[T]:
        """Snapshot of queued items in processing order."""
        return list(self._pending)

    def streak(self, size: int | None = None) -> int:
        return self._streaks.get(self._batch_size if size is None else size, 0)

    def enqueue(self, items: Iterable[T]) -> None:
        self._pending.extend(items)

    def has_pending(self) -> bool:
        return bool(self._pending)

    def next_batch(self) -> list[T]:
        """Pop up to batch_size items from the front of the queue."""
        count = min(self._batch_size, len(self._pending))
        return [self._pending.popleft() for _ in range(count)]

    def record_success(self) -> None:
        size = self._batch_size
        self._streaks[size] = self._streaks.get(size, 0) + 1

        if self._streaks[size] >= self._success_threshold:
            self._batch_size = size + 1
            self._streaks[self._batch_size] = 1
            logger.info("batch_size_increased", old_size=size, new_size=self._batch_size)

    def record_failure(self, batch: Iterable[T], failed: Iterable[T] = ()) -> list[T]:
        """Count a failed batch and put its items back at the end of the queue.

        Args:
            batch: Every item of the failed batch.
            failed: The items that raised.

        Returns:
            Items dropped because they reached max_item_failures.
        """
        size = self._batch_size
        self._streaks[size] = self._streaks.get(size, 0) - 1

        if self._streaks[size] <= self._fail_threshold and size > self._min_size:
            self._batch_size = size - 1
            self._streaks[self._batch_size] = 0
            logger.warning("batch_size_decreased", old_size=size, new_size=self._batch_size)

        dropped_ids: set[int] = set()
        for item in failed:
            key = id(item)
            self._item_failures[key] = self._item_failures.get(key, 0) + 1
            if (
                self._max_item_failures is not None
                and self._item_failures[key] >= self._max_item_failures
            ):
                dropped_ids.add(key)

        dropped: list[T] = []
        for item in batch:
            if id(item) in dropped_ids:
                dropped.append(item)
            else:
                self._pending.append(item)
        return dropped


async def run_batched(
    items: Iterable[T],
    analyze_one: Callable[[T], Awaitable[R]],
    controller: BatchController[T] | None = None,
    failure_delay: float = 0.0,
    max_consecutive_failures: int | None = None,
    item_label: Callable[[T], str] = str,
) -> list[R]:
    """Analyze every item in adaptively sized, strictly sequential batches.

    Each batch waits for all of its tasks to settle. Any exception fails
    the whole batch, which is re-queued; per-item errors that should not
    fail the batch must be handled inside analyze_one. Items the controller
    drops after repeated failures are logged and left out of the results.

    Args:
        items: Work items to analyze.
        analyze_one: Coroutine function applied to each item.
        controller: Batch state; a default controller is created if omitted.
        failure_delay: Seconds to wait after a failed batch.
        max_consecutive_failures: Raise BatchRetryExhausted after this many
            failed batches in a row. None retries until the queue drains.
        item_label: Names an item in the log when it is dropped.

    Returns:
        Results of successful batches, in completion order of batches.

    Raises:
        BatchRetryExhausted: If max_consecutive_failures is reached.
    """
    controller = controller or BatchController()
    controller.enqueue(items)
    results: list[R] = []
    consecutive_failures = 0

    while controller.has_pending():
        batch = controller.next_batch()
        outcomes = await asyncio.gather(
            *(analyze_one(item) for item in batch), return_exceptions=True
        )
        for outcome in outcomes:
            # Cancellation is not a batch failure
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
        errors = [o for o in outcomes if isinstance(o, Exception)]

        if not errors:
            controller.record_success()
            results.extend(outcomes)
            consecutive_failures = 0
            continue

        consecutive_failures += 1
        logger.warning(
            "batch_failed",
            batch_size=len(batch),
            errors=len(errors),
            error=str(errors[0]),
            consecutive_failures=consecutive_failures,
        )
        item_errors = {
            id(item): outcome
            for item, outcome in zip(batch, outcomes)
            if isinstance(outcome, Exception)
        }
        failed = [item for item in batch if id(item) in item_errors]
        for item in controller.record_failure(batch, failed):
            logger.warning(
                "batch_item_dropped", item=item_label(item), error=str(item_errors[id(item)])
            )

        if (
            max_consecutive_failures is not None
            and consecutive_failures >= max_consecutive_failures
            and controller.has_pending()
        ):
            raise BatchRetryExhausted(
                f"{consecutive_failures} consecutive batch failures, "
                f"{len(controller.pending)} items still pending"
            ) from errors[0]

        if failure_delay > 0:
            await asyncio.sleep(failure_delay)

    return results

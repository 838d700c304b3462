"""Trading decision outcome store.

DecisionStore owns the decision lifecycle: creation (with SELL-to-BUY
linkage), execution, and the 24h/7d forward-performance updates. Status
moves are validated against STATUS_TRANSITIONS. All SQL is isolated
behind this interface.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import aiosqlite

from agent.data.database import DecisionDatabase
from agent.exceptions import InvalidStatusTransition
from agent.logging import get_logger
from agent.models import STATUS_TRANSITIONS, DecisionStatus, DecisionType, TradingDecision

logger = get_logger(__name__)

_COLUMNS = (
    "id",
    "observation_id",
    "token_address",
    "wallet_address",
    "decision_type",
    "decision_price_usd",
    "confidence_score",
    "status",
    "previous_buy_id",
    "previous_buy_price_usd",
    "execution_successful",
    "execution_price_usd",
    "price_24h_after_usd",
    "price_change_24h_pct",
    "price_7d_after_usd",
    "price_change_7d_pct",
    "created_at",
    "updated_at",
)


def percent_change(base: float | None, after: float) -> float | None:
    """Percentage move from base to after; None without a positive base."""
    if base is None or base <= 0:
        return None
    return (after - base) / base * 100


def _row_to_decision(row: aiosqlite.Row) -> TradingDecision:
    return TradingDecision(
        id=row["id"],
        observation_id=row["observation_id"],
        token_address=row["token_address"],
        wallet_address=row["wallet_address"],
        decision_type=DecisionType(row["decision_type"]),
        decision_price_usd=row["decision_price_usd"],
        confidence_score=row["confidence_score"],
        status=DecisionStatus(row["status"]),
        previous_buy_id=row["previous_buy_id"],
        previous_buy_price_usd=row["previous_buy_price_usd"],
        execution_successful=bool(row["execution_successful"]),
        execution_price_usd=row["execution_price_usd"],
        price_24h_after_usd=row["price_24h_after_usd"],
        price_change_24h_pct=row["price_change_24h_pct"],
        price_7d_after_usd=row["price_7d_after_usd"],
        price_change_7d_pct=row["price_change_7d_pct"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class OutcomeStore(ABC):
    """Read access to the decision recorded for a historical observation."""

    @abstractmethod
    async def get_decision_by_observation_id(
        self, observation_id: str
    ) -> TradingDecision | None:
        """Return the decision made on this observation, or None."""
        ...


class DecisionStore(OutcomeStore):
    """Async SQLite store for trading decisions.

    Usage:
        async with DecisionDatabase("data/decisions.db") as database:
            store = DecisionStore(database)
            decision = await store.create_decision(...)
    """

    def __init__(self, database: DecisionDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def create_decision(
        self,
        observation_id: str,
        token_address: str,
        decision_type: DecisionType,
        decision_price_usd: float,
        confidence_score: float,
        wallet_address: str = "",
        created_at: datetime | None = None,
    ) -> TradingDecision:
        """Record a new PENDING_EXECUTION decision.

        A SELL is linked to the most recent prior BUY for the same token.
        When no BUY exists the linkage stays empty.
        """
        now = created_at or datetime.now(timezone.utc)
        decision = TradingDecision(
            id=str(uuid.uuid4()),
            observation_id=observation_id,
            token_address=token_address,
            wallet_address=wallet_address,
            decision_type=decision_type,
            decision_price_usd=decision_price_usd,
            confidence_score=confidence_score,
            created_at=now,
            updated_at=now,
        )

        if decision_type == DecisionType.SELL:
            previous_buy = await self.get_latest_buy(token_address, before=now)
            if previous_buy is not None:
                decision.previous_buy_id = previous_buy.id
                decision.previous_buy_price_usd = previous_buy.decision_price_usd
            else:
                logger.warning("sell_without_previous_buy", token_address=token_address)

        await self._insert(decision)
        logger.info(
            "decision_created",
            decision_id=decision.id,
            decision_type=decision_type.value,
            token_address=token_address,
        )
        return decision

    async def record_execution(
        self,
        decision_id: str,
        successful: bool,
        execution_price_usd: float | None = None,
    ) -> TradingDecision:
        """Attach the execution outcome and advance the status."""
        decision = await self._require(decision_id)
        target = (
            DecisionStatus.AWAITING_24H_RESULT if successful else DecisionStatus.EXECUTION_FAILED
        )
        self._check_transition(decision, target)

        decision.execution_successful = successful
        decision.execution_price_usd = execution_price_usd
        decision.status = target
        await self._update(decision)
        return decision

    async def record_24h_result(self, decision_id: str, price_after_usd: float) -> TradingDecision:
        """Attach the price 24h after the decision and compute its change."""
        decision = await self._require(decision_id)
        self._check_transition(decision, DecisionStatus.AWAITING_7D_RESULT)

        decision.price_24h_after_usd = price_after_usd
        decision.price_change_24h_pct = percent_change(self._entry_price(decision), price_after_usd)
        decision.status = DecisionStatus.AWAITING_7D_RESULT
        await self._update(decision)
        return decision

    async def record_7d_result(self, decision_id: str, price_after_usd: float) -> TradingDecision:
        """Attach the price 7d after the decision and complete it."""
        decision = await self._require(decision_id)
        self._check_transition(decision, DecisionStatus.COMPLETED)

        decision.price_7d_after_usd = price_after_usd
        decision.price_change_7d_pct = percent_change(self._entry_price(decision), price_after_usd)
        decision.status = DecisionStatus.COMPLETED
        await self._update(decision)
        return decision

    async def delete_all(self) -> int:
        """Remove every decision. Used to wipe seeded test data."""
        cursor = await self._database.db.execute("DELETE FROM trading_decisions")
        await self._database.db.commit()
        logger.warning("decisions_deleted", count=cursor.rowcount)
        return cursor.rowcount

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def get_decision(self, decision_id: str) -> TradingDecision | None:
        cursor = await self._database.db.execute(
            "SELECT * FROM trading_decisions WHERE id = ?", (decision_id,)
        )
        row = await cursor.fetchone()
        return _row_to_decision(row) if row else None

    async def get_decision_by_observation_id(
        self, observation_id: str
    ) -> TradingDecision | None:
        cursor = await self._database.db.execute(
            "SELECT * FROM trading_decisions WHERE observation_id = ? "
            "ORDER BY created_at DESC LIMIT 1",
            (observation_id,),
        )
        row = await cursor.fetchone()
        return _row_to_decision(row) if row else None

    async def get_latest_buy(
        self,
        token_address: str,
        before: datetime | None = None,
    ) -> TradingDecision | None:
        """Return the most recent BUY for a token, optionally created before a time."""
        query = (
            "SELECT * FROM trading_decisions WHERE token_address = ? AND decision_type = ?"
        )
        params: list = [token_address, DecisionType.BUY.value]
        if before is not None:
            query += " AND created_at <= ?"
            params.append(before.isoformat())
        query += " ORDER BY created_at DESC LIMIT 1"

        cursor = await self._database.db.execute(query, params)
        row = await cursor.fetchone()
        return _row_to_decision(row) if row else None

    async def list_decisions(
        self, status: DecisionStatus | None = None
    ) -> list[TradingDecision]:
        if status is None:
            cursor = await self._database.db.execute(
                "SELECT * FROM trading_decisions ORDER BY created_at"
            )
        else:
            cursor = await self._database.db.execute(
                "SELECT * FROM trading_decisions WHERE status = ? ORDER BY created_at",
                (status.value,),
            )
        rows = await cursor.fetchall()
        return [_row_to_decision(r) for r in rows]

    # ──────────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────────

    @staticmethod
    def _entry_price(decision: TradingDecision) -> float:
        return decision.execution_price_usd or decision.decision_price_usd

    @staticmethod
    def _check_transition(decision: TradingDecision, target: DecisionStatus) -> None:
        if target not in STATUS_TRANSITIONS[decision.status]:
            raise InvalidStatusTransition(
                f"Decision {decision.id}: cannot move from "
                f"{decision.status.value} to {target.value}"
            )

    async def _require(self, decision_id: str) -> TradingDecision:
        decision = await self.get_decision(decision_id)
        if decision is None:
            raise KeyError(f"Unknown decision: {decision_id}")
        return decision

    def _values(self, decision: TradingDecision) -> tuple:
        return (
            decision.id,
            decision.observation_id,
            decision.token_address,
            decision.wallet_address,
            decision.decision_type.value,
            decision.decision_price_usd,
            decision.confidence_score,
            decision.status.value,
            decision.previous_buy_id,
            decision.previous_buy_price_usd,
            int(decision.execution_successful),
            decision.execution_price_usd,
            decision.price_24h_after_usd,
            decision.price_change_24h_pct,
            decision.price_7d_after_usd,
            decision.price_change_7d_pct,
            decision.created_at.isoformat(),
            decision.updated_at.isoformat(),
        )

    async def _insert(self, decision: TradingDecision) -> None:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        await self._database.db.execute(
            f"INSERT INTO trading_decisions ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
            self._values(decision),
        )
        await self._database.db.commit()

    async def _update(self, decision: TradingDecision) -> None:
        decision.updated_at = datetime.now(timezone.utc)
        assignments = ", ".join(f"{c} = ?" for c in _COLUMNS[1:])
        values = self._values(decision)
        await self._database.db.execute(
            f"UPDATE trading_decisions SET {assignments} WHERE id = ?",
            (*values[1:], values[0]),
        )
        await self._database.db.commit()
        logger.debug("decision_updated", decision_id=decision.id, status=decision.status.value)

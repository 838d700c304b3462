"""Swap route selection over known liquidity pools.

A direct pool is used when both of its sides are deep enough; otherwise
the swap goes through an intermediate token (usually the wrapped native
asset). The outcome is returned as a value, never signalled by raising.
"""

from collections.abc import Callable
from dataclasses import dataclass

from agent.config import RoutingSettings
from agent.logging import get_logger
from agent.models import TokenData

logger = get_logger(__name__)

#: Minimum USD depth on each side of a pool for a direct swap.
MIN_POOL_LIQUIDITY_USD = 10_000.0


@dataclass(frozen=True)
class PoolInfo:
    """A pool between two tokens with the USD depth of each side."""

    address: str
    token_a: str
    token_b: str
    liquidity_a_usd: float
    liquidity_b_usd: float

    def liquidity_for(self, token: str) -> float:
        return self.liquidity_a_usd if token.lower() == self.token_a.lower() else self.liquidity_b_usd


@dataclass(frozen=True)
class RouteLeg:
    from_token: str
    to_token: str
    pool: str
    stable: bool = False


@dataclass(frozen=True)
class SingleHop:
    leg: RouteLeg

    @property
    def legs(self) -> tuple[RouteLeg, ...]:
        return (self.leg,)


@dataclass(frozen=True)
class MultiHop:
    legs: tuple[RouteLeg, RouteLeg]
    via: str


@dataclass(frozen=True)
class NoRoute:
    reason: str

    @property
    def legs(self) -> tuple[RouteLeg, ...]:
        return ()


Route = SingleHop | MultiHop | NoRoute

PoolLookup = Callable[[str, str], PoolInfo | None]


def _single_hop(
    token_in: str,
    token_out: str,
    find_pool: PoolLookup,
    min_liquidity_usd: float,
) -> SingleHop | str:
    pool = find_pool(token_in, token_out)
    if pool is None:
        return "no direct pool"
    if (
        pool.liquidity_for(token_in) < min_liquidity_usd
        or pool.liquidity_for(token_out) < min_liquidity_usd
    ):
        return "direct pool too shallow"
    return SingleHop(RouteLeg(token_in, token_out, pool.address))


def select_route(
    token_in: str,
    token_out: str,
    find_pool: PoolLookup,
    intermediate: str,
    min_liquidity_usd: float = MIN_POOL_LIQUIDITY_USD,
) -> Route:
    """Choose a direct route, else a route through intermediate, else NoRoute.

    Args:
        token_in: Token being sold.
        token_out: Token being bought.
        find_pool: Returns the pool between two tokens, or None.
        intermediate: Token to route through when no direct route qualifies.
        min_liquidity_usd: Per-side depth required for a direct route.
    """
    direct = _single_hop(token_in, token_out, find_pool, min_liquidity_usd)
    if isinstance(direct, SingleHop):
        return direct

    if intermediate in (token_in, token_out):
        return NoRoute(f"{direct}; intermediate is an endpoint")

    first = find_pool(token_in, intermediate)
    second = find_pool(intermediate, token_out)
    if first is None or second is None:
        logger.info("no_route_found", token_in=token_in, token_out=token_out, reason=direct)
        return NoRoute(f"{direct}; no pools through {intermediate}")

    logger.debug("multi_hop_route", token_in=token_in, token_out=token_out, via=intermediate)
    return MultiHop(
        legs=(
            RouteLeg(token_in, intermediate, first.address),
            RouteLeg(intermediate, token_out, second.address),
        ),
        via=intermediate,
    )


class RoutePlanner:
    """Plans the entry swap (quote token -> target) for a selected token.

    Pools come from a static registry; a pair is looked up in either order.

    Args:
        pools: Known pools.
        quote_token: Address of the token spent on entry.
        intermediate: Address used for two-hop routes.
        chain: Key into TokenMetadata.contract_addresses.
        min_liquidity_usd: Per-side depth required for a direct route.
    """

    def __init__(
        self,
        pools: list[PoolInfo],
        quote_token: str,
        intermediate: str,
        chain: str = "base",
        min_liquidity_usd: float = MIN_POOL_LIQUIDITY_USD,
    ) -> None:
        self._pools: dict[frozenset[str], PoolInfo] = {
            frozenset((p.token_a.lower(), p.token_b.lower())): p for p in pools
        }
        self._quote_token = quote_token
        self._intermediate = intermediate
        self._chain = chain
        self._min_liquidity_usd = min_liquidity_usd

    @classmethod
    def from_settings(cls, settings: RoutingSettings) -> "RoutePlanner | None":
        """Build a planner, or None when no quote token is configured."""
        if not settings.quote_token:
            return None
        pools = [
            PoolInfo(p.address, p.token_a, p.token_b, p.liquidity_a_usd, p.liquidity_b_usd)
            for p in settings.pools
        ]
        return cls(
            pools,
            settings.quote_token,
            settings.intermediate_token,
            chain=settings.chain,
            min_liquidity_usd=settings.min_pool_liquidity_usd,
        )

    def find_pool(self, token_a: str, token_b: str) -> PoolInfo | None:
        return self._pools.get(frozenset((token_a.lower(), token_b.lower())))

    def plan(self, token: TokenData) -> Route:
        address = token.metadata.contract_addresses.get(self._chain)
        if not address:
            return NoRoute(f"no {self._chain} contract for {token.symbol}")
        return select_route(
            self._quote_token,
            address,
            self.find_pool,
            self._intermediate,
            self._min_liquidity_usd,
        )

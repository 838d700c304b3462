"""Tests for DecisionDatabase and DecisionStore using an in-memory SQLite database.

Verifies:
- Schema creation and schema version bookkeeping
- SELL decisions link to the most recent prior BUY for the same token
- Lifecycle transitions and rejection of illegal moves
- 24h/7d outcome percentages against execution or decision price
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from agent.data.database import SCHEMA_VERSION, DecisionDatabase
from agent.data.store import DecisionStore, percent_change
from agent.exceptions import InvalidStatusTransition
from agent.models import DecisionStatus, DecisionType
from helpers import NOW


@pytest_asyncio.fixture
async def database():
    db = DecisionDatabase(":memory:")
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
def store(database: DecisionDatabase) -> DecisionStore:
    return DecisionStore(database)


class TestPercentChange:
    def test_change(self) -> None:
        assert percent_change(2.0, 3.0) == pytest.approx(50.0)

    def test_missing_base(self) -> None:
        assert percent_change(None, 3.0) is None
        assert percent_change(0.0, 3.0) is None


class TestDecisionDatabase:
    @pytest.mark.asyncio
    async def test_schema_version_set(self, database: DecisionDatabase) -> None:
        cursor = await database.db.execute("SELECT version FROM schema_version")
        rows = await cursor.fetchall()
        assert [r["version"] for r in rows] == [SCHEMA_VERSION]

    def test_db_requires_connect(self) -> None:
        with pytest.raises(RuntimeError):
            DecisionDatabase(":memory:").db


class TestCreateDecision:
    @pytest.mark.asyncio
    async def test_buy_roundtrip(self, store: DecisionStore) -> None:
        created = await store.create_decision(
            "obs-1", "0xtoken", DecisionType.BUY, 1.25, 0.82, created_at=NOW
        )

        loaded = await store.get_decision(created.id)
        assert loaded == created
        assert loaded.status == DecisionStatus.PENDING_EXECUTION
        assert loaded.previous_buy_id is None

    @pytest.mark.asyncio
    async def test_sell_links_latest_prior_buy(self, store: DecisionStore) -> None:
        await store.create_decision(
            "obs-1", "0xtoken", DecisionType.BUY, 1.0, 0.7, created_at=NOW - timedelta(days=3)
        )
        latest = await store.create_decision(
            "obs-2", "0xtoken", DecisionType.BUY, 1.2, 0.7, created_at=NOW - timedelta(days=1)
        )
        await store.create_decision(
            "obs-x", "0xother", DecisionType.BUY, 9.0, 0.7, created_at=NOW - timedelta(hours=1)
        )

        sell = await store.create_decision(
            "obs-3", "0xtoken", DecisionType.SELL, 1.5, 0.6, created_at=NOW
        )
        assert sell.previous_buy_id == latest.id
        assert sell.previous_buy_price_usd == 1.2

    @pytest.mark.asyncio
    async def test_sell_without_buy_has_no_link(self, store: DecisionStore) -> None:
        sell = await store.create_decision("obs-1", "0xtoken", DecisionType.SELL, 1.5, 0.6)
        assert sell.previous_buy_id is None
        assert sell.previous_buy_price_usd is None

    @pytest.mark.asyncio
    async def test_lookup_by_observation(self, store: DecisionStore) -> None:
        created = await store.create_decision("obs-9", "0xtoken", DecisionType.BUY, 1.0, 0.5)
        found = await store.get_decision_by_observation_id("obs-9")
        assert found is not None and found.id == created.id
        assert await store.get_decision_by_observation_id("missing") is None


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, store: DecisionStore) -> None:
        decision = await store.create_decision("obs-1", "0xtoken", DecisionType.BUY, 1.0, 0.8)

        executed = await store.record_execution(decision.id, True, execution_price_usd=2.0)
        assert executed.status == DecisionStatus.AWAITING_24H_RESULT

        after_24h = await store.record_24h_result(decision.id, 2.2)
        assert after_24h.status == DecisionStatus.AWAITING_7D_RESULT
        assert after_24h.price_change_24h_pct == pytest.approx(10.0)

        completed = await store.record_7d_result(decision.id, 1.8)
        assert completed.status == DecisionStatus.COMPLETED
        assert completed.price_change_7d_pct == pytest.approx(-10.0)

        stored = await store.get_decision(decision.id)
        assert stored.status == DecisionStatus.COMPLETED
        assert stored.execution_successful is True
        assert stored.price_change_24h_pct == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_change_against_decision_price_without_execution_price(
        self, store: DecisionStore
    ) -> None:
        decision = await store.create_decision("obs-1", "0xtoken", DecisionType.BUY, 4.0, 0.8)
        await store.record_execution(decision.id, True)
        updated = await store.record_24h_result(decision.id, 5.0)
        assert updated.price_change_24h_pct == pytest.approx(25.0)

    @pytest.mark.asyncio
    async def test_failed_execution_is_terminal(self, store: DecisionStore) -> None:
        decision = await store.create_decision("obs-1", "0xtoken", DecisionType.BUY, 1.0, 0.8)
        failed = await store.record_execution(decision.id, False)
        assert failed.status == DecisionStatus.EXECUTION_FAILED

        with pytest.raises(InvalidStatusTransition):
            await store.record_24h_result(decision.id, 1.1)

    @pytest.mark.asyncio
    async def test_cannot_skip_24h_result(self, store: DecisionStore) -> None:
        decision = await store.create_decision("obs-1", "0xtoken", DecisionType.BUY, 1.0, 0.8)
        with pytest.raises(InvalidStatusTransition):
            await store.record_7d_result(decision.id, 1.1)

    @pytest.mark.asyncio
    async def test_unknown_decision(self, store: DecisionStore) -> None:
        with pytest.raises(KeyError):
            await store.record_execution("nope", True)


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_by_status_and_delete_all(self, store: DecisionStore) -> None:
        first = await store.create_decision("obs-1", "0xa", DecisionType.BUY, 1.0, 0.5)
        await store.create_decision("obs-2", "0xb", DecisionType.BUY, 1.0, 0.5)
        await store.record_execution(first.id, False)

        pending = await store.list_decisions(DecisionStatus.PENDING_EXECUTION)
        assert [d.observation_id for d in pending] == ["obs-2"]
        assert len(await store.list_decisions()) == 2

        assert await store.delete_all() == 2
        assert await store.list_decisions() == []

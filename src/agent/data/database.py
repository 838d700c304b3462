"""Async SQLite database manager for trading decision persistence.

Uses aiosqlite for non-blocking database operations with WAL mode
for concurrent read/write performance.
"""

import os
from typing import Self

import aiosqlite

from agent.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS trading_decisions (
    id TEXT PRIMARY KEY,
    observation_id TEXT NOT NULL,
    token_address TEXT NOT NULL,
    wallet_address TEXT NOT NULL DEFAULT '',
    decision_type TEXT NOT NULL,
    decision_price_usd REAL NOT NULL,
    confidence_score REAL NOT NULL,
    status TEXT NOT NULL,
    previous_buy_id TEXT,
    previous_buy_price_usd REAL,
    execution_successful INTEGER NOT NULL DEFAULT 0,
    execution_price_usd REAL,
    price_24h_after_usd REAL,
    price_change_24h_pct REAL,
    price_7d_after_usd REAL,
    price_change_7d_pct REAL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_decisions_observation
    ON trading_decisions(observation_id);

CREATE INDEX IF NOT EXISTS idx_decisions_token_type_created
    ON trading_decisions(token_address, decision_type, created_at);
"""


class DecisionDatabase:
    """Async SQLite connection manager for trading decisions.

    Usage:
        async with DecisionDatabase("data/decisions.db") as database:
            store = DecisionStore(database)

    Pass ":memory:" as db_path for a throwaway database.
    """

    def __init__(self, db_path: str = "data/decisions.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """Access the raw aiosqlite connection.

        Raises RuntimeError if not connected.
        """
        if self._connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Open the connection, configure pragmas, and create the schema."""
        if self._db_path != ":memory:":
            db_dir = os.path.dirname(self._db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA synchronous=NORMAL")

        await self._create_tables()
        await self._ensure_schema_version()

        logger.info("decision_db_connected", db_path=self._db_path)

    async def close(self) -> None:
        """Close the database connection if open."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("decision_db_closed", db_path=self._db_path)

    async def _create_tables(self) -> None:
        assert self._connection is not None
        await self._connection.executescript(_CREATE_TABLES_SQL)
        await self._connection.executescript(_CREATE_INDEXES_SQL)
        await self._connection.commit()

    async def _ensure_schema_version(self) -> None:
        assert self._connection is not None
        cursor = await self._connection.execute("SELECT version FROM schema_version LIMIT 1")
        row = await cursor.fetchone()
        if row is None:
            await self._connection.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            await self._connection.commit()
            logger.info("schema_version_set", version=SCHEMA_VERSION)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()

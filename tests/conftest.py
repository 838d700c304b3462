"""Shared test fixtures for the similarity confidence agent."""

import pytest

from agent.config import AppSettings, BatchSettings, ScoringSettings
from agent.models import MarketObservation
from helpers import make_observation


@pytest.fixture
def observation() -> MarketObservation:
    return make_observation()


@pytest.fixture
def scoring_settings() -> ScoringSettings:
    return ScoringSettings()


@pytest.fixture
def batch_settings() -> BatchSettings:
    """Batch settings without retry delay."""
    return BatchSettings(failure_delay=0.0, max_consecutive_failures=10)


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (dummy API keys, in-memory database)."""
    return AppSettings(
        log_level="DEBUG",
        embedding={"api_key": "test-voyage-key"},  # type: ignore[arg-type]
        vector_store={"url": "https://db.example.test", "api_key": "test-supabase-key"},  # type: ignore[arg-type]
        decisions={"db_path": ":memory:"},  # type: ignore[arg-type]
    )

"""Tests for logging setup and run/token context binding."""

import asyncio
import json
import logging

import pytest
import structlog

from agent.logging import get_logger, run_context, setup_logging, token_context


@pytest.fixture
def reset_logging():
    yield
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()


class TestContextBinding:
    def test_run_and_token_keys(self) -> None:
        with run_context("run-1"):
            with token_context("AAA"):
                assert structlog.contextvars.get_contextvars() == {
                    "run_id": "run-1",
                    "token": "AAA",
                }
            assert structlog.contextvars.get_contextvars() == {"run_id": "run-1"}
        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_concurrent_tokens_do_not_leak(self) -> None:
        async def analyse(symbol: str) -> str:
            with token_context(symbol):
                await asyncio.sleep(0)
                return structlog.contextvars.get_contextvars()["token"]

        assert await asyncio.gather(analyse("AAA"), analyse("BBB")) == ["AAA", "BBB"]


class TestSetupLogging:
    def test_json_lines_carry_context(
        self, reset_logging, capsys: pytest.CaptureFixture[str]
    ) -> None:
        setup_logging("INFO", "json")

        with run_context("run-7"), token_context("CCC"):
            get_logger("agent.test").info("token_scored", confidence=0.81)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "token_scored"
        assert event["run_id"] == "run-7"
        assert event["token"] == "CCC"
        assert event["level"] == "info"

    def test_quiets_statement_loggers(self, reset_logging) -> None:
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("aiosqlite").level == logging.WARNING

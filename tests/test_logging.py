"""Tests for the loguru helpers."""

import pytest
from loguru import logger

from balance_projections.utils.logging import current_context, log_context, setup_logger


@pytest.fixture
def records():
    captured = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG", format="{message}")
    yield captured
    logger.remove(handler_id)


class TestLogContext:
    def test_nested_context(self, records) -> None:
        with log_context("outer", timed=False):
            with log_context("inner", timed=False):
                assert current_context() == "outer | inner"
                logger.info("working")
            assert current_context() == "outer"
        assert current_context() == ""

        working = [record for record in records if record["message"] == "working"]
        assert working[0]["extra"]["context"] == "outer | inner"

    def test_timed_logs_end(self, records) -> None:
        with log_context("task"):
            pass
        messages = [record["message"] for record in records]
        assert messages[0] == "Starting task"
        assert messages[-1].startswith("Ending task in ")

    def test_context_popped_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with log_context("failing"):
                raise RuntimeError("boom")
        assert current_context() == ""


class TestSetupLogger:
    def test_filters_below_level(self, capsys) -> None:
        setup_logger("warning")
        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "shown" in err
        assert "hidden" not in err

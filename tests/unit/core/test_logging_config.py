"""Tests for structured logging setup."""

import json
import logging

import pytest

from storefront.logging_config import (
    LogContext,
    clear_context,
    configure_logging,
    get_logger,
    set_context,
)


@pytest.fixture
def json_log_file(tmp_path):
    path = tmp_path / "storefront.log"
    configure_logging(level="INFO", json_output=True, log_file=str(path))
    yield path
    clear_context()
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)


def read_records(path):
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestConfigureLogging:
    def test_extra_fields_are_structured(self, json_log_file):
        get_logger("storefront.test").info("Order created", extra={"order_id": "abc"})

        record = read_records(json_log_file)[-1]
        assert record["event"] == "Order created"
        assert record["order_id"] == "abc"
        assert record["level"] == "info"
        assert record["logger"] == "storefront.test"

    def test_request_context_is_attached(self, json_log_file):
        set_context(correlation_id="req-1")
        get_logger("storefront.test").info("with context")
        clear_context()
        get_logger("storefront.test").info("without context")

        first, second = read_records(json_log_file)[-2:]
        assert first["correlation_id"] == "req-1"
        assert "correlation_id" not in second

    def test_log_context_is_scoped(self, json_log_file):
        with LogContext(command="seed"):
            get_logger("storefront.test").info("inside")
        get_logger("storefront.test").info("outside")

        inside, outside = read_records(json_log_file)[-2:]
        assert inside["command"] == "seed"
        assert "command" not in outside

    def test_level_filters(self, json_log_file):
        configure_logging(level="WARNING", json_output=True, log_file=str(json_log_file))
        get_logger("storefront.test").info("hidden")
        get_logger("storefront.test").warning("shown")

        events = [r["event"] for r in read_records(json_log_file)]
        assert "shown" in events
        assert "hidden" not in events

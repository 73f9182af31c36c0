"""Tests for structured logging."""

import io
import json
import logging
import sys

import pytest
from datetime import date, datetime
from decimal import Decimal

from sow_ledger.engine.resources import calculate_current_resources
from sow_ledger.logging_config import (
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from sow_ledger.models import ChangeRequest, LedgerValidationError, ModifyResource
from sow_ledger.stores import ChangeRequestRegistry, EventLog, Ledger


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestStructuredFormatter:
    def test_json_line_with_extras(self):
        record = logging.LogRecord("sow_ledger.test", logging.INFO, __file__, 1, "hello", (), None)
        record.contract_id = 10
        record.as_of = date(2024, 3, 1)
        record.total = Decimal("12.50")
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "sow_ledger.test"
        assert payload["message"] == "hello"
        assert payload["contract_id"] == 10
        assert payload["as_of"] == "2024-03-01"
        assert payload["total"] == "12.50"
        assert "ts" in payload

    def test_validation_errors_included(self):
        try:
            raise LedgerValidationError(["bad month"])
        except LedgerValidationError:
            record = logging.LogRecord("sow_ledger.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["exc_type"] == "LedgerValidationError"
        assert payload["exc_errors"] == ["bad month"]
        assert "traceback" in payload


class TestConfigureLogging:
    def test_namespace(self):
        assert get_logger("engine.snapshot").name == "sow_ledger.engine.snapshot"

    def test_idempotent(self):
        stream = io.StringIO()
        configure_logging(level=logging.INFO, stream=stream)
        configure_logging(level=logging.INFO, stream=stream)
        assert len(logging.getLogger("sow_ledger").handlers) == 1

    def test_level_filters(self):
        stream = io.StringIO()
        configure_logging(level=logging.WARNING, stream=stream)
        get_logger("test").info("quiet")
        get_logger("test").warning("loud")
        assert [line["message"] for line in _lines(stream)] == ["loud"]

    def test_orphaned_event_logged_at_debug(self):
        stream = io.StringIO()
        configure_logging(level=logging.DEBUG, stream=stream)
        ledger = Ledger(
            change_requests=ChangeRequestRegistry([ChangeRequest(id=1, contract_id=10, status="Approved")]),
            events=EventLog([
                ModifyResource(
                    id=3, change_request_id=1, effective_start=date(2024, 3, 1),
                    created_at=datetime(2024, 2, 1), engineer_id=42,
                ),
            ]),
        )
        assert calculate_current_resources(ledger, 10, date(2024, 3, 15)) == []

        orphaned = [line for line in _lines(stream) if line["message"] == "orphaned_resource_event"]
        assert len(orphaned) == 1
        assert orphaned[0]["level"] == "DEBUG"
        assert orphaned[0]["engineer_id"] == 42
        assert orphaned[0]["event_id"] == 3
        assert orphaned[0]["action"] == "MODIFY"

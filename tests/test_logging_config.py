"""Tests for structured logging configuration."""

import io
import json
import logging
from decimal import Decimal

from factorybooks.logging_config import configure_logging, get_logger, reset_logging


def test_logger_namespace():
    assert get_logger("posting").name == "factorybooks.posting"


def test_structured_output_includes_extra_fields():
    """Test that each record is one JSON line with its extra fields."""
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)

    get_logger("posting").info(
        "journal entry posted", extra={"entry_number": "JE-000001", "amount": Decimal("10.50")}
    )

    payload = json.loads(stream.getvalue().strip())
    assert payload["level"] == "INFO"
    assert payload["logger"] == "factorybooks.posting"
    assert payload["message"] == "journal entry posted"
    assert payload["entry_number"] == "JE-000001"
    assert payload["amount"] == "10.50"


def test_level_filters_records():
    stream = io.StringIO()
    configure_logging(level=logging.WARNING, stream=stream)

    get_logger("audit").info("ignored")
    get_logger("audit").warning("kept")

    lines = stream.getvalue().strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["message"] == "kept"


def test_configure_is_idempotent():
    """Test that a second configure call adds no handler."""
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())
    assert len(logging.getLogger("factorybooks").handlers) == 1


def test_exception_details_are_captured():
    stream = io.StringIO()
    configure_logging(level="ERROR", stream=stream)

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        get_logger("database").exception("write failed")

    payload = json.loads(stream.getvalue().strip())
    assert payload["exc_type"] == "RuntimeError"
    assert payload["exc_message"] == "boom"
    assert "Traceback" in payload["traceback"]


def test_reset_allows_reconfiguration():
    configure_logging(stream=io.StringIO())
    reset_logging()
    assert logging.getLogger("factorybooks").handlers == []

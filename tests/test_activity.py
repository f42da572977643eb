"""Tests for the activity log service."""

from datetime import date
from decimal import Decimal

from factorybooks.domain.entities import ChequeStatus
from factorybooks.domain.errors import PersistenceError


def test_metadata_is_stored_as_json(temp_db, activity):
    log_id = activity.log_activity(
        action="cheque_cashed",
        module="cheques",
        description="Cheque 1 cashed",
        target_id="chq-1",
        metadata={
            "amount": Decimal("12.50"),
            "status": ChequeStatus.CASHED,
            "on": date(2024, 1, 2),
            "periods": ("2024-01",),
        },
    )

    log = temp_db.list_activity_logs()[0]
    assert log.id == log_id
    assert log.user_id == "tester"
    assert log.target_id == "chq-1"
    assert log.metadata == {
        "amount": "12.50",
        "status": "cashed",
        "on": "2024-01-02",
        "periods": ["2024-01"],
    }


def test_store_failure_is_not_raised(temp_db, activity, monkeypatch):
    """Test that a failed write is logged and swallowed."""

    def fail(**kwargs):
        raise PersistenceError("disk full")

    monkeypatch.setattr(temp_db, "add_activity_log", fail)

    assert activity.log_activity("x", "y", "z") is None


def test_store_failure_warning_names_the_module(temp_db, activity, monkeypatch, caplog):
    def fail(**kwargs):
        raise PersistenceError("disk full")

    monkeypatch.setattr(temp_db, "add_activity_log", fail)

    with caplog.at_level("WARNING", logger="factorybooks.activity"):
        activity.log_activity("cheque_cashed", "cheques", "Cashed CHQ-1")

    record = caplog.records[-1]
    assert record.activity_module == "cheques"
    assert record.error == "disk full"


def test_recent_limits_results(activity):
    for i in range(3):
        activity.log_activity("a", "m", f"entry {i}")
    assert len(activity.recent(limit=2)) == 2

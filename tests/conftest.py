"""Shared pytest fixtures for factorybooks tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest

from factorybooks.database.factories import create_sqlite_database
from factorybooks.domain.activity import ActivityLogService
from factorybooks.domain.audit import ReconciliationService
from factorybooks.domain.chart_of_accounts import ChartOfAccountsService
from factorybooks.domain.cheques import ChequeService
from factorybooks.domain.depreciation import DepreciationScheduler
from factorybooks.domain.entities import LedgerType, PaymentStatus
from factorybooks.domain.posting import JournalPostingEngine
from factorybooks.domain.reports import ReportService
from factorybooks.logging_config import reset_logging

TODAY = date(2024, 4, 15)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers bound to streams of earlier CLI invocations."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path, tenant_id="default")
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A fixed clock: 2024-04-15."""
    return lambda: TODAY


@pytest.fixture
def chart(temp_db):
    """Create a seeded ChartOfAccountsService."""
    service = ChartOfAccountsService(temp_db)
    service.seed()
    return service


@pytest.fixture
def engine(temp_db, chart, clock):
    """Create a JournalPostingEngine over a seeded chart."""
    return JournalPostingEngine(temp_db, today=clock)


@pytest.fixture
def activity(temp_db):
    """Create an ActivityLogService with a temporary database."""
    return ActivityLogService(temp_db, user_id="tester")


@pytest.fixture
def reports(temp_db, chart):
    """Create a ReportService over a seeded chart."""
    return ReportService(temp_db)


@pytest.fixture
def reconciliation(temp_db, activity):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db, activity=activity)


@pytest.fixture
def scheduler(temp_db, engine, activity, clock):
    """Create a DepreciationScheduler with the fixed clock."""
    return DepreciationScheduler(temp_db, engine=engine, activity=activity, today=clock)


@pytest.fixture
def cheques(temp_db, engine, activity, clock):
    """Create a ChequeService with the fixed clock."""
    return ChequeService(temp_db, engine=engine, activity=activity, today=clock)


@pytest.fixture
def posted_ledger_entry(temp_db, engine):
    """Record a paid sale and post it. Returns (ledger entry, posting result)."""

    def _post(
        amount="1000.00",
        type=LedgerType.INCOME,
        category="sales",
        on_date=date(2024, 1, 10),
        is_arap_entry=False,
    ):
        entry_id = temp_db.create_ledger_entry(
            type=type,
            amount=Decimal(amount),
            date=on_date,
            description=f"{category} {amount}",
            category=category,
            is_arap_entry=is_arap_entry,
            payment_status=PaymentStatus.UNPAID if is_arap_entry else PaymentStatus.PAID,
        )
        entry = temp_db.get_ledger_entry(entry_id)
        result = engine.post_ledger_entry(entry)
        assert result.success, result.error
        return entry, result

    return _post


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

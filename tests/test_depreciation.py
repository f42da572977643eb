"""Tests for the depreciation scheduler."""

import pytest
from datetime import date
from decimal import Decimal

from factorybooks.database.factories import create_sqlite_database
from factorybooks.domain.chart_of_accounts import AccountCodes
from factorybooks.domain.depreciation import DepreciationScheduler, monthly_depreciation_for
from factorybooks.domain.entities import LedgerType, PostingResult, SourceType
from factorybooks.domain.errors import PersistenceError, ValidationError


@pytest.fixture
def machine(scheduler):
    """A 12000 machine over 12 months bought 2024-01-01."""
    return scheduler.add_asset("Lathe", date(2024, 1, 1), "12000", useful_life_months=12)


@pytest.fixture
def rival(temp_db, clock):
    """A second scheduler on its own handle to the same books."""
    other = create_sqlite_database(database_path=temp_db.database_path, tenant_id=temp_db.tenant_id)
    other.connect()
    yield DepreciationScheduler(other, today=clock)
    other.disconnect()


@pytest.fixture
def race_on_commit(temp_db, rival, monkeypatch):
    """Let the rival process a period just before our batch commits."""

    def _race(period):
        original_commit = temp_db.commit_batch
        raced = []

        def commit_batch(batch):
            if not raced:
                raced.append(period)
                assert rival.run_for_period(period).success
            return original_commit(batch)

        monkeypatch.setattr(temp_db, "commit_batch", commit_batch)

    return _race


class TestAddAsset:
    """Tests for registering fixed assets."""

    def test_straight_line_charge(self, machine):
        assert machine.monthly_depreciation == Decimal("1000.00")
        assert machine.book_value == Decimal("12000.00")
        assert machine.accumulated_depreciation == Decimal("0.00")
        assert machine.last_depreciation_date is None

    def test_charge_is_rounded(self):
        assert monthly_depreciation_for(Decimal("1000"), Decimal("0"), 3) == Decimal("333.33")

    def test_salvage_is_excluded(self, scheduler):
        asset = scheduler.add_asset("Van", date(2024, 1, 1), 6000, 24, salvage_value=1200)
        assert asset.monthly_depreciation == Decimal("200.00")

    @pytest.mark.parametrize(
        "cost,life,salvage",
        [(0, 12, 0), (-100, 12, 0), (1000, 0, 0), (1000, 12, 1500), (1000, 12, -1), ("abc", 12, 0)],
    )
    def test_invalid_figures(self, scheduler, cost, life, salvage):
        with pytest.raises(ValidationError):
            scheduler.add_asset("Bad", date(2024, 1, 1), cost, life, salvage_value=salvage)


class TestPendingPeriods:
    """Tests for get_pending_periods."""

    def test_no_assets(self, scheduler):
        assert scheduler.get_pending_periods() == []

    def test_from_purchase_month_to_last_month(self, scheduler, machine):
        """Test that the current month (April) is never pending."""
        assert scheduler.get_pending_periods() == ["2024-01", "2024-02", "2024-03"]

    def test_asset_bought_this_month(self, scheduler):
        scheduler.add_asset("New", date(2024, 4, 2), 100, 10)
        assert scheduler.get_pending_periods() == []

    def test_processed_periods_are_skipped(self, scheduler, machine):
        scheduler.run_for_period("2024-02")
        assert scheduler.get_pending_periods() == ["2024-01", "2024-03"]


class TestRunForPeriod:
    """Tests for run_for_period."""

    def test_writes_records_ledger_and_journal(self, temp_db, scheduler, machine):
        result = scheduler.run_for_period("2024-01")

        assert result.success
        assert result.assets_count == 1
        assert result.total_depreciation == Decimal("1000.00")

        ledger = temp_db.get_ledger_entry(result.ledger_entry_id)
        assert ledger.type == LedgerType.EXPENSE
        assert ledger.date == date(2024, 1, 31)
        assert ledger.auto_generated

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.debit_account_code == AccountCodes.DEPRECIATION_EXPENSE
        assert journal.credit_account_code == AccountCodes.ACCUMULATED_DEPRECIATION
        assert journal.amount == Decimal("1000.00")
        assert journal.source.source_type == SourceType.DEPRECIATION
        assert journal.source.document_id == temp_db.get_depreciation_run("2024-01").id
        assert journal.source.transaction_id == result.ledger_entry_id

        records = temp_db.list_depreciation_records(asset_id=machine.id)
        assert len(records) == 1
        assert records[0].accumulated_before == Decimal("0.00")
        assert records[0].accumulated_after == Decimal("1000.00")
        assert records[0].book_value_after == Decimal("11000.00")

        stored = temp_db.get_fixed_asset(machine.id)
        assert stored.accumulated_depreciation == Decimal("1000.00")
        assert stored.last_depreciation_date == date(2024, 1, 31)

    def test_second_run_is_already_processed(self, temp_db, scheduler, machine):
        """Test that a period is depreciated at most once."""
        first = scheduler.run_for_period("2024-01")
        second = scheduler.run_for_period("2024-01")

        assert first.success
        assert not second.success
        assert second.already_processed
        assert len(temp_db.list_journal_entries()) == 1
        assert temp_db.get_fixed_asset(machine.id).accumulated_depreciation == Decimal("1000.00")

    def test_period_committed_by_another_handle(self, temp_db, scheduler, machine, race_on_commit):
        """Test that losing the race to the fence writes nothing."""
        race_on_commit("2024-01")

        result = scheduler.run_for_period("2024-01")

        assert not result.success
        assert result.already_processed
        assert len(temp_db.list_depreciation_runs()) == 1
        assert len(temp_db.list_depreciation_records(period_label="2024-01")) == 1
        assert len(temp_db.list_ledger_entries()) == 1
        assert len(temp_db.list_journal_entries()) == 1
        assert temp_db.get_fixed_asset(machine.id).accumulated_depreciation == Decimal("1000.00")

    @pytest.mark.parametrize("period", ["2024-04", "2024-05"])
    def test_open_period_rejected(self, temp_db, scheduler, machine, period):
        result = scheduler.run_for_period(period)

        assert not result.success
        assert "not closed" in result.error
        assert temp_db.list_depreciation_runs() == []

    def test_invalid_label(self, scheduler, machine):
        result = scheduler.run_for_period("2024-13")
        assert not result.success
        assert not result.already_processed

    def test_locked_period(self, temp_db, scheduler, machine):
        temp_db.set_lock_date(date(2024, 1, 31))

        result = scheduler.run_for_period("2024-01")

        assert not result.success
        assert "lock date" in result.error
        assert temp_db.get_depreciation_run("2024-01") is None

    def test_asset_bought_late_in_month_is_charged(self, scheduler):
        scheduler.add_asset("Drill", date(2024, 1, 31), 1200, 12)
        assert scheduler.run_for_period("2024-01").total_depreciation == Decimal("100.00")

    def test_activity_logged(self, temp_db, scheduler, machine):
        scheduler.run_for_period("2024-01")

        log = temp_db.list_activity_logs()[0]
        assert log.action == "depreciation_run"
        assert log.metadata["period"] == "2024-01"


class TestRunAllPending:
    """Tests for run_all_pending."""

    def test_end_to_end(self, temp_db, scheduler, machine, reports):
        """Test three closed months at 1000 each."""
        result = scheduler.run_all_pending()

        assert result.success
        assert result.processed_periods == ["2024-01", "2024-02", "2024-03"]
        assert result.total_depreciation == Decimal("3000.00")
        assert result.assets[0].book_value == Decimal("9000.00")

        stored = temp_db.get_fixed_asset(machine.id)
        assert stored.accumulated_depreciation == Decimal("3000.00")
        assert stored.book_value == Decimal("9000.00")
        assert reports.account_balance(AccountCodes.ACCUMULATED_DEPRECIATION) == Decimal("3000.00")
        assert scheduler.get_pending_periods() == []
        assert scheduler.run_all_pending().processed_periods == []

    def test_last_charge_is_capped(self, temp_db, scheduler):
        asset = scheduler.add_asset("Tool", date(2024, 1, 1), 1000, 3, monthly_depreciation=400)

        result = scheduler.run_all_pending()

        runs = temp_db.list_depreciation_runs()
        assert [r.total_depreciation for r in runs] == [
            Decimal("400.00"),
            Decimal("400.00"),
            Decimal("200.00"),
        ]
        assert result.total_depreciation == Decimal("1000.00")
        assert temp_db.get_fixed_asset(asset.id).book_value == Decimal("0.00")

    def test_zero_total_period_writes_fence_only(self, temp_db, scheduler):
        """Test that periods after full depreciation are closed without entries."""
        scheduler.add_asset("Laptop", date(2024, 1, 1), 900, 1)

        result = scheduler.run_all_pending()

        assert result.processed_periods == ["2024-01", "2024-02", "2024-03"]
        runs = {r.period_label: r for r in temp_db.list_depreciation_runs()}
        assert runs["2024-02"].total_depreciation == Decimal("0.00")
        assert runs["2024-02"].ledger_entry_id is None
        assert len(temp_db.list_journal_entries()) == 1

    def test_stops_at_first_failure(self, temp_db, scheduler, engine, machine, monkeypatch):
        """Test that a failed February post stops the run before March."""
        original_post = engine.post

        def failing_post(template_id, amount, date, *args, **kwargs):
            if date.month == 2:
                return PostingResult(success=False, error=PersistenceError("disk full"))
            return original_post(template_id, amount, date, *args, **kwargs)

        monkeypatch.setattr(engine, "post", failing_post)

        result = scheduler.run_all_pending()

        assert not result.success
        assert result.processed_periods == ["2024-01"]
        assert result.failed_at == "2024-02"
        assert "disk full" in result.errors[0]
        assert temp_db.get_depreciation_run("2024-03") is None
        # February's batch stays committed
        assert temp_db.get_depreciation_run("2024-02") is not None
        assert temp_db.get_fixed_asset(machine.id).accumulated_depreciation == Decimal("2000.00")
        assert len(temp_db.list_journal_entries()) == 1

        monkeypatch.undo()
        resumed = scheduler.run_all_pending()
        assert resumed.processed_periods == ["2024-03"]

    def test_period_taken_by_another_run_is_skipped(
        self, temp_db, scheduler, machine, race_on_commit, reports
    ):
        race_on_commit("2024-01")

        result = scheduler.run_all_pending()

        assert result.success
        assert result.failed_at is None
        assert result.skipped_periods == ["2024-01"]
        assert result.processed_periods == ["2024-02", "2024-03"]
        assert result.total_depreciation == Decimal("2000.00")
        assert result.assets[0].accumulated_depreciation == Decimal("3000.00")
        assert temp_db.get_fixed_asset(machine.id).book_value == Decimal("9000.00")
        assert len(temp_db.list_journal_entries()) == 3
        assert reports.account_balance(AccountCodes.ACCUMULATED_DEPRECIATION) == Decimal("3000.00")

    def test_several_assets(self, temp_db, scheduler, machine):
        scheduler.add_asset("Forklift", date(2024, 2, 15), 2400, 24)

        result = scheduler.run_all_pending()

        assert result.total_depreciation == Decimal("3200.00")
        runs = {r.period_label: r for r in temp_db.list_depreciation_runs()}
        assert runs["2024-01"].assets_count == 1
        assert runs["2024-02"].assets_count == 2


class TestStatus:
    """Tests for get_depreciation_status."""

    def test_estimates_pending_work(self, scheduler, machine):
        status = scheduler.get_depreciation_status()

        assert status.pending_count == 3
        assert status.oldest_pending == "2024-01"
        assert status.estimated_total == Decimal("3000.00")
        assert status.last_processed is None

    def test_after_one_period(self, scheduler, machine):
        scheduler.run_for_period("2024-01")

        status = scheduler.get_depreciation_status()

        assert status.pending_periods == ["2024-02", "2024-03"]
        assert status.estimated_total == Decimal("2000.00")
        assert status.last_processed == "2024-01"

"""Tests for the journal posting engine."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from factorybooks.database.factories import create_sqlite_database
from factorybooks.domain import templates
from factorybooks.domain.chart_of_accounts import AccountCodes, ChartOfAccountsService
from factorybooks.domain.entities import (
    JournalSource,
    LedgerType,
    PaymentDirection,
    PaymentStatus,
    SourceType,
)
from factorybooks.domain.errors import NotFoundError, ValidationError
from factorybooks.domain.posting import JournalPostingEngine
from factorybooks.domain.reports import ReportService


class TestPost:
    """Tests for JournalPostingEngine.post."""

    def test_post_writes_balanced_entry(self, temp_db, engine):
        """Test that post writes one entry with the template's accounts."""
        result = engine.post(templates.OWNER_CAPITAL, Decimal("50000"), date(2024, 1, 1))

        assert result.success
        assert result.error is None
        assert result.entry_number == "JE-000001"
        entry = temp_db.get_journal_entry(result.journal_entry_id)
        assert entry.debit_account_code == AccountCodes.CASH
        assert entry.credit_account_code == AccountCodes.OWNER_CAPITAL
        assert entry.debit_amount == entry.credit_amount == Decimal("50000.00")
        assert entry.description == "Owner capital contribution"
        assert entry.template_id == templates.OWNER_CAPITAL
        assert entry.source is None

    def test_amount_is_rounded_half_up(self, temp_db, engine):
        result = engine.post(templates.OWNER_CAPITAL, "10.005", date(2024, 1, 1))
        assert temp_db.get_journal_entry(result.journal_entry_id).amount == Decimal("10.01")

    def test_datetime_is_truncated_to_date(self, temp_db, engine):
        result = engine.post(templates.OWNER_CAPITAL, 1, datetime(2024, 1, 1, 15, 30))
        assert temp_db.get_journal_entry(result.journal_entry_id).date == date(2024, 1, 1)

    def test_source_is_stored(self, temp_db, engine):
        source = JournalSource(SourceType.PAYMENT, "pay-1", transaction_id="led-1")
        result = engine.post(templates.PAYMENT_RECEIPT, 10, date(2024, 1, 1), source=source)
        assert temp_db.get_journal_entry(result.journal_entry_id).source == source

    @pytest.mark.parametrize("amount", [0, -5, "0.001", "abc", None, float("nan")])
    def test_invalid_amount(self, temp_db, engine, amount):
        """Test that non-positive or non-numeric amounts fail without writing."""
        result = engine.post(templates.OWNER_CAPITAL, amount, date(2024, 1, 1))

        assert not result.success
        assert isinstance(result.error, ValidationError)
        assert temp_db.list_journal_entries() == []

    def test_unknown_template(self, temp_db, engine):
        result = engine.post("NO_SUCH_TEMPLATE", 10, date(2024, 1, 1))
        assert not result.success
        assert isinstance(result.error, ValidationError)
        assert "Unknown journal template" in str(result.error)

    def test_invalid_date(self, engine):
        result = engine.post(templates.OWNER_CAPITAL, 10, "2024-01-01")
        assert isinstance(result.error, ValidationError)

    def test_raise_for_error(self, engine):
        result = engine.post(templates.OWNER_CAPITAL, 0, date(2024, 1, 1))
        with pytest.raises(ValidationError):
            result.raise_for_error()


class TestLockDate:
    """Tests for posting against the lock date."""

    def test_post_on_or_before_lock_date_fails(self, temp_db, engine):
        temp_db.set_lock_date(date(2024, 1, 31))

        on_lock = engine.post(templates.OWNER_CAPITAL, 10, date(2024, 1, 31))
        before = engine.post(templates.OWNER_CAPITAL, 10, date(2024, 1, 1))
        after = engine.post(templates.OWNER_CAPITAL, 10, date(2024, 2, 1))

        assert isinstance(on_lock.error, ValidationError)
        assert "lock date" in str(on_lock.error)
        assert isinstance(before.error, ValidationError)
        assert after.success
        assert len(temp_db.list_journal_entries()) == 1

    def test_reversal_into_locked_period_fails(self, temp_db, engine):
        result = engine.post(templates.OWNER_CAPITAL, 10, date(2024, 2, 1))
        temp_db.set_lock_date(date(2024, 2, 29))

        reversal = engine.reverse(result.journal_entry_id, date=date(2024, 2, 15))

        assert isinstance(reversal.error, ValidationError)
        assert engine.reverse(result.journal_entry_id, date=date(2024, 3, 1)).success


class TestReverse:
    """Tests for JournalPostingEngine.reverse."""

    def test_reverse_swaps_accounts(self, temp_db, engine):
        """Test that a reversal mirrors the original and links both."""
        original = engine.post(templates.OWNER_DRAWINGS, 300, date(2024, 1, 5))

        result = engine.reverse(original.journal_entry_id, reason="posted twice")

        assert result.success
        reversal = temp_db.get_journal_entry(result.journal_entry_id)
        assert reversal.debit_account_code == AccountCodes.CASH
        assert reversal.credit_account_code == AccountCodes.OWNER_DRAWINGS
        assert reversal.amount == Decimal("300.00")
        assert reversal.date == date(2024, 4, 15)
        assert reversal.description == "Reversal of JE-000001: posted twice"
        assert reversal.reverses_entry_id == original.journal_entry_id
        assert (
            temp_db.get_journal_entry(original.journal_entry_id).reversed_by_entry_id
            == reversal.id
        )

    def test_reverse_twice_fails(self, engine):
        original = engine.post(templates.OWNER_CAPITAL, 10, date(2024, 1, 1))
        engine.reverse(original.journal_entry_id)

        again = engine.reverse(original.journal_entry_id)

        assert not again.success
        assert isinstance(again.error, ValidationError)
        assert "already reversed" in str(again.error)

    def test_reversal_cannot_be_reversed(self, engine):
        original = engine.post(templates.OWNER_CAPITAL, 10, date(2024, 1, 1))
        reversal = engine.reverse(original.journal_entry_id)

        result = engine.reverse(reversal.journal_entry_id)

        assert isinstance(result.error, ValidationError)

    def test_reverse_missing_entry(self, engine):
        result = engine.reverse("missing")
        assert isinstance(result.error, NotFoundError)

    def test_reversed_pair_nets_to_zero(self, engine, reports):
        original = engine.post(templates.OWNER_CAPITAL, 500, date(2024, 1, 1))
        engine.reverse(original.journal_entry_id)

        assert reports.account_balance(AccountCodes.CASH) == Decimal("0.00")
        assert reports.account_balance(AccountCodes.OWNER_CAPITAL) == Decimal("0.00")


class TestBusinessEvents:
    """Tests for posting ledger entries and payments."""

    def test_paid_sale_debits_cash(self, temp_db, engine, posted_ledger_entry):
        entry, result = posted_ledger_entry(amount="1200.00", category="sales")

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert (journal.debit_account_code, journal.credit_account_code) == (
            AccountCodes.CASH,
            AccountCodes.SALES_REVENUE,
        )
        assert journal.source == JournalSource(SourceType.LEDGER, entry.id, transaction_id=entry.id)

    def test_credit_sale_debits_receivable(self, temp_db, posted_ledger_entry):
        _, result = posted_ledger_entry(category="services", is_arap_entry=True)

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.debit_account_code == AccountCodes.ACCOUNTS_RECEIVABLE
        assert journal.credit_account_code == AccountCodes.SERVICE_REVENUE

    def test_expense_by_category(self, temp_db, posted_ledger_entry):
        _, result = posted_ledger_entry(type=LedgerType.EXPENSE, category="rent")

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.debit_account_code == AccountCodes.RENT_EXPENSE
        assert journal.credit_account_code == AccountCodes.CASH

    def test_balance_sheet_category_uses_its_template(self, temp_db, posted_ledger_entry):
        """Test that owner capital is not booked as revenue."""
        _, result = posted_ledger_entry(category="Owner Capital")

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.template_id == templates.OWNER_CAPITAL
        assert journal.credit_account_code == AccountCodes.OWNER_CAPITAL

    @pytest.mark.parametrize(
        "ledger_type, template_id, credit_account",
        [
            (LedgerType.EQUITY, templates.OWNER_CAPITAL, AccountCodes.OWNER_CAPITAL),
            (LedgerType.LOAN, templates.LOAN_RECEIVED, AccountCodes.LOANS_PAYABLE),
        ],
    )
    def test_equity_and_loan_entries(
        self, temp_db, posted_ledger_entry, ledger_type, template_id, credit_account
    ):
        """Test that uncategorized equity and loan entries never hit expenses."""
        _, result = posted_ledger_entry(amount="5000.00", type=ledger_type, category=None)

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.template_id == template_id
        assert journal.debit_account_code == AccountCodes.CASH
        assert journal.credit_account_code == credit_account

    def test_category_template_wins_over_loan_type(self, temp_db, posted_ledger_entry):
        _, result = posted_ledger_entry(type=LedgerType.LOAN, category="loan repayment")

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.template_id == templates.LOAN_REPAYMENT
        assert journal.credit_account_code == AccountCodes.CASH

    def test_immediate_settlement(self, temp_db, engine):
        entry_id = temp_db.create_ledger_entry(
            LedgerType.EXPENSE,
            Decimal("80.00"),
            date(2024, 1, 3),
            category="utilities",
            is_arap_entry=True,
            payment_status=PaymentStatus.PAID,
        )
        result = engine.post_ledger_entry(temp_db.get_ledger_entry(entry_id), immediate_settlement=True)

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.credit_account_code == AccountCodes.CASH

    def test_payment_receipt(self, temp_db, engine):
        payment_id = temp_db.create_payment(
            Decimal("250.00"), PaymentDirection.RECEIPT, date(2024, 1, 4), linked_transaction_id="led-9"
        )

        result = engine.post_payment(temp_db.get_payment(payment_id))

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.template_id == templates.PAYMENT_RECEIPT
        assert journal.source == JournalSource(SourceType.PAYMENT, payment_id, transaction_id="led-9")

    def test_endorsement_payment_skips_cash(self, temp_db, engine):
        """Test that a payment moving no cash clears AR against AP."""
        payment_id = temp_db.create_payment(
            Decimal("90.00"), PaymentDirection.DISBURSEMENT, date(2024, 1, 4), is_endorsement=True
        )

        result = engine.post_payment(temp_db.get_payment(payment_id))

        journal = temp_db.get_journal_entry(result.journal_entry_id)
        assert journal.template_id == templates.ENDORSEMENT
        assert not journal.touches(AccountCodes.CASH, AccountCodes.BANK)


_FIXED_TEMPLATES = sorted(
    t.id
    for t in templates.JOURNAL_TEMPLATES.values()
    if t.debit_account is not None and t.credit_account is not None
)

_postings = st.lists(
    st.tuples(
        st.sampled_from(_FIXED_TEMPLATES + [templates.LEDGER_INCOME, templates.LEDGER_EXPENSE]),
        st.decimals(min_value=Decimal("0.01"), max_value=Decimal("1000000"), places=2),
        st.sampled_from(["sales", "services", "rent", "raw materials", "unknown"]),
        st.booleans(),
    ),
    min_size=1,
    max_size=1000,
)


@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow, HealthCheck.data_too_large])
@given(postings=_postings)
def test_debits_always_equal_credits(postings):
    """Property: any sequence of valid posts leaves the books balanced."""
    db = create_sqlite_database(database_path=":memory:", tenant_id="prop")
    ChartOfAccountsService(db).seed()
    engine = JournalPostingEngine(db, today=lambda: date(2024, 6, 30))

    for template_id, amount, category, on_account in postings:
        result = engine.post(
            template_id,
            amount,
            date(2024, 1, 1),
            context={"category": category, "is_arap_entry": on_account},
        )
        assert result.success, result.error

    entries = db.list_journal_entries()
    assert len(entries) == len(postings)
    assert all(e.debit_amount == e.credit_amount for e in entries)

    reports = ReportService(db)
    trial_balance = reports.compute_trial_balance()
    assert trial_balance.total_debits == trial_balance.total_credits
    assert trial_balance.total_debits == sum((a for _, a, _, _ in postings), Decimal("0"))
    assert reports.build_balance_sheet().is_balanced
    db.disconnect()

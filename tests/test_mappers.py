"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from factorybooks.database.models import (
    Account as ORMAccount,
    ActivityLog as ORMActivityLog,
    Cheque as ORMCheque,
    JournalEntry as ORMJournalEntry,
    LedgerEntry as ORMLedgerEntry,
)
from factorybooks.database.mappers import (
    account_to_domain,
    activity_log_to_domain,
    cheque_to_domain,
    journal_entry_to_domain,
    ledger_entry_to_domain,
)
from factorybooks.domain.entities import (
    Account,
    AccountType,
    ChequeStatus,
    JournalEntry,
    JournalSource,
    LedgerType,
    NormalSide,
    PaymentStatus,
    SourceType,
)


def _orm_journal_entry(**overrides):
    fields = dict(
        id="a" * 32,
        tenant_id="default",
        sequence_number=7,
        entry_number="JE-000007",
        date=date(2024, 1, 15),
        description="Rent",
        debit_account_code="5200",
        credit_account_code="1000",
        debit_amount=Decimal("800"),
        credit_amount=Decimal("800"),
        template_id="LEDGER_EXPENSE",
        source_type=None,
        source_id=None,
        transaction_id=None,
        created_at=datetime.now(UTC),
    )
    fields.update(overrides)
    return ORMJournalEntry(**fields)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id=1,
            tenant_id="default",
            code="1510",
            name="Accumulated Depreciation",
            name_localized="Accumulated Depreciation",
            type="asset",
            normal_side="credit",
            parent_code="1500",
            created_at=datetime.now(UTC),
        )

        account = account_to_domain(orm_account)

        assert isinstance(account, Account)
        assert account.type == AccountType.ASSET
        assert account.normal_side == NormalSide.CREDIT
        assert account.parent_code == "1500"
        assert account.is_contra


class TestJournalEntryMapper:
    """Tests for JournalEntry mapper."""

    def test_amounts_are_cents(self):
        entry = journal_entry_to_domain(_orm_journal_entry())

        assert isinstance(entry, JournalEntry)
        assert entry.amount == Decimal("800.00")
        assert str(entry.debit_amount) == "800.00"
        assert entry.source is None

    def test_source_is_rebuilt(self):
        entry = journal_entry_to_domain(
            _orm_journal_entry(source_type="cheque", source_id="c1", transaction_id="l1")
        )
        assert entry.source == JournalSource(SourceType.CHEQUE, "c1", transaction_id="l1")

    def test_source_without_document_is_dropped(self):
        entry = journal_entry_to_domain(_orm_journal_entry(source_type="ledger"))
        assert entry.source is None


class TestLedgerEntryMapper:
    """Tests for LedgerEntry mapper."""

    def test_ledger_entry_to_domain(self):
        orm_entry = ORMLedgerEntry(
            id="b" * 32,
            tenant_id="default",
            type="income",
            amount=Decimal("1500.5"),
            date=date(2024, 2, 1),
            description="Invoice 12",
            category="sales",
            sub_category=None,
            is_arap_entry=True,
            payment_status="partial",
            remaining_balance=Decimal("500.5"),
            total_paid=None,
            auto_generated=False,
            created_at=datetime.now(UTC),
        )

        entry = ledger_entry_to_domain(orm_entry)

        assert entry.type == LedgerType.INCOME
        assert entry.amount == Decimal("1500.50")
        assert entry.payment_status == PaymentStatus.PARTIAL
        assert entry.total_paid == Decimal("0.00")


def test_cheque_to_domain():
    orm_cheque = ORMCheque(
        id="c" * 32,
        tenant_id="default",
        cheque_number="CHQ-5",
        amount=Decimal("99.9"),
        direction="outgoing",
        status="bounced_before_cashing",
        due_date=None,
        linked_transaction_id=None,
        created_at=datetime.now(UTC),
    )

    cheque = cheque_to_domain(orm_cheque)

    assert cheque.status == ChequeStatus.BOUNCED_BEFORE_CASHING
    assert cheque.amount == Decimal("99.90")


def test_activity_log_metadata_defaults_to_empty():
    orm_log = ORMActivityLog(
        id="d" * 32,
        tenant_id="default",
        action="cleanup_orphaned",
        module="journal",
        description="",
        details=None,
        created_at=datetime.now(UTC),
    )

    assert activity_log_to_domain(orm_log).metadata == {}


def test_equity_ledger_entry_to_domain():
    orm_entry = ORMLedgerEntry(
        id="d" * 32,
        tenant_id="default",
        type="equity",
        amount=Decimal("20000"),
        date=date(2024, 1, 2),
        description="Owner contribution",
        category=None,
        sub_category=None,
        is_arap_entry=False,
        payment_status="paid",
        remaining_balance=None,
        total_paid=None,
        auto_generated=False,
        created_at=datetime.now(UTC),
    )

    assert ledger_entry_to_domain(orm_entry).type == LedgerType.EQUITY

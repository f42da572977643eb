"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from factorybooks.domain.entities import (
    Account,
    ActivityLogEntry,
    Cheque,
    ChequeDirection,
    ChequeStatus,
    DepreciationRecord,
    DepreciationRun,
    FixedAsset,
    JournalEntry,
    JournalSource,
    LedgerEntry,
    LedgerType,
    Payment,
    PaymentDirection,
    PaymentStatus,
    SourceType,
)
from factorybooks.database.batch import WriteBatch


class Database(ABC):
    """Abstract, tenant-scoped database interface for factorybooks.

    Every read and write is confined to ``tenant_id``.
    """

    tenant_id: str

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def commit_batch(self, batch: WriteBatch) -> None:
        """Apply every queued operation in one transaction.

        Raises:
            ConflictError: If a uniqueness constraint rejects the batch
            NotFoundError: If an update targets a missing row
            PersistenceError: On any other store failure
        """
        pass

    # Chart of accounts
    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List accounts ordered by code."""
        pass

    @abstractmethod
    def get_account(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def has_accounts(self) -> bool:
        """Whether the chart of accounts has been seeded."""
        pass

    # Journal entries
    @abstractmethod
    def create_journal_entry(
        self,
        debit_account_code: str,
        credit_account_code: str,
        amount: Decimal,
        date: date,
        description: str,
        template_id: Optional[str] = None,
        source: Optional[JournalSource] = None,
    ) -> JournalEntry:
        """Write one journal entry with ``amount`` on both sides.

        Assigns the next sequence number for the tenant.
        """
        pass

    @abstractmethod
    def create_reversing_entry(
        self, entry_id: str, date: date, description: str
    ) -> JournalEntry:
        """Write the mirror of ``entry_id`` and link both entries atomically."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: str) -> Optional[JournalEntry]:
        """Get journal entry by ID."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        source_type: Optional[SourceType] = None,
        document_id: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> list[JournalEntry]:
        """List journal entries in sequence order, optionally filtered."""
        pass

    # Settings
    @abstractmethod
    def get_lock_date(self) -> Optional[date]:
        """Get the tenant's lock date, if any."""
        pass

    @abstractmethod
    def set_lock_date(self, lock_date: Optional[date]) -> None:
        """Set or clear the tenant's lock date."""
        pass

    # Ledger entries
    @abstractmethod
    def create_ledger_entry(
        self,
        type: LedgerType,
        amount: Decimal,
        date: date,
        description: str = "",
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
        is_arap_entry: bool = False,
        payment_status: PaymentStatus = PaymentStatus.PAID,
        remaining_balance: Optional[Decimal] = None,
        total_paid: Optional[Decimal] = None,
        auto_generated: bool = False,
    ) -> str:
        """Create a ledger entry. Returns its ID."""
        pass

    @abstractmethod
    def get_ledger_entry(self, entry_id: str) -> Optional[LedgerEntry]:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    def list_ledger_entries(self) -> list[LedgerEntry]:
        """List ledger entries by date."""
        pass

    @abstractmethod
    def delete_ledger_entry(self, entry_id: str) -> None:
        """Delete a ledger entry. Journal entries referencing it are kept."""
        pass

    # Payments
    @abstractmethod
    def create_payment(
        self,
        amount: Decimal,
        direction: PaymentDirection,
        date: date,
        linked_transaction_id: Optional[str] = None,
        no_cash_movement: bool = False,
        is_endorsement: bool = False,
        notes: Optional[str] = None,
    ) -> str:
        """Create a payment. Returns its ID."""
        pass

    @abstractmethod
    def get_payment(self, payment_id: str) -> Optional[Payment]:
        """Get payment by ID."""
        pass

    @abstractmethod
    def list_payments(self) -> list[Payment]:
        """List payments by date."""
        pass

    @abstractmethod
    def delete_payment(self, payment_id: str) -> None:
        """Delete a payment."""
        pass

    # Cheques
    @abstractmethod
    def create_cheque(
        self,
        cheque_number: str,
        amount: Decimal,
        direction: ChequeDirection,
        due_date: Optional[date] = None,
        linked_transaction_id: Optional[str] = None,
        status: ChequeStatus = ChequeStatus.PENDING,
    ) -> str:
        """Create a cheque. Returns its ID."""
        pass

    @abstractmethod
    def get_cheque(self, cheque_id: str) -> Optional[Cheque]:
        """Get cheque by ID."""
        pass

    @abstractmethod
    def list_cheques(self, status: Optional[ChequeStatus] = None) -> list[Cheque]:
        """List cheques, optionally by status."""
        pass

    @abstractmethod
    def delete_cheque(self, cheque_id: str) -> None:
        """Delete a cheque."""
        pass

    # Fixed assets
    @abstractmethod
    def create_fixed_asset(
        self,
        name: str,
        purchase_date: date,
        purchase_cost: Decimal,
        salvage_value: Decimal,
        useful_life_months: int,
        monthly_depreciation: Decimal,
    ) -> str:
        """Create an active fixed asset with no depreciation yet. Returns its ID."""
        pass

    @abstractmethod
    def get_fixed_asset(self, asset_id: str) -> Optional[FixedAsset]:
        """Get fixed asset by ID."""
        pass

    @abstractmethod
    def list_fixed_assets(self, active_only: bool = False) -> list[FixedAsset]:
        """List fixed assets by purchase date."""
        pass

    # Depreciation
    @abstractmethod
    def get_depreciation_run(self, period_label: str) -> Optional[DepreciationRun]:
        """Get the run fence for a period, if processed."""
        pass

    @abstractmethod
    def list_depreciation_runs(self) -> list[DepreciationRun]:
        """List depreciation runs by period."""
        pass

    @abstractmethod
    def list_depreciation_records(
        self, asset_id: Optional[str] = None, period_label: Optional[str] = None
    ) -> list[DepreciationRecord]:
        """List depreciation records, optionally filtered."""
        pass

    # Activity log
    @abstractmethod
    def add_activity_log(
        self,
        action: str,
        module: str,
        description: str,
        target_id: Optional[str] = None,
        user_id: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> str:
        """Append an activity log entry. Returns its ID."""
        pass

    @abstractmethod
    def list_activity_logs(self, limit: Optional[int] = None) -> list[ActivityLogEntry]:
        """List activity log entries, newest first."""
        pass

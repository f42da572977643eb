"""Domain model entities for factorybooks.

These are pure data classes representing accounting concepts, independent of
database schema. Mappers in ``factorybooks.database.mappers`` build them from
ORM rows; services return them to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from factorybooks.domain.errors import (
    ConsistencyError,
    DomainError,
    unbalanced_amounts,
)

TOLERANCE = Decimal("0.01")


class AccountType(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def natural_side(self) -> "NormalSide":
        """Side on which balances of this type normally grow."""
        if self in (AccountType.ASSET, AccountType.EXPENSE):
            return NormalSide.DEBIT
        return NormalSide.CREDIT


class NormalSide(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class SourceType(str, Enum):
    """Kind of business document a journal entry was derived from."""

    LEDGER = "ledger"
    PAYMENT = "payment"
    CHEQUE = "cheque"
    DEPRECIATION = "depreciation"


class LedgerType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    EQUITY = "equity"
    LOAN = "loan"


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIAL = "partial"


class PaymentDirection(str, Enum):
    RECEIPT = "receipt"
    DISBURSEMENT = "disbursement"


class ChequeDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class ChequeStatus(str, Enum):
    PENDING = "pending"
    CASHED = "cashed"
    BOUNCED_BEFORE_CASHING = "bounced_before_cashing"
    BOUNCED_AFTER_CASHING = "bounced_after_cashing"


class AssetStatus(str, Enum):
    ACTIVE = "active"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry."""

    code: str
    name: str
    name_localized: str
    type: AccountType
    normal_side: NormalSide
    parent_code: Optional[str] = None

    @property
    def is_contra(self) -> bool:
        """True when the account carries the side opposite to its type."""
        return self.normal_side != self.type.natural_side


@dataclass(frozen=True)
class JournalSource:
    """Weak reference from a journal entry to the document it came from."""

    source_type: SourceType
    document_id: str
    transaction_id: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    """Balanced two-leg journal entry."""

    id: str
    sequence_number: int
    entry_number: str
    date: date
    description: str
    debit_account_code: str
    credit_account_code: str
    debit_amount: Decimal
    credit_amount: Decimal
    template_id: Optional[str]
    source: Optional[JournalSource]
    created_at: datetime
    reverses_entry_id: Optional[str] = None
    reversed_by_entry_id: Optional[str] = None

    def __post_init__(self):
        if self.debit_amount != self.credit_amount:
            raise ConsistencyError(
                unbalanced_amounts(self.debit_amount, self.credit_amount),
                difference=self.debit_amount - self.credit_amount,
            )

    @property
    def amount(self) -> Decimal:
        return self.debit_amount

    @property
    def is_reversal(self) -> bool:
        return self.reverses_entry_id is not None

    def touches(self, *codes: str) -> bool:
        """Whether either leg posts to one of ``codes``."""
        return self.debit_account_code in codes or self.credit_account_code in codes


@dataclass(frozen=True)
class LedgerEntry:
    """Business transaction recorded before double-entry translation."""

    id: str
    type: LedgerType
    amount: Decimal
    date: date
    description: str
    category: Optional[str]
    sub_category: Optional[str]
    is_arap_entry: bool
    payment_status: PaymentStatus
    remaining_balance: Decimal
    total_paid: Decimal
    auto_generated: bool
    created_at: datetime


@dataclass(frozen=True)
class Payment:
    """Cash receipt or disbursement, optionally settling a ledger entry."""

    id: str
    amount: Decimal
    direction: PaymentDirection
    date: date
    linked_transaction_id: Optional[str]
    no_cash_movement: bool
    is_endorsement: bool
    notes: Optional[str]
    created_at: datetime

    @property
    def moves_cash(self) -> bool:
        return not (self.no_cash_movement or self.is_endorsement)


@dataclass(frozen=True)
class Cheque:
    """Cheque received from a client or issued to a supplier."""

    id: str
    cheque_number: str
    amount: Decimal
    direction: ChequeDirection
    status: ChequeStatus
    due_date: Optional[date]
    linked_transaction_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class FixedAsset:
    """Depreciable fixed asset.

    ``book_value`` is always ``purchase_cost - accumulated_depreciation`` and
    accumulated depreciation never passes ``purchase_cost - salvage_value``.
    """

    id: str
    name: str
    purchase_date: date
    purchase_cost: Decimal
    salvage_value: Decimal
    useful_life_months: int
    monthly_depreciation: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal
    status: AssetStatus
    last_depreciation_date: Optional[date]
    created_at: datetime

    @property
    def depreciable_amount(self) -> Decimal:
        return self.purchase_cost - self.salvage_value

    @property
    def remaining_depreciable(self) -> Decimal:
        return max(self.depreciable_amount - self.accumulated_depreciation, Decimal("0"))

    @property
    def is_fully_depreciated(self) -> bool:
        return self.remaining_depreciable <= 0


@dataclass(frozen=True)
class DepreciationRecord:
    """Audit record of one asset's depreciation for one period."""

    id: str
    asset_id: str
    period_label: str
    amount: Decimal
    accumulated_before: Decimal
    accumulated_after: Decimal
    book_value_before: Decimal
    book_value_after: Decimal
    ledger_entry_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class DepreciationRun:
    """Idempotency fence: a period is processed iff its run exists."""

    id: str
    period_label: str
    assets_count: int
    total_depreciation: Decimal
    ledger_entry_id: Optional[str]
    run_date: date
    created_at: datetime


@dataclass(frozen=True)
class ActivityLogEntry:
    """Operator-facing audit trail entry."""

    id: str
    action: str
    module: str
    target_id: Optional[str]
    user_id: Optional[str]
    description: str
    metadata: dict[str, Any]
    created_at: datetime


# Operation results


@dataclass(frozen=True)
class PostingResult:
    """Outcome of a journal post. Failures carry the typed error."""

    success: bool
    journal_entry_id: Optional[str] = None
    entry_number: Optional[str] = None
    error: Optional[DomainError] = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass(frozen=True)
class AccountBalance:
    """Per-account totals within a trial balance."""

    code: str
    name: str
    type: AccountType
    normal_side: NormalSide
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal


@dataclass(frozen=True)
class TrialBalance:
    accounts: list[AccountBalance]
    total_debits: Decimal
    total_credits: Decimal
    as_of_date: Optional[date] = None

    @property
    def difference(self) -> Decimal:
        return self.total_debits - self.total_credits

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < TOLERANCE


@dataclass(frozen=True)
class BalanceSheetLine:
    code: str
    name: str
    amount: Decimal
    is_contra: bool = False


@dataclass(frozen=True)
class BalanceSheetSection:
    title: str
    lines: list[BalanceSheetLine]

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class BalanceSheet:
    """Assets against liabilities plus equity, net income included in equity."""

    assets: BalanceSheetSection
    liabilities: BalanceSheetSection
    equity: BalanceSheetSection
    net_income: Decimal
    as_of_date: Optional[date] = None

    @property
    def total_assets(self) -> Decimal:
        return self.assets.total

    @property
    def total_liabilities(self) -> Decimal:
        return self.liabilities.total

    @property
    def total_equity(self) -> Decimal:
        return self.equity.total

    @property
    def total_liabilities_and_equity(self) -> Decimal:
        return self.total_liabilities + self.total_equity

    @property
    def difference(self) -> Decimal:
        return self.total_assets - self.total_liabilities_and_equity

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < TOLERANCE


@dataclass(frozen=True)
class JournalDiagnostics:
    total_entries: int
    linked_to_transaction: int
    linked_to_payment: int
    linked_to_cheque: int
    unlinked: int
    orphaned_by_transaction: int
    orphaned_by_payment: int
    orphaned_by_cheque: int
    entries_by_account: dict[str, int]

    @property
    def orphaned(self) -> int:
        return (
            self.orphaned_by_transaction
            + self.orphaned_by_payment
            + self.orphaned_by_cheque
        )


@dataclass(frozen=True)
class Mismatch:
    journal_id: str
    link_type: SourceType
    linked_id: str
    journal_cash_amount: Decimal
    source_amount: Decimal

    @property
    def difference(self) -> Decimal:
        return self.journal_cash_amount - self.source_amount


@dataclass(frozen=True)
class Duplicate:
    source_type: SourceType
    source_id: str
    count: int
    journal_ids: list[str]


@dataclass(frozen=True)
class AuditResult:
    mismatches: list[Mismatch]
    duplicates: list[Duplicate]
    total_journal_cash_debits: Decimal
    total_journal_cash_credits: Decimal
    total_ledger_cash_in: Decimal
    total_ledger_cash_out: Decimal
    total_payment_cash_in: Decimal
    total_payment_cash_out: Decimal

    @property
    def is_clean(self) -> bool:
        return not self.mismatches and not self.duplicates


@dataclass(frozen=True)
class OrphanCleanupResult:
    orphaned_by_transaction: list[str]
    orphaned_by_payment: list[str]
    orphaned_by_cheque: list[str]
    unlinked: list[str]
    candidates: list[str]
    deleted: int
    dry_run: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DuplicateCleanupResult:
    duplicates: list[Duplicate]
    candidates: list[str]
    deleted: int
    dry_run: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DepreciationPeriodResult:
    """Outcome of one period run.

    ``assets`` holds updated snapshots for every asset depreciated in the
    period; the batch side is committed even when ``success`` is False
    because the journal post failed.
    """

    period_label: str
    success: bool
    assets_count: int = 0
    total_depreciation: Decimal = Decimal("0")
    ledger_entry_id: Optional[str] = None
    journal_entry_id: Optional[str] = None
    assets: list[FixedAsset] = field(default_factory=list)
    already_processed: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class AutoDepreciationResult:
    """Outcome of a run over every pending period.

    ``skipped_periods`` were processed by another runner while this one was
    working; they are not failures.
    """

    processed_periods: list[str]
    failed_at: Optional[str]
    errors: list[str]
    total_depreciation: Decimal
    assets: list[FixedAsset]
    skipped_periods: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed_at is None


@dataclass(frozen=True)
class DepreciationStatus:
    pending_count: int
    oldest_pending: Optional[str]
    pending_periods: list[str]
    estimated_total: Decimal
    last_processed: Optional[str] = None


@dataclass(frozen=True)
class ChequeTransitionResult:
    cheque_id: str
    previous_status: ChequeStatus
    new_status: ChequeStatus
    success: bool
    journal_entry_id: Optional[str] = None
    error: Optional[str] = None

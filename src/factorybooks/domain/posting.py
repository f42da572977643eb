"""Journal posting engine.

Turns business events into balanced journal entries through the template
table. Posting never raises for expected failures: the outcome is a
``PostingResult`` whose ``error`` holds the typed exception.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from factorybooks.database.base import Database
from factorybooks.domain import templates
from factorybooks.domain.entities import (
    JournalSource,
    LedgerEntry,
    LedgerType,
    Payment,
    PaymentDirection,
    PostingResult,
    SourceType,
)
from factorybooks.domain.errors import (
    DomainError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    date_locked,
    journal_entry_not_found,
    non_positive_amount,
)
from factorybooks.logging_config import get_logger
from factorybooks.utils.money import round_currency

logger = get_logger("posting")

_LEDGER_TYPE_TEMPLATES = {
    LedgerType.INCOME: templates.LEDGER_INCOME,
    LedgerType.EXPENSE: templates.LEDGER_EXPENSE,
    LedgerType.EQUITY: templates.OWNER_CAPITAL,
    LedgerType.LOAN: templates.LOAN_RECEIVED,
}


def ledger_template_id(entry: LedgerEntry) -> str:
    """Template a ledger entry posts through.

    A balance-sheet category wins over the entry type; an uncategorized
    equity entry is a capital contribution and a loan entry a loan received.
    """
    template_id = templates.template_for_category(entry.category, entry.sub_category)
    if template_id is not None:
        return template_id
    return _LEDGER_TYPE_TEMPLATES[LedgerType(entry.type)]


class JournalPostingEngine:
    """Creates journal entries from templates and reverses them."""

    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        """Initialize posting engine.

        Args:
            db: Database instance
            today: Clock used to date reversals when no date is given
        """
        self.db = db
        self.today = today

    def post(
        self,
        template_id: str,
        amount,
        date: date,
        description: str = "",
        source: Optional[JournalSource] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> PostingResult:
        """Post one balanced journal entry.

        Args:
            template_id: Key into the journal template table
            amount: Positive amount; rounded to cents
            date: Entry date; must fall after the lock date
            description: Free text, defaults to the template's description
            source: Document the entry is derived from. None only for manual
                operator entries.
            context: Values the template resolves open accounts from

        Returns:
            PostingResult; on failure ``error`` is a ValidationError or
            PersistenceError
        """
        try:
            value = self._validate_amount(amount)
            template = templates.get_template(template_id)
            debit, credit = templates.resolve_accounts(template, context)
            entry_date = self.validate_date(date)
            entry = self.db.create_journal_entry(
                debit_account_code=debit,
                credit_account_code=credit,
                amount=value,
                date=entry_date,
                description=description or template.description,
                template_id=template.id,
                source=source,
            )
        except DomainError as e:
            return self._failed("post", e, template_id=template_id, amount=str(amount))

        logger.info(
            "journal entry posted",
            extra={
                "tenant_id": self.db.tenant_id,
                "entry_number": entry.entry_number,
                "template_id": template_id,
                "amount": entry.amount,
                "debit": entry.debit_account_code,
                "credit": entry.credit_account_code,
            },
        )
        return PostingResult(
            success=True, journal_entry_id=entry.id, entry_number=entry.entry_number
        )

    def reverse(
        self, entry_id: str, reason: str = "", date: Optional[date] = None
    ) -> PostingResult:
        """Post the mirror image of an entry and link the two.

        Args:
            entry_id: Journal entry to reverse
            reason: Appended to the reversal description
            date: Reversal date, defaults to today

        Returns:
            PostingResult for the reversing entry
        """
        try:
            original = self.db.get_journal_entry(entry_id)
            if original is None:
                raise NotFoundError(journal_entry_not_found(entry_id))
            if original.is_reversal:
                raise ValidationError(
                    f"Journal entry {original.entry_number} is itself a reversal"
                )
            if original.reversed_by_entry_id is not None:
                raise ValidationError(
                    f"Journal entry {original.entry_number} is already reversed"
                )
            entry_date = self.validate_date(date or self.today())
            description = f"Reversal of {original.entry_number}"
            if reason:
                description = f"{description}: {reason}"
            reversal = self.db.create_reversing_entry(entry_id, entry_date, description)
        except DomainError as e:
            return self._failed("reverse", e, entry_id=entry_id)

        logger.info(
            "journal entry reversed",
            extra={
                "tenant_id": self.db.tenant_id,
                "entry_number": reversal.entry_number,
                "reverses": entry_id,
            },
        )
        return PostingResult(
            success=True, journal_entry_id=reversal.id, entry_number=reversal.entry_number
        )

    def post_ledger_entry(
        self, entry: LedgerEntry, immediate_settlement: bool = False
    ) -> PostingResult:
        """Post the journal entry for a ledger entry.

        Balance-sheet categories (owner capital, advances, loans) use their
        own template, as do equity and loan entries. Income and expense
        entries go through their template with the category choosing the
        account.
        """
        return self.post(
            ledger_template_id(entry),
            entry.amount,
            entry.date,
            entry.description,
            source=JournalSource(SourceType.LEDGER, entry.id, transaction_id=entry.id),
            context={
                "category": entry.category,
                "sub_category": entry.sub_category,
                "is_arap_entry": entry.is_arap_entry,
                "immediate_settlement": immediate_settlement,
            },
        )

    def post_payment(self, payment: Payment, description: str = "") -> PostingResult:
        """Post the journal entry for a payment.

        Payments that move no cash (endorsements, offsets) clear AR against
        AP instead of touching Cash.
        """
        if not payment.moves_cash:
            template_id = templates.ENDORSEMENT
        elif payment.direction == PaymentDirection.RECEIPT:
            template_id = templates.PAYMENT_RECEIPT
        else:
            template_id = templates.PAYMENT_DISBURSEMENT
        return self.post(
            template_id,
            payment.amount,
            payment.date,
            description or payment.notes or "",
            source=JournalSource(
                SourceType.PAYMENT,
                payment.id,
                transaction_id=payment.linked_transaction_id,
            ),
        )

    def _validate_amount(self, amount) -> Decimal:
        try:
            value = round_currency(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if value <= 0:
            raise ValidationError(non_positive_amount(amount))
        return value

    def validate_date(self, value) -> date:
        """Return ``value`` as a date open for posting.

        Raises:
            ValidationError: If it is not a date or falls on or before the lock date
        """
        if isinstance(value, datetime):
            value = value.date()
        if not isinstance(value, date):
            raise ValidationError(f"Entry date must be a date (got {value!r})")
        lock_date = self.db.get_lock_date()
        if lock_date is not None and value <= lock_date:
            raise ValidationError(date_locked(value, lock_date))
        return value

    def _failed(self, operation: str, error: DomainError, **fields) -> PostingResult:
        if not isinstance(error, (ValidationError, NotFoundError, PersistenceError)):
            error = PersistenceError(str(error))
        level = "error" if isinstance(error, PersistenceError) else "warning"
        getattr(logger, level)(
            f"journal {operation} failed",
            extra={"tenant_id": self.db.tenant_id, "error": str(error), **fields},
        )
        return PostingResult(success=False, error=error)

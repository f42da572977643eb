"""Cheque lifecycle state machine.

    PENDING --cash--> CASHED --bounce--> BOUNCED_AFTER_CASHING
    PENDING --bounce--> BOUNCED_BEFORE_CASHING

A cheque only reaches the journal when it is cashed. Bouncing a cashed
cheque posts exactly one reversing entry; bouncing a pending one posts
nothing. The status write and the journal post are separate steps, so a
failed post after the status write is logged CRITICAL for manual recovery.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from factorybooks.database.base import Database
from factorybooks.database.batch import WriteBatch
from factorybooks.domain import templates
from factorybooks.domain.activity import ActivityLogService
from factorybooks.domain.entities import (
    Cheque,
    ChequeDirection,
    ChequeStatus,
    ChequeTransitionResult,
    JournalEntry,
    JournalSource,
    PaymentStatus,
    PostingResult,
    SourceType,
)
from factorybooks.domain.errors import (
    ConsistencyError,
    InvalidChequeTransitionError,
    NotFoundError,
    ValidationError,
    document_not_found,
    non_positive_amount,
)
from factorybooks.domain.posting import JournalPostingEngine
from factorybooks.logging_config import get_logger
from factorybooks.utils.money import round_currency

logger = get_logger("cheques")

VALID_TRANSITIONS: dict[ChequeStatus, frozenset[ChequeStatus]] = {
    ChequeStatus.PENDING: frozenset({ChequeStatus.CASHED, ChequeStatus.BOUNCED_BEFORE_CASHING}),
    ChequeStatus.CASHED: frozenset({ChequeStatus.BOUNCED_AFTER_CASHING}),
    ChequeStatus.BOUNCED_BEFORE_CASHING: frozenset(),
    ChequeStatus.BOUNCED_AFTER_CASHING: frozenset(),
}

# Journal entries a cheque has in each state
EXPECTED_JOURNAL_COUNT = {
    ChequeStatus.PENDING: 0,
    ChequeStatus.BOUNCED_BEFORE_CASHING: 0,
    ChequeStatus.CASHED: 1,
    ChequeStatus.BOUNCED_AFTER_CASHING: 2,
}


class ChequeService:
    """Moves cheques through their lifecycle and posts the cash effect."""

    def __init__(
        self,
        db: Database,
        engine: Optional[JournalPostingEngine] = None,
        activity: Optional[ActivityLogService] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize cheque service.

        Args:
            db: Database instance
            engine: Posting engine for cashing and reversal entries
            activity: Activity log for status changes
            today: Clock used when no transition date is given
        """
        self.db = db
        self.engine = engine or JournalPostingEngine(db, today=today)
        self.activity = activity or ActivityLogService(db)
        self.today = today

    def create_cheque(
        self,
        cheque_number: str,
        amount,
        direction: ChequeDirection,
        due_date: Optional[date] = None,
        linked_transaction_id: Optional[str] = None,
    ) -> Cheque:
        """Register a pending cheque.

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If the linked ledger entry does not exist
        """
        try:
            value = round_currency(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if value <= 0:
            raise ValidationError(non_positive_amount(amount))
        if linked_transaction_id is not None and self.db.get_ledger_entry(linked_transaction_id) is None:
            raise NotFoundError(document_not_found("ledger entry", linked_transaction_id))
        cheque_id = self.db.create_cheque(
            cheque_number=cheque_number,
            amount=value,
            direction=direction,
            due_date=due_date,
            linked_transaction_id=linked_transaction_id,
        )
        return self.db.get_cheque(cheque_id)

    def get_cheque(self, cheque_id: str) -> Cheque:
        """Get cheque by ID.

        Raises:
            NotFoundError: If the cheque does not exist
        """
        cheque = self.db.get_cheque(cheque_id)
        if cheque is None:
            raise NotFoundError(document_not_found("cheque", cheque_id))
        return cheque

    def journal_entries(self, cheque_id: str) -> list[JournalEntry]:
        return self.db.list_journal_entries(
            source_type=SourceType.CHEQUE, document_id=cheque_id
        )

    def can_transition(self, current: ChequeStatus, target: ChequeStatus) -> bool:
        return target in VALID_TRANSITIONS[current]

    def _require_transition(self, cheque: Cheque, target: ChequeStatus) -> None:
        if not self.can_transition(cheque.status, target):
            raise InvalidChequeTransitionError(cheque.id, cheque.status.value, target.value)

    def _queue_ledger_settlement(self, batch: WriteBatch, cheque: Cheque, reopen: bool) -> None:
        """Settle (or reopen) the linked ledger entry by the cheque amount."""
        if cheque.linked_transaction_id is None:
            return
        entry = self.db.get_ledger_entry(cheque.linked_transaction_id)
        if entry is None:
            logger.warning(
                "cheque linked to missing ledger entry",
                extra={"cheque_id": cheque.id, "ledger_entry_id": cheque.linked_transaction_id},
            )
            return
        delta = -cheque.amount if reopen else cheque.amount
        total_paid = min(max(entry.total_paid + delta, Decimal("0")), entry.amount)
        remaining = entry.amount - total_paid
        if remaining <= 0:
            status = PaymentStatus.PAID
        elif total_paid <= 0:
            status = PaymentStatus.UNPAID
        else:
            status = PaymentStatus.PARTIAL
        batch.update_ledger_balance(entry.id, status, remaining, total_paid)

    def cash(self, cheque_id: str, on_date: Optional[date] = None) -> ChequeTransitionResult:
        """Move a pending cheque to CASHED and post its cash entry.

        Incoming cheques post DR Cash / CR Accounts Receivable; outgoing ones
        DR Accounts Payable / CR Cash.

        Raises:
            NotFoundError: If the cheque does not exist
            InvalidChequeTransitionError: If the cheque is not pending
            ValidationError: If the date is locked
        """
        cheque = self.get_cheque(cheque_id)
        self._require_transition(cheque, ChequeStatus.CASHED)
        entry_date = self.engine.validate_date(on_date or self.today())

        batch = WriteBatch()
        batch.update_cheque_status(cheque.id, ChequeStatus.CASHED)
        self._queue_ledger_settlement(batch, cheque, reopen=False)
        self.db.commit_batch(batch)

        template_id = (
            templates.PAYMENT_RECEIPT
            if cheque.direction == ChequeDirection.INCOMING
            else templates.PAYMENT_DISBURSEMENT
        )
        posting = self.engine.post(
            template_id,
            cheque.amount,
            entry_date,
            f"Cheque {cheque.cheque_number} cashed",
            source=JournalSource(
                SourceType.CHEQUE, cheque.id, transaction_id=cheque.linked_transaction_id
            ),
        )
        return self._finish(cheque, ChequeStatus.CASHED, posting, template_id)

    def bounce(self, cheque_id: str, on_date: Optional[date] = None) -> ChequeTransitionResult:
        """Mark a cheque as bounced.

        A pending cheque becomes BOUNCED_BEFORE_CASHING with no journal
        effect. A cashed cheque becomes BOUNCED_AFTER_CASHING: its cash entry
        is reversed and the linked ledger balance is reopened.

        Raises:
            NotFoundError: If the cheque does not exist
            InvalidChequeTransitionError: If the cheque has already bounced
            ConsistencyError: If a cashed cheque has no cash entry to reverse
        """
        cheque = self.get_cheque(cheque_id)

        if cheque.status == ChequeStatus.PENDING:
            batch = WriteBatch()
            batch.update_cheque_status(cheque.id, ChequeStatus.BOUNCED_BEFORE_CASHING)
            self.db.commit_batch(batch)
            return self._finish(cheque, ChequeStatus.BOUNCED_BEFORE_CASHING, None, None)

        self._require_transition(cheque, ChequeStatus.BOUNCED_AFTER_CASHING)
        entry_date = self.engine.validate_date(on_date or self.today())
        cash_entries = [
            e for e in self.journal_entries(cheque.id)
            if not e.is_reversal and e.reversed_by_entry_id is None
        ]
        if len(cash_entries) != 1:
            raise ConsistencyError(
                f"Cheque {cheque.cheque_number} should have one open cash entry, "
                f"found {len(cash_entries)}"
            )

        batch = WriteBatch()
        batch.update_cheque_status(cheque.id, ChequeStatus.BOUNCED_AFTER_CASHING)
        self._queue_ledger_settlement(batch, cheque, reopen=True)
        self.db.commit_batch(batch)

        posting = self.engine.reverse(
            cash_entries[0].id,
            reason=f"cheque {cheque.cheque_number} bounced",
            date=entry_date,
        )
        return self._finish(cheque, ChequeStatus.BOUNCED_AFTER_CASHING, posting, "REVERSAL")

    def verify_journal_count(self, cheque_id: str) -> int:
        """Check a cheque has exactly the journal entries its status implies.

        Returns:
            The number of journal entries

        Raises:
            ConsistencyError: If the count does not match the status
        """
        cheque = self.get_cheque(cheque_id)
        count = len(self.journal_entries(cheque.id))
        expected = EXPECTED_JOURNAL_COUNT[cheque.status]
        if count != expected:
            raise ConsistencyError(
                f"Cheque {cheque.cheque_number} is {cheque.status.value} with "
                f"{count} journal entries (expected {expected})",
                difference=Decimal(count - expected),
            )
        return count

    def _finish(
        self,
        cheque: Cheque,
        new_status: ChequeStatus,
        posting: Optional[PostingResult],
        template_id: Optional[str],
    ) -> ChequeTransitionResult:
        if posting is not None and not posting.success:
            logger.critical(
                "cheque journal entry missing after status change",
                extra={
                    "tenant_id": self.db.tenant_id,
                    "cheque_id": cheque.id,
                    "cheque_number": cheque.cheque_number,
                    "status": new_status.value,
                    "template_id": template_id,
                    "amount": cheque.amount,
                    "error": str(posting.error),
                    "recovery": self._recovery_hint(cheque, new_status),
                },
            )
            return ChequeTransitionResult(
                cheque_id=cheque.id,
                previous_status=cheque.status,
                new_status=new_status,
                success=False,
                error=str(posting.error),
            )

        self.activity.log_activity(
            action=f"cheque_{new_status.value}",
            module="cheques",
            description=f"Cheque {cheque.cheque_number} {new_status.value.replace('_', ' ')}",
            target_id=cheque.id,
            metadata={"amount": cheque.amount, "previous_status": cheque.status},
        )
        return ChequeTransitionResult(
            cheque_id=cheque.id,
            previous_status=cheque.status,
            new_status=new_status,
            success=True,
            journal_entry_id=posting.journal_entry_id if posting else None,
        )

    def _recovery_hint(self, cheque: Cheque, new_status: ChequeStatus) -> str:
        incoming = cheque.direction == ChequeDirection.INCOMING
        template = templates.get_template(
            templates.PAYMENT_RECEIPT if incoming else templates.PAYMENT_DISBURSEMENT
        )
        debit, credit = template.debit_account, template.credit_account
        if new_status == ChequeStatus.BOUNCED_AFTER_CASHING:
            debit, credit = credit, debit
        return (
            f"Manual journal entry required: DR {debit}, CR {credit}, "
            f"amount {cheque.amount}, source cheque {cheque.id}"
        )

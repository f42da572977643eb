"""Reconciliation and audit of the journal against its source documents.

A journal entry points at its source through ``JournalSource``, a weak
reference. Entries drift from their sources when a document is deleted
(orphans), when the journal and the document disagree on the cash amount
(mismatches), or when one document is posted more than once (duplicates).
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from factorybooks.database.base import Database
from factorybooks.database.batch import MAX_BATCH_OPERATIONS, WriteBatch
from factorybooks.domain import templates
from factorybooks.domain.activity import ActivityLogService
from factorybooks.domain.chart_of_accounts import CASH_ACCOUNT_CODES
from factorybooks.domain.entities import (
    TOLERANCE,
    AuditResult,
    Duplicate,
    DuplicateCleanupResult,
    JournalDiagnostics,
    JournalEntry,
    LedgerEntry,
    LedgerType,
    Mismatch,
    OrphanCleanupResult,
    PaymentDirection,
    PaymentStatus,
    SourceType,
)
from factorybooks.domain.errors import ConsistencyError, DomainError
from factorybooks.domain.posting import ledger_template_id
from factorybooks.logging_config import get_logger

logger = get_logger("audit")

ZERO = Decimal("0.00")


def _ledger_moves_cash_in(entry: LedgerEntry) -> bool:
    template = templates.get_template(ledger_template_id(entry))
    if template.debit_account in CASH_ACCOUNT_CODES:
        return True
    if template.credit_account in CASH_ACCOUNT_CODES:
        return False
    return entry.type == LedgerType.INCOME


def primary_link(entry: JournalEntry) -> Optional[tuple[SourceType, str]]:
    """The document an entry must be checked against, if any.

    Depreciation entries are checked against the aggregate ledger entry the
    run created, which they carry as ``transaction_id``.
    """
    source = entry.source
    if source is None:
        return None
    if source.source_type == SourceType.DEPRECIATION:
        if source.transaction_id is None:
            return None
        return SourceType.LEDGER, source.transaction_id
    return source.source_type, source.document_id


def _chunks(items: list[str], size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class ReconciliationService:
    """Detects and cleans up drift between the journal and source records."""

    def __init__(self, db: Database, activity: Optional[ActivityLogService] = None):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            activity: Where cleanup runs are recorded; defaults to a service
                over ``db``
        """
        self.db = db
        self.activity = activity or ActivityLogService(db)

    def _known_documents(self) -> dict[SourceType, set[str]]:
        return {
            SourceType.LEDGER: {e.id for e in self.db.list_ledger_entries()},
            SourceType.PAYMENT: {p.id for p in self.db.list_payments()},
            SourceType.CHEQUE: {c.id for c in self.db.list_cheques()},
        }

    def _classify(self, entries: list[JournalEntry]) -> dict[str, list[str]]:
        """Split entry ids into linked/orphaned buckets per link type."""
        known = self._known_documents()
        buckets: dict[str, list[str]] = defaultdict(list)
        for entry in entries:
            link = primary_link(entry)
            if link is None:
                if entry.source is None:
                    buckets["unlinked"].append(entry.id)
                continue
            link_type, document_id = link
            buckets[f"linked:{link_type.value}"].append(entry.id)
            if document_id not in known[link_type]:
                buckets[f"orphaned:{link_type.value}"].append(entry.id)
        return buckets

    def diagnose(self) -> JournalDiagnostics:
        """Count journal entries by link state and by account."""
        entries = self.db.list_journal_entries()
        buckets = self._classify(entries)
        by_account: dict[str, int] = defaultdict(int)
        for entry in entries:
            by_account[entry.debit_account_code] += 1
            if entry.credit_account_code != entry.debit_account_code:
                by_account[entry.credit_account_code] += 1

        return JournalDiagnostics(
            total_entries=len(entries),
            linked_to_transaction=len(buckets["linked:ledger"]),
            linked_to_payment=len(buckets["linked:payment"]),
            linked_to_cheque=len(buckets["linked:cheque"]),
            unlinked=len(buckets["unlinked"]),
            orphaned_by_transaction=len(buckets["orphaned:ledger"]),
            orphaned_by_payment=len(buckets["orphaned:payment"]),
            orphaned_by_cheque=len(buckets["orphaned:cheque"]),
            entries_by_account=dict(sorted(by_account.items())),
        )

    def audit(self) -> AuditResult:
        """Compare cash movements in the journal with their source documents.

        Only entries with a leg on Cash or Bank are compared, and only against
        their primary source. Ledger entries count as cash only once paid;
        payments that move no cash are left out of the cash totals.
        """
        entries = self.db.list_journal_entries()
        ledger = {e.id: e for e in self.db.list_ledger_entries()}
        payments = {p.id: p for p in self.db.list_payments()}
        cheques = {c.id: c for c in self.db.list_cheques()}

        cash_debits = ZERO
        cash_credits = ZERO
        mismatches: list[Mismatch] = []

        for entry in entries:
            debit_cash = entry.debit_account_code in CASH_ACCOUNT_CODES
            credit_cash = entry.credit_account_code in CASH_ACCOUNT_CODES
            if not (debit_cash or credit_cash):
                continue
            if debit_cash:
                cash_debits += entry.amount
            if credit_cash:
                cash_credits += entry.amount
            if debit_cash and credit_cash:
                # Cash to bank transfer
                continue

            link = primary_link(entry)
            if link is None:
                continue
            link_type, document_id = link
            source_amount: Optional[Decimal] = None
            if link_type == SourceType.LEDGER:
                ledger_entry = ledger.get(document_id)
                if ledger_entry is not None and ledger_entry.payment_status == PaymentStatus.PAID:
                    source_amount = ledger_entry.amount
            elif link_type == SourceType.PAYMENT:
                payment = payments.get(document_id)
                if payment is not None:
                    source_amount = payment.amount
            elif link_type == SourceType.CHEQUE:
                cheque = cheques.get(document_id)
                if cheque is not None:
                    source_amount = cheque.amount

            if source_amount is not None and abs(entry.amount - source_amount) > TOLERANCE:
                mismatches.append(
                    Mismatch(
                        journal_id=entry.id,
                        link_type=link_type,
                        linked_id=document_id,
                        journal_cash_amount=entry.amount,
                        source_amount=source_amount,
                    )
                )

        ledger_in = ZERO
        ledger_out = ZERO
        for ledger_entry in ledger.values():
            if ledger_entry.is_arap_entry or ledger_entry.auto_generated:
                continue
            if _ledger_moves_cash_in(ledger_entry):
                ledger_in += ledger_entry.amount
            else:
                ledger_out += ledger_entry.amount

        payment_in = ZERO
        payment_out = ZERO
        for payment in payments.values():
            if not payment.moves_cash:
                continue
            if payment.direction == PaymentDirection.RECEIPT:
                payment_in += payment.amount
            else:
                payment_out += payment.amount

        result = AuditResult(
            mismatches=mismatches,
            duplicates=self._find_duplicates(entries),
            total_journal_cash_debits=cash_debits,
            total_journal_cash_credits=cash_credits,
            total_ledger_cash_in=ledger_in,
            total_ledger_cash_out=ledger_out,
            total_payment_cash_in=payment_in,
            total_payment_cash_out=payment_out,
        )
        logger.info(
            "journal audit finished",
            extra={
                "tenant_id": self.db.tenant_id,
                "mismatches": len(result.mismatches),
                "duplicates": len(result.duplicates),
            },
        )
        return result

    def _find_duplicates(self, entries: list[JournalEntry]) -> list[Duplicate]:
        """Sources with more than one live entry.

        Reversals and the entries they reverse cancel out and are skipped.
        """
        groups: dict[tuple[SourceType, str], list[JournalEntry]] = defaultdict(list)
        for entry in entries:
            if entry.source is None or entry.is_reversal or entry.reversed_by_entry_id:
                continue
            groups[(entry.source.source_type, entry.source.document_id)].append(entry)

        duplicates = []
        for (source_type, source_id), group in groups.items():
            if len(group) > 1:
                group.sort(key=lambda e: e.sequence_number)
                duplicates.append(
                    Duplicate(
                        source_type=source_type,
                        source_id=source_id,
                        count=len(group),
                        journal_ids=[e.id for e in group],
                    )
                )
        return duplicates

    def _delete_entries(self, entry_ids: list[str]) -> tuple[int, list[str]]:
        """Delete in bounded atomic batches, stopping at the first failure."""
        deleted = 0
        errors: list[str] = []
        for chunk in _chunks(entry_ids, MAX_BATCH_OPERATIONS):
            batch = WriteBatch()
            for entry_id in chunk:
                batch.delete_journal_entry(entry_id)
            try:
                self.db.commit_batch(batch)
            except DomainError as e:
                errors.append(str(e))
                logger.error(
                    "journal cleanup batch failed",
                    extra={"tenant_id": self.db.tenant_id, "deleted": deleted, "error": str(e)},
                )
                break
            deleted += len(chunk)
        return deleted, errors

    def cleanup_orphaned(
        self, dry_run: bool = True, include_unlinked: bool = False
    ) -> OrphanCleanupResult:
        """Delete journal entries whose source document no longer exists.

        Args:
            dry_run: Only report candidates, change nothing
            include_unlinked: Also delete entries without any source

        Returns:
            OrphanCleanupResult listing candidates and the deleted count
        """
        buckets = self._classify(self.db.list_journal_entries())
        orphaned = (
            buckets["orphaned:ledger"] + buckets["orphaned:payment"] + buckets["orphaned:cheque"]
        )
        candidates = list(orphaned)
        if include_unlinked:
            candidates += buckets["unlinked"]

        deleted, errors = (0, []) if dry_run else self._delete_entries(candidates)
        result = OrphanCleanupResult(
            orphaned_by_transaction=buckets["orphaned:ledger"],
            orphaned_by_payment=buckets["orphaned:payment"],
            orphaned_by_cheque=buckets["orphaned:cheque"],
            unlinked=buckets["unlinked"],
            candidates=candidates,
            deleted=deleted,
            dry_run=dry_run,
            errors=errors,
        )
        if not dry_run:
            self.activity.log_activity(
                action="cleanup_orphaned",
                module="journal",
                description=f"Deleted {deleted} orphaned journal entries",
                metadata={"candidates": len(candidates), "deleted": deleted, "errors": errors},
            )
        return result

    def cleanup_duplicates(self, dry_run: bool = True) -> DuplicateCleanupResult:
        """Keep the earliest entry per duplicated source and delete the rest."""
        duplicates = self._find_duplicates(self.db.list_journal_entries())
        candidates = [entry_id for dup in duplicates for entry_id in dup.journal_ids[1:]]

        deleted, errors = (0, []) if dry_run else self._delete_entries(candidates)
        if not dry_run:
            self.activity.log_activity(
                action="cleanup_duplicates",
                module="journal",
                description=f"Deleted {deleted} duplicate journal entries",
                metadata={"candidates": len(candidates), "deleted": deleted, "errors": errors},
            )
        return DuplicateCleanupResult(
            duplicates=duplicates,
            candidates=candidates,
            deleted=deleted,
            dry_run=dry_run,
            errors=errors,
        )

    def assert_consistent(self) -> None:
        """Raise when the journal has orphans, mismatches or duplicates.

        Raises:
            ConsistencyError: Describing the counts of each problem
        """
        diagnostics = self.diagnose()
        result = self.audit()
        problems = []
        if diagnostics.orphaned:
            problems.append(f"{diagnostics.orphaned} orphaned")
        if result.mismatches:
            problems.append(f"{len(result.mismatches)} mismatched")
        if result.duplicates:
            problems.append(f"{len(result.duplicates)} duplicated sources")
        if problems:
            difference = sum((m.difference for m in result.mismatches), ZERO)
            raise ConsistencyError(
                "Journal is inconsistent with source records: " + ", ".join(problems),
                difference=difference,
            )

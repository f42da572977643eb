"""Bounded atomic write batch.

A ``WriteBatch`` collects up to ``MAX_BATCH_OPERATIONS`` writes which
``Database.commit_batch`` applies in a single transaction: either every
operation lands or none does. Ids for created rows are assigned when the
operation is queued so callers can cross-reference them inside one batch.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from factorybooks.database.models import new_id
from factorybooks.domain.entities import (
    Account,
    ChequeStatus,
    FixedAsset,
    LedgerType,
    PaymentStatus,
)
from factorybooks.domain.errors import PersistenceError

MAX_BATCH_OPERATIONS = 500


@dataclass(frozen=True)
class BatchOperation:
    kind: str
    payload: dict[str, Any]


class WriteBatch:
    """Queue of writes committed atomically."""

    def __init__(self, limit: int = MAX_BATCH_OPERATIONS):
        self.limit = limit
        self._operations: list[BatchOperation] = []

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def operations(self) -> list[BatchOperation]:
        return list(self._operations)

    @property
    def remaining(self) -> int:
        return self.limit - len(self._operations)

    def _add(self, kind: str, **payload) -> None:
        if len(self._operations) >= self.limit:
            raise PersistenceError(
                f"Write batch is full ({self.limit} operations); split the work "
                "into several batches"
            )
        self._operations.append(BatchOperation(kind=kind, payload=payload))

    def add_account(self, account: Account) -> None:
        self._add("add_account", account=account)

    def add_ledger_entry(
        self,
        type: LedgerType,
        amount: Decimal,
        date: date,
        description: str,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
        auto_generated: bool = False,
    ) -> str:
        """Queue a fully paid ledger entry. Returns its id."""
        entry_id = new_id()
        self._add(
            "add_ledger_entry",
            id=entry_id,
            type=type,
            amount=amount,
            date=date,
            description=description,
            category=category,
            sub_category=sub_category,
            auto_generated=auto_generated,
        )
        return entry_id

    def update_ledger_balance(
        self,
        entry_id: str,
        payment_status: PaymentStatus,
        remaining_balance: Decimal,
        total_paid: Decimal,
    ) -> None:
        self._add(
            "update_ledger_balance",
            id=entry_id,
            payment_status=payment_status,
            remaining_balance=remaining_balance,
            total_paid=total_paid,
        )

    def update_cheque_status(self, cheque_id: str, status: ChequeStatus) -> None:
        self._add("update_cheque_status", id=cheque_id, status=status)

    def update_fixed_asset(self, asset: FixedAsset) -> None:
        """Queue the depreciation state of ``asset`` for writing."""
        self._add("update_fixed_asset", asset=asset)

    def add_depreciation_record(
        self,
        asset_id: str,
        period_label: str,
        amount: Decimal,
        accumulated_before: Decimal,
        accumulated_after: Decimal,
        book_value_before: Decimal,
        book_value_after: Decimal,
        ledger_entry_id: Optional[str],
    ) -> str:
        record_id = new_id()
        self._add(
            "add_depreciation_record",
            id=record_id,
            asset_id=asset_id,
            period_label=period_label,
            amount=amount,
            accumulated_before=accumulated_before,
            accumulated_after=accumulated_after,
            book_value_before=book_value_before,
            book_value_after=book_value_after,
            ledger_entry_id=ledger_entry_id,
        )
        return record_id

    def add_depreciation_run(
        self,
        period_label: str,
        assets_count: int,
        total_depreciation: Decimal,
        ledger_entry_id: Optional[str],
        run_date: date,
    ) -> str:
        run_id = new_id()
        self._add(
            "add_depreciation_run",
            id=run_id,
            period_label=period_label,
            assets_count=assets_count,
            total_depreciation=total_depreciation,
            ledger_entry_id=ledger_entry_id,
            run_date=run_date,
        )
        return run_id

    def delete_journal_entry(self, entry_id: str) -> None:
        self._add("delete_journal_entry", id=entry_id)

"""Monthly straight-line depreciation scheduler.

Periods are calendar months labelled "YYYY-MM". Each period is processed at
most once per tenant: the ``DepreciationRun`` written with the period's
records is its fence. Periods run strictly in order and the first failure
stops the run; calling again resumes from whatever the store says is
processed.

A period is written in two steps. One atomic batch holds the per-asset
records, the asset updates, the aggregate ledger entry and the fence. The
journal entry is posted afterwards. If that post fails the batch stays
committed and the missing entry is logged at CRITICAL for manual recovery.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from factorybooks.database.base import Database
from factorybooks.database.batch import WriteBatch
from factorybooks.domain import templates
from factorybooks.domain.activity import ActivityLogService
from factorybooks.domain.chart_of_accounts import AccountCodes
from factorybooks.domain.entities import (
    AssetStatus,
    AutoDepreciationResult,
    DepreciationPeriodResult,
    DepreciationStatus,
    FixedAsset,
    JournalSource,
    LedgerType,
    SourceType,
)
from factorybooks.domain.errors import (
    ConflictError,
    DomainError,
    ValidationError,
    date_locked,
    period_already_processed,
)
from factorybooks.domain.posting import JournalPostingEngine
from factorybooks.logging_config import get_logger
from factorybooks.utils.date_parser import (
    iter_months,
    month_end,
    month_start,
    parse_period,
    period_label,
)
from factorybooks.utils.money import round_currency

logger = get_logger("depreciation")

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class _AssetCharge:
    before: FixedAsset
    after: FixedAsset
    amount: Decimal


def monthly_depreciation_for(
    purchase_cost: Decimal, salvage_value: Decimal, useful_life_months: int
) -> Decimal:
    """Straight-line monthly charge, rounded to cents."""
    return round_currency((purchase_cost - salvage_value) / Decimal(useful_life_months))


def plan_period(period_start: date, assets: list[FixedAsset]) -> list[_AssetCharge]:
    """Charges for one period, computed from in-memory snapshots.

    Only active assets bought on or before the period's month with value left
    to depreciate are charged; the last charge is capped at what remains.
    """
    period_end = month_end(period_start)
    charges = []
    for asset in assets:
        if asset.status != AssetStatus.ACTIVE or asset.purchase_date > period_end:
            continue
        amount = min(asset.monthly_depreciation, asset.remaining_depreciable)
        if amount <= 0:
            continue
        accumulated = asset.accumulated_depreciation + amount
        after = replace(
            asset,
            accumulated_depreciation=accumulated,
            book_value=asset.purchase_cost - accumulated,
            last_depreciation_date=period_end,
        )
        charges.append(_AssetCharge(before=asset, after=after, amount=amount))
    return charges


class DepreciationScheduler:
    """Runs monthly depreciation over the tenant's fixed assets."""

    def __init__(
        self,
        db: Database,
        engine: Optional[JournalPostingEngine] = None,
        activity: Optional[ActivityLogService] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize depreciation scheduler.

        Args:
            db: Database instance
            engine: Posting engine for the period journal entries
            activity: Activity log for processed periods
            today: Clock; the current month is never depreciated
        """
        self.db = db
        self.engine = engine or JournalPostingEngine(db, today=today)
        self.activity = activity or ActivityLogService(db)
        self.today = today

    def add_asset(
        self,
        name: str,
        purchase_date: date,
        purchase_cost,
        useful_life_months: int,
        salvage_value=0,
        monthly_depreciation=None,
    ) -> FixedAsset:
        """Register a fixed asset for depreciation.

        Args:
            name: Asset name
            purchase_date: Date the asset was acquired
            purchase_cost: Positive cost
            useful_life_months: Months over which cost less salvage is spread
            salvage_value: Value left at the end of its life
            monthly_depreciation: Overrides the straight-line charge

        Returns:
            The stored asset

        Raises:
            ValidationError: If the figures are inconsistent
        """
        try:
            cost = round_currency(purchase_cost)
            salvage = round_currency(salvage_value)
            monthly = (
                round_currency(monthly_depreciation) if monthly_depreciation is not None else None
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if cost <= 0:
            raise ValidationError(f"Purchase cost must be greater than zero (got {cost})")
        if salvage < 0 or salvage > cost:
            raise ValidationError(f"Salvage value must be between 0 and {cost} (got {salvage})")
        if useful_life_months <= 0:
            raise ValidationError("Useful life must be at least one month")
        if monthly is None:
            monthly = monthly_depreciation_for(cost, salvage, useful_life_months)
        if monthly <= 0:
            raise ValidationError("Monthly depreciation must be greater than zero")

        asset_id = self.db.create_fixed_asset(
            name=name,
            purchase_date=purchase_date,
            purchase_cost=cost,
            salvage_value=salvage,
            useful_life_months=useful_life_months,
            monthly_depreciation=monthly,
        )
        return self.db.get_fixed_asset(asset_id)

    def _load_assets(self, assets: Optional[list[FixedAsset]]) -> list[FixedAsset]:
        if assets is None:
            return self.db.list_fixed_assets(active_only=True)
        return list(assets)

    def _last_closed_month(self) -> date:
        return month_start(self.today()) - relativedelta(months=1)

    def get_pending_periods(self, assets: Optional[list[FixedAsset]] = None) -> list[str]:
        """Unprocessed months from the earliest active purchase to last month.

        Args:
            assets: Snapshots to consider; defaults to the stored active assets

        Returns:
            Period labels in ascending order
        """
        active = [a for a in self._load_assets(assets) if a.status == AssetStatus.ACTIVE]
        if not active:
            return []
        earliest = min(a.purchase_date for a in active)
        last = self._last_closed_month()
        if month_start(earliest) > last:
            return []
        processed = {run.period_label for run in self.db.list_depreciation_runs()}
        return [
            period_label(month)
            for month in iter_months(earliest, last)
            if period_label(month) not in processed
        ]

    def run_for_period(
        self, period: str, assets: Optional[list[FixedAsset]] = None
    ) -> DepreciationPeriodResult:
        """Depreciate every eligible asset for one month.

        Args:
            period: "YYYY-MM" label; must be before the current month
            assets: Snapshots to depreciate; defaults to the stored active assets

        Returns:
            DepreciationPeriodResult. ``already_processed`` is set when the
            period's fence exists, in which case nothing was written.
        """
        try:
            period_start = parse_period(period)
        except ValueError as e:
            return DepreciationPeriodResult(period_label=period, success=False, error=str(e))
        label = period_label(period_start)
        period_end = month_end(period_start)

        if period_start > self._last_closed_month():
            return DepreciationPeriodResult(
                period_label=label,
                success=False,
                error=f"Period {label} has not closed yet",
            )

        if self.db.get_depreciation_run(label) is not None:
            logger.info(
                "depreciation period already processed",
                extra={"tenant_id": self.db.tenant_id, "period": label},
            )
            return self._already_processed(label)

        lock_date = self.db.get_lock_date()
        if lock_date is not None and period_end <= lock_date:
            return DepreciationPeriodResult(
                period_label=label, success=False, error=date_locked(period_end, lock_date)
            )

        charges = plan_period(period_start, self._load_assets(assets))
        total = sum((c.amount for c in charges), ZERO)
        description = f"Depreciation for {label}"

        try:
            batch = WriteBatch()
            ledger_entry_id = None
            if total > 0:
                ledger_entry_id = batch.add_ledger_entry(
                    type=LedgerType.EXPENSE,
                    amount=total,
                    date=period_end,
                    description=description,
                    category="depreciation",
                    auto_generated=True,
                )
            for charge in charges:
                batch.add_depreciation_record(
                    asset_id=charge.before.id,
                    period_label=label,
                    amount=charge.amount,
                    accumulated_before=charge.before.accumulated_depreciation,
                    accumulated_after=charge.after.accumulated_depreciation,
                    book_value_before=charge.before.book_value,
                    book_value_after=charge.after.book_value,
                    ledger_entry_id=ledger_entry_id,
                )
                batch.update_fixed_asset(charge.after)
            run_id = batch.add_depreciation_run(
                period_label=label,
                assets_count=len(charges),
                total_depreciation=total,
                ledger_entry_id=ledger_entry_id,
                run_date=self.today(),
            )
            self.db.commit_batch(batch)
        except ConflictError as e:
            if self.db.get_depreciation_run(label) is not None:
                logger.info(
                    "depreciation period processed concurrently",
                    extra={"tenant_id": self.db.tenant_id, "period": label},
                )
                return self._already_processed(label)
            return self._batch_failed(label, e)
        except DomainError as e:
            return self._batch_failed(label, e)

        updated = [c.after for c in charges]
        journal_entry_id = None
        if total > 0:
            posting = self.engine.post(
                templates.DEPRECIATION,
                total,
                period_end,
                description,
                source=JournalSource(
                    SourceType.DEPRECIATION, run_id, transaction_id=ledger_entry_id
                ),
            )
            if not posting.success:
                logger.critical(
                    "depreciation journal entry missing after batch commit",
                    extra={
                        "tenant_id": self.db.tenant_id,
                        "period": label,
                        "amount": total,
                        "ledger_entry_id": ledger_entry_id,
                        "run_id": run_id,
                        "error": str(posting.error),
                        "recovery": (
                            f"Manual journal entry required: DR {AccountCodes.DEPRECIATION_EXPENSE} "
                            f"(Depreciation Expense), CR {AccountCodes.ACCUMULATED_DEPRECIATION} "
                            f"(Accumulated Depreciation), amount {total}, dated {period_end.isoformat()}"
                        ),
                    },
                )
                return DepreciationPeriodResult(
                    period_label=label,
                    success=False,
                    assets_count=len(charges),
                    total_depreciation=total,
                    ledger_entry_id=ledger_entry_id,
                    assets=updated,
                    error=f"Journal entry for {label} failed: {posting.error}",
                )
            journal_entry_id = posting.journal_entry_id

        logger.info(
            "depreciation period processed",
            extra={
                "tenant_id": self.db.tenant_id,
                "period": label,
                "assets": len(charges),
                "total": total,
            },
        )
        self.activity.log_activity(
            action="depreciation_run",
            module="fixed_assets",
            description=description,
            target_id=run_id,
            metadata={"period": label, "assets_count": len(charges), "total": total},
        )
        return DepreciationPeriodResult(
            period_label=label,
            success=True,
            assets_count=len(charges),
            total_depreciation=total,
            ledger_entry_id=ledger_entry_id,
            journal_entry_id=journal_entry_id,
            assets=updated,
        )

    def run_all_pending(self, assets: Optional[list[FixedAsset]] = None) -> AutoDepreciationResult:
        """Process every pending period in order, stopping at the first failure.

        Asset snapshots are carried forward in memory between periods. A
        period another runner processed in the meantime is skipped and the
        snapshots are reloaded from the store before the next one.

        Returns:
            AutoDepreciationResult with the processed and skipped periods, the
            failing period if any, and the final asset snapshots
        """
        current = self._load_assets(assets)
        processed: list[str] = []
        skipped: list[str] = []
        total = ZERO

        for label in self.get_pending_periods(current):
            result = self.run_for_period(label, current)
            if result.already_processed:
                logger.info(
                    "depreciation period skipped",
                    extra={"tenant_id": self.db.tenant_id, "period": label},
                )
                skipped.append(label)
                current = self._reload_assets(current)
                continue
            if result.assets:
                updated = {a.id: a for a in result.assets}
                current = [updated.get(a.id, a) for a in current]
            if not result.success:
                logger.error(
                    "depreciation run stopped",
                    extra={
                        "tenant_id": self.db.tenant_id,
                        "failed_at": label,
                        "processed": processed,
                        "error": result.error,
                    },
                )
                return AutoDepreciationResult(
                    processed_periods=processed,
                    failed_at=label,
                    errors=[result.error or "unknown error"],
                    total_depreciation=total,
                    assets=current,
                    skipped_periods=skipped,
                )
            processed.append(label)
            total += result.total_depreciation

        return AutoDepreciationResult(
            processed_periods=processed,
            failed_at=None,
            errors=[],
            total_depreciation=total,
            assets=current,
            skipped_periods=skipped,
        )

    def _reload_assets(self, assets: list[FixedAsset]) -> list[FixedAsset]:
        reloaded = (self.db.get_fixed_asset(a.id) for a in assets)
        return [a for a in reloaded if a is not None]

    def get_depreciation_status(
        self, assets: Optional[list[FixedAsset]] = None
    ) -> DepreciationStatus:
        """Pending work and an estimate of what running it would charge."""
        current = self._load_assets(assets)
        pending = self.get_pending_periods(current)
        estimated = ZERO
        for label in pending:
            charges = plan_period(parse_period(label), current)
            estimated += sum((c.amount for c in charges), ZERO)
            updated = {c.after.id: c.after for c in charges}
            current = [updated.get(a.id, a) for a in current]

        runs = self.db.list_depreciation_runs()
        return DepreciationStatus(
            pending_count=len(pending),
            oldest_pending=pending[0] if pending else None,
            pending_periods=pending,
            estimated_total=estimated,
            last_processed=runs[-1].period_label if runs else None,
        )

    def _already_processed(self, label: str) -> DepreciationPeriodResult:
        return DepreciationPeriodResult(
            period_label=label,
            success=False,
            already_processed=True,
            error=period_already_processed(label),
        )

    def _batch_failed(self, label: str, error: DomainError) -> DepreciationPeriodResult:
        logger.error(
            "depreciation batch failed",
            extra={"tenant_id": self.db.tenant_id, "period": label, "error": str(error)},
        )
        return DepreciationPeriodResult(period_label=label, success=False, error=str(error))

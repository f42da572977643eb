"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, so the domain keeps enum-typed,
immutable entities while the schema stores plain strings and numerics.
"""

from decimal import Decimal

from factorybooks.domain import entities as domain
from factorybooks.database.models import (
    Account as ORMAccount,
    JournalEntry as ORMJournalEntry,
    LedgerEntry as ORMLedgerEntry,
    Payment as ORMPayment,
    Cheque as ORMCheque,
    FixedAsset as ORMFixedAsset,
    DepreciationRecord as ORMDepreciationRecord,
    DepreciationRun as ORMDepreciationRun,
    ActivityLog as ORMActivityLog,
)
from factorybooks.utils.money import round_currency


def _money(value) -> Decimal:
    """Normalize a stored numeric to a cents Decimal."""
    return round_currency(value if value is not None else 0)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        code=orm_account.code,
        name=orm_account.name,
        name_localized=orm_account.name_localized,
        type=domain.AccountType(orm_account.type),
        normal_side=domain.NormalSide(orm_account.normal_side),
        parent_code=orm_account.parent_code,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model to domain JournalEntry entity."""
    source = None
    if orm_entry.source_type is not None and orm_entry.source_id is not None:
        source = domain.JournalSource(
            source_type=domain.SourceType(orm_entry.source_type),
            document_id=orm_entry.source_id,
            transaction_id=orm_entry.transaction_id,
        )
    return domain.JournalEntry(
        id=orm_entry.id,
        sequence_number=orm_entry.sequence_number,
        entry_number=orm_entry.entry_number,
        date=orm_entry.date,
        description=orm_entry.description,
        debit_account_code=orm_entry.debit_account_code,
        credit_account_code=orm_entry.credit_account_code,
        debit_amount=_money(orm_entry.debit_amount),
        credit_amount=_money(orm_entry.credit_amount),
        template_id=orm_entry.template_id,
        source=source,
        created_at=orm_entry.created_at,
        reverses_entry_id=orm_entry.reverses_entry_id,
        reversed_by_entry_id=orm_entry.reversed_by_entry_id,
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        type=domain.LedgerType(orm_entry.type),
        amount=_money(orm_entry.amount),
        date=orm_entry.date,
        description=orm_entry.description,
        category=orm_entry.category,
        sub_category=orm_entry.sub_category,
        is_arap_entry=orm_entry.is_arap_entry,
        payment_status=domain.PaymentStatus(orm_entry.payment_status),
        remaining_balance=_money(orm_entry.remaining_balance),
        total_paid=_money(orm_entry.total_paid),
        auto_generated=orm_entry.auto_generated,
        created_at=orm_entry.created_at,
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    """Convert SQLAlchemy Payment model to domain Payment entity."""
    return domain.Payment(
        id=orm_payment.id,
        amount=_money(orm_payment.amount),
        direction=domain.PaymentDirection(orm_payment.direction),
        date=orm_payment.date,
        linked_transaction_id=orm_payment.linked_transaction_id,
        no_cash_movement=orm_payment.no_cash_movement,
        is_endorsement=orm_payment.is_endorsement,
        notes=orm_payment.notes,
        created_at=orm_payment.created_at,
    )


def cheque_to_domain(orm_cheque: ORMCheque) -> domain.Cheque:
    """Convert SQLAlchemy Cheque model to domain Cheque entity."""
    return domain.Cheque(
        id=orm_cheque.id,
        cheque_number=orm_cheque.cheque_number,
        amount=_money(orm_cheque.amount),
        direction=domain.ChequeDirection(orm_cheque.direction),
        status=domain.ChequeStatus(orm_cheque.status),
        due_date=orm_cheque.due_date,
        linked_transaction_id=orm_cheque.linked_transaction_id,
        created_at=orm_cheque.created_at,
    )


def fixed_asset_to_domain(orm_asset: ORMFixedAsset) -> domain.FixedAsset:
    """Convert SQLAlchemy FixedAsset model to domain FixedAsset entity."""
    return domain.FixedAsset(
        id=orm_asset.id,
        name=orm_asset.name,
        purchase_date=orm_asset.purchase_date,
        purchase_cost=_money(orm_asset.purchase_cost),
        salvage_value=_money(orm_asset.salvage_value),
        useful_life_months=orm_asset.useful_life_months,
        monthly_depreciation=_money(orm_asset.monthly_depreciation),
        accumulated_depreciation=_money(orm_asset.accumulated_depreciation),
        book_value=_money(orm_asset.book_value),
        status=domain.AssetStatus(orm_asset.status),
        last_depreciation_date=orm_asset.last_depreciation_date,
        created_at=orm_asset.created_at,
    )


def depreciation_record_to_domain(orm_record: ORMDepreciationRecord) -> domain.DepreciationRecord:
    """Convert SQLAlchemy DepreciationRecord model to domain entity."""
    return domain.DepreciationRecord(
        id=orm_record.id,
        asset_id=orm_record.asset_id,
        period_label=orm_record.period_label,
        amount=_money(orm_record.amount),
        accumulated_before=_money(orm_record.accumulated_before),
        accumulated_after=_money(orm_record.accumulated_after),
        book_value_before=_money(orm_record.book_value_before),
        book_value_after=_money(orm_record.book_value_after),
        ledger_entry_id=orm_record.ledger_entry_id,
        created_at=orm_record.created_at,
    )


def depreciation_run_to_domain(orm_run: ORMDepreciationRun) -> domain.DepreciationRun:
    """Convert SQLAlchemy DepreciationRun model to domain entity."""
    return domain.DepreciationRun(
        id=orm_run.id,
        period_label=orm_run.period_label,
        assets_count=orm_run.assets_count,
        total_depreciation=_money(orm_run.total_depreciation),
        ledger_entry_id=orm_run.ledger_entry_id,
        run_date=orm_run.run_date,
        created_at=orm_run.created_at,
    )


def activity_log_to_domain(orm_log: ORMActivityLog) -> domain.ActivityLogEntry:
    """Convert SQLAlchemy ActivityLog model to domain entity."""
    return domain.ActivityLogEntry(
        id=orm_log.id,
        action=orm_log.action,
        module=orm_log.module,
        target_id=orm_log.target_id,
        user_id=orm_log.user_id,
        description=orm_log.description,
        metadata=dict(orm_log.details or {}),
        created_at=orm_log.created_at,
    )

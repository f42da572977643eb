"""SQLAlchemy models for the factorybooks database.

Every table carries a ``tenant_id`` column; ``SQLAlchemyDatabase`` filters on
it so one database file can hold the books of several companies.
"""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    CheckConstraint,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()

Money = Numeric(14, 2)


def new_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    """Chart of accounts row."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    name_localized = Column(String, nullable=False)
    type = Column(String, nullable=False)
    normal_side = Column(String, nullable=False)
    parent_code = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "code", name="uq_account_tenant_code"),)


class JournalEntry(Base):
    """Two-leg journal entry. Debit and credit amounts are always equal."""

    __tablename__ = "journal_entries"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    sequence_number = Column(Integer, nullable=False)
    entry_number = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    debit_account_code = Column(String, nullable=False)
    credit_account_code = Column(String, nullable=False)
    debit_amount = Column(Money, nullable=False)
    credit_amount = Column(Money, nullable=False)
    template_id = Column(String, nullable=True)
    source_type = Column(String, nullable=True)
    source_id = Column(String, nullable=True)
    transaction_id = Column(String, nullable=True)
    reverses_entry_id = Column(String(32), nullable=True)
    reversed_by_entry_id = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "sequence_number", name="uq_journal_tenant_sequence"),
        CheckConstraint("debit_amount = credit_amount", name="ck_journal_balanced"),
        CheckConstraint("debit_amount > 0", name="ck_journal_positive"),
        Index("ix_journal_tenant_source", "tenant_id", "source_type", "source_id"),
    )


class LedgerEntry(Base):
    """Business transaction (income, expense, equity or loan) entered by the operator."""

    __tablename__ = "ledger_entries"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    type = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    category = Column(String, nullable=True)
    sub_category = Column(String, nullable=True)
    is_arap_entry = Column(Boolean, default=False, nullable=False)
    payment_status = Column(String, nullable=False, default="paid")
    remaining_balance = Column(Money, nullable=False, default=0)
    total_paid = Column(Money, nullable=False, default=0)
    auto_generated = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Payment(Base):
    """Cash receipt or disbursement."""

    __tablename__ = "payments"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    direction = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    linked_transaction_id = Column(String(32), nullable=True)
    no_cash_movement = Column(Boolean, default=False, nullable=False)
    is_endorsement = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Cheque(Base):
    """Incoming or outgoing cheque and its lifecycle status."""

    __tablename__ = "cheques"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    cheque_number = Column(String, nullable=False)
    amount = Column(Money, nullable=False)
    direction = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    due_date = Column(Date, nullable=True)
    linked_transaction_id = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class FixedAsset(Base):
    """Depreciable fixed asset."""

    __tablename__ = "fixed_assets"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    purchase_date = Column(Date, nullable=False)
    purchase_cost = Column(Money, nullable=False)
    salvage_value = Column(Money, nullable=False, default=0)
    useful_life_months = Column(Integer, nullable=False)
    monthly_depreciation = Column(Money, nullable=False)
    accumulated_depreciation = Column(Money, nullable=False, default=0)
    book_value = Column(Money, nullable=False)
    status = Column(String, nullable=False, default="active")
    last_depreciation_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class DepreciationRecord(Base):
    """One asset's depreciation for one period."""

    __tablename__ = "depreciation_records"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    asset_id = Column(String(32), nullable=False)
    period_label = Column(String(7), nullable=False)
    amount = Column(Money, nullable=False)
    accumulated_before = Column(Money, nullable=False)
    accumulated_after = Column(Money, nullable=False)
    book_value_before = Column(Money, nullable=False)
    book_value_after = Column(Money, nullable=False)
    ledger_entry_id = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "asset_id", "period_label", name="uq_depreciation_asset_period"),
    )


class DepreciationRun(Base):
    """Per-period fence; its presence marks the period processed."""

    __tablename__ = "depreciation_runs"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    period_label = Column(String(7), nullable=False)
    assets_count = Column(Integer, nullable=False)
    total_depreciation = Column(Money, nullable=False)
    ledger_entry_id = Column(String(32), nullable=True)
    run_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "period_label", name="uq_depreciation_run_period"),)


class ActivityLog(Base):
    """Operator-facing activity trail."""

    __tablename__ = "activity_logs"

    id = Column(String(32), primary_key=True, default=new_id)
    tenant_id = Column(String, nullable=False)
    action = Column(String, nullable=False)
    module = Column(String, nullable=False)
    target_id = Column(String, nullable=True)
    user_id = Column(String, nullable=True)
    description = Column(String, nullable=False, default="")
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class AccountingSettings(Base):
    """Per-tenant accounting settings."""

    __tablename__ = "accounting_settings"

    tenant_id = Column(String, primary_key=True)
    lock_date = Column(Date, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory and make sure tables exist."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # Share one connection so every session sees the same in-memory db
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AlreadyProcessedError(ConflictError):
    """A depreciation period already has a run recorded."""

    def __init__(self, period_label: str):
        super().__init__(period_already_processed(period_label))
        self.period_label = period_label


class PersistenceError(DomainError):
    """The store rejected a read or write. Callers may retry once."""


class ConsistencyError(DomainError):
    """Books or source records disagree.

    ``difference`` carries the numeric gap when there is one.
    """

    def __init__(self, message: str, difference: Optional[Decimal] = None):
        super().__init__(message)
        self.difference = difference


class InvalidChequeTransitionError(ValidationError):
    """A cheque cannot move from its current status to the requested one."""

    def __init__(self, cheque_id: str, current: str, target: str):
        super().__init__(invalid_cheque_transition(cheque_id, current, target))
        self.cheque_id = cheque_id
        self.current = current
        self.target = target


def unknown_template(template_id: str) -> str:
    """Return message for an unknown journal template."""
    return f"Unknown journal template '{template_id}'"


def non_positive_amount(amount) -> str:
    """Return message for an amount that is zero or negative."""
    return f"Amount must be greater than zero (got {amount})"


def date_locked(entry_date, lock_date) -> str:
    """Return message for a posting inside a closed period."""
    return (
        f"Date {entry_date.isoformat()} falls on or before the lock date "
        f"{lock_date.isoformat()}"
    )


def journal_entry_not_found(entry_id: str) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def document_not_found(kind: str, document_id: str) -> str:
    """Return message for a missing source document."""
    return f"{kind.capitalize()} {document_id} not found"


def period_already_processed(period_label: str) -> str:
    """Return message for a depreciation period that already ran."""
    return f"Depreciation for period {period_label} has already been processed"


def invalid_cheque_transition(cheque_id: str, current: str, target: str) -> str:
    """Return message for an illegal cheque status change."""
    return f"Cheque {cheque_id} cannot move from '{current}' to '{target}'"


def unbalanced_amounts(debit: Decimal, credit: Decimal) -> str:
    """Return message for a journal entry whose sides differ."""
    return f"Debit amount {debit} does not equal credit amount {credit}"

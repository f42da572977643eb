"""Journal templates: business event kind to one debit and one credit account.

Most templates name both accounts outright. The ledger templates and the fixed
asset purchase leave one side open and resolve it from a posting context:

* ``category`` / ``sub_category`` pick the revenue or expense account
* ``is_arap_entry`` and ``immediate_settlement`` choose AR/AP over Cash
* ``on_credit`` buys a fixed asset on account instead of for cash
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from factorybooks.domain.chart_of_accounts import AccountCodes
from factorybooks.domain.errors import ValidationError, unknown_template

LEDGER_INCOME = "LEDGER_INCOME"
LEDGER_EXPENSE = "LEDGER_EXPENSE"
PAYMENT_RECEIPT = "PAYMENT_RECEIPT"
PAYMENT_DISBURSEMENT = "PAYMENT_DISBURSEMENT"
COGS = "COGS"
DEPRECIATION = "DEPRECIATION"
BAD_DEBT = "BAD_DEBT"
SALES_DISCOUNT = "SALES_DISCOUNT"
PURCHASE_DISCOUNT = "PURCHASE_DISCOUNT"
ENDORSEMENT = "ENDORSEMENT"
CLIENT_ADVANCE = "CLIENT_ADVANCE"
SUPPLIER_ADVANCE = "SUPPLIER_ADVANCE"
APPLY_CLIENT_ADVANCE = "APPLY_CLIENT_ADVANCE"
APPLY_SUPPLIER_ADVANCE = "APPLY_SUPPLIER_ADVANCE"
FIXED_ASSET_PURCHASE = "FIXED_ASSET_PURCHASE"
OWNER_CAPITAL = "OWNER_CAPITAL"
OWNER_DRAWINGS = "OWNER_DRAWINGS"
LOAN_GIVEN = "LOAN_GIVEN"
LOAN_COLLECTION = "LOAN_COLLECTION"
LOAN_RECEIVED = "LOAN_RECEIVED"
LOAN_REPAYMENT = "LOAN_REPAYMENT"


@dataclass(frozen=True)
class JournalTemplate:
    """A fixed debit/credit pair. ``None`` marks a side resolved from context."""

    id: str
    description: str
    debit_account: Optional[str]
    credit_account: Optional[str]


_A = AccountCodes

JOURNAL_TEMPLATES: dict[str, JournalTemplate] = {
    t.id: t
    for t in [
        JournalTemplate(LEDGER_INCOME, "Income", None, None),
        JournalTemplate(LEDGER_EXPENSE, "Expense", None, None),
        JournalTemplate(PAYMENT_RECEIPT, "Payment received", _A.CASH, _A.ACCOUNTS_RECEIVABLE),
        JournalTemplate(PAYMENT_DISBURSEMENT, "Payment made", _A.ACCOUNTS_PAYABLE, _A.CASH),
        JournalTemplate(COGS, "Cost of goods sold", _A.COST_OF_GOODS_SOLD, _A.INVENTORY),
        JournalTemplate(
            DEPRECIATION,
            "Monthly depreciation",
            _A.DEPRECIATION_EXPENSE,
            _A.ACCUMULATED_DEPRECIATION,
        ),
        JournalTemplate(BAD_DEBT, "Bad debt write-off", _A.BAD_DEBT_EXPENSE, _A.ACCOUNTS_RECEIVABLE),
        JournalTemplate(SALES_DISCOUNT, "Settlement discount allowed", _A.SALES_DISCOUNT, _A.ACCOUNTS_RECEIVABLE),
        JournalTemplate(
            PURCHASE_DISCOUNT,
            "Settlement discount received",
            _A.ACCOUNTS_PAYABLE,
            _A.PURCHASE_DISCOUNT,
        ),
        JournalTemplate(ENDORSEMENT, "Cheque endorsement", _A.ACCOUNTS_PAYABLE, _A.ACCOUNTS_RECEIVABLE),
        JournalTemplate(CLIENT_ADVANCE, "Client advance received", _A.CASH, _A.CUSTOMER_ADVANCES),
        JournalTemplate(SUPPLIER_ADVANCE, "Supplier advance paid", _A.SUPPLIER_ADVANCES, _A.CASH),
        JournalTemplate(
            APPLY_CLIENT_ADVANCE,
            "Client advance applied",
            _A.CUSTOMER_ADVANCES,
            _A.ACCOUNTS_RECEIVABLE,
        ),
        JournalTemplate(
            APPLY_SUPPLIER_ADVANCE,
            "Supplier advance applied",
            _A.ACCOUNTS_PAYABLE,
            _A.SUPPLIER_ADVANCES,
        ),
        JournalTemplate(FIXED_ASSET_PURCHASE, "Fixed asset purchase", _A.FIXED_ASSETS, None),
        JournalTemplate(OWNER_CAPITAL, "Owner capital contribution", _A.CASH, _A.OWNER_CAPITAL),
        JournalTemplate(OWNER_DRAWINGS, "Owner drawings", _A.OWNER_DRAWINGS, _A.CASH),
        JournalTemplate(LOAN_GIVEN, "Loan given", _A.LOANS_RECEIVABLE, _A.CASH),
        JournalTemplate(LOAN_COLLECTION, "Loan collected", _A.CASH, _A.LOANS_RECEIVABLE),
        JournalTemplate(LOAN_RECEIVED, "Loan received", _A.CASH, _A.LOANS_PAYABLE),
        JournalTemplate(LOAN_REPAYMENT, "Loan repaid", _A.LOANS_PAYABLE, _A.CASH),
    ]
}

CATEGORY_TO_REVENUE_ACCOUNT = {
    "sales": _A.SALES_REVENUE,
    "product sales": "4010",
    "service sales": "4110",
    "services": _A.SERVICE_REVENUE,
    "other sales": _A.SALES_REVENUE,
    "other income": _A.OTHER_INCOME,
    "bank interest": "4210",
    "asset sale": "4220",
    "miscellaneous income": "4230",
}

CATEGORY_TO_EXPENSE_ACCOUNT = {
    "cogs": _A.COST_OF_GOODS_SOLD,
    "raw materials": "5010",
    "shipping": "5020",
    "freight": "5020",
    "purchased goods": "5030",
    "waste": _A.COST_OF_GOODS_SOLD,
    "free samples": _A.COST_OF_GOODS_SOLD,
    "operating expenses": _A.OTHER_EXPENSES,
    "salaries": _A.SALARIES_EXPENSE,
    "rent": _A.RENT_EXPENSE,
    "utilities": _A.UTILITIES_EXPENSE,
    "electricity & water": "5310",
    "maintenance": _A.MAINTENANCE_EXPENSE,
    "marketing": _A.MARKETING_EXPENSE,
    "office supplies": _A.OFFICE_SUPPLIES,
    "consumables": _A.OFFICE_SUPPLIES,
    "fuel & transportation": _A.TRANSPORTATION_EXPENSE,
    "business travel": _A.TRAVEL_EXPENSE,
    "administrative": _A.ADMIN_EXPENSE,
    "communications": _A.COMMUNICATIONS_EXPENSE,
    "small equipment": _A.SMALL_EQUIPMENT,
    "legal fees": _A.PROFESSIONAL_FEES,
    "insurance": _A.INSURANCE_EXPENSE,
    "general expenses": _A.OTHER_EXPENSES,
    "miscellaneous": _A.MISC_EXPENSES,
    "taxes": _A.TAXES_EXPENSE,
    "loan interest": _A.LOAN_INTEREST_EXPENSE,
    "depreciation": _A.DEPRECIATION_EXPENSE,
}

# Ledger categories that are balance-sheet movements rather than income/expense
CATEGORY_TO_TEMPLATE = {
    "owner capital": OWNER_CAPITAL,
    "owner drawings": OWNER_DRAWINGS,
    "client advance": CLIENT_ADVANCE,
    "supplier advance": SUPPLIER_ADVANCE,
    "loan given": LOAN_GIVEN,
    "loan collection": LOAN_COLLECTION,
    "loan received": LOAN_RECEIVED,
    "loan repayment": LOAN_REPAYMENT,
}


def get_template(template_id: str) -> JournalTemplate:
    """Look up a template.

    Raises:
        ValidationError: If template_id is unknown
    """
    template = JOURNAL_TEMPLATES.get(template_id)
    if template is None:
        raise ValidationError(unknown_template(template_id))
    return template


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _lookup_category(mapping: Mapping[str, str], context: Mapping[str, Any], default: str) -> str:
    """Sub-category wins over category; unmapped categories use ``default``."""
    for key in ("sub_category", "category"):
        code = mapping.get(_normalize(context.get(key)))
        if code is not None:
            return code
    return default


def template_for_category(category: Optional[str], sub_category: Optional[str] = None) -> Optional[str]:
    """Template for a balance-sheet ledger category, if the category is one."""
    for value in (sub_category, category):
        template_id = CATEGORY_TO_TEMPLATE.get(_normalize(value))
        if template_id is not None:
            return template_id
    return None


def resolve_accounts(
    template: JournalTemplate, context: Optional[Mapping[str, Any]] = None
) -> tuple[str, str]:
    """Return the (debit, credit) account codes for ``template``."""
    context = context or {}
    on_account = bool(context.get("is_arap_entry")) and not context.get("immediate_settlement")

    if template.id == LEDGER_INCOME:
        debit = _A.ACCOUNTS_RECEIVABLE if on_account else _A.CASH
        return debit, _lookup_category(CATEGORY_TO_REVENUE_ACCOUNT, context, _A.SALES_REVENUE)

    if template.id == LEDGER_EXPENSE:
        credit = _A.ACCOUNTS_PAYABLE if on_account else _A.CASH
        return _lookup_category(CATEGORY_TO_EXPENSE_ACCOUNT, context, _A.OTHER_EXPENSES), credit

    if template.id == FIXED_ASSET_PURCHASE:
        credit = _A.ACCOUNTS_PAYABLE if context.get("on_credit") else _A.CASH
        return template.debit_account, credit

    return template.debit_account, template.credit_account

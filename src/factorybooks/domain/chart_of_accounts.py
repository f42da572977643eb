"""Chart of accounts: standard account codes and per-tenant seeding."""

from typing import Optional

from factorybooks.database.base import Database
from factorybooks.database.batch import WriteBatch
from factorybooks.domain.entities import Account, AccountType, NormalSide
from factorybooks.domain.errors import NotFoundError
from factorybooks.logging_config import get_logger

logger = get_logger("chart_of_accounts")


class AccountCodes:
    """Standard account codes."""

    # Assets
    CASH = "1000"
    BANK = "1100"
    ACCOUNTS_RECEIVABLE = "1200"
    INVENTORY = "1300"
    SUPPLIER_ADVANCES = "1350"
    PREPAID_EXPENSES = "1400"
    FIXED_ASSETS = "1500"
    ACCUMULATED_DEPRECIATION = "1510"
    LOANS_RECEIVABLE = "1600"

    # Liabilities
    ACCOUNTS_PAYABLE = "2000"
    ACCRUED_EXPENSES = "2100"
    CUSTOMER_ADVANCES = "2150"
    NOTES_PAYABLE = "2200"
    LOANS_PAYABLE = "2300"
    VAT_PAYABLE = "2400"

    # Equity
    OWNER_CAPITAL = "3000"
    OWNER_DRAWINGS = "3100"
    RETAINED_EARNINGS = "3200"

    # Revenue
    SALES_REVENUE = "4000"
    SERVICE_REVENUE = "4100"
    OTHER_INCOME = "4200"
    SALES_DISCOUNT = "4300"

    # Expenses
    COST_OF_GOODS_SOLD = "5000"
    PURCHASE_DISCOUNT = "5050"
    SALARIES_EXPENSE = "5100"
    RENT_EXPENSE = "5200"
    UTILITIES_EXPENSE = "5300"
    DEPRECIATION_EXPENSE = "5400"
    MAINTENANCE_EXPENSE = "5410"
    MARKETING_EXPENSE = "5420"
    OFFICE_SUPPLIES = "5430"
    TRANSPORTATION_EXPENSE = "5440"
    TRAVEL_EXPENSE = "5445"
    ADMIN_EXPENSE = "5450"
    COMMUNICATIONS_EXPENSE = "5460"
    SMALL_EQUIPMENT = "5470"
    PROFESSIONAL_FEES = "5480"
    INSURANCE_EXPENSE = "5490"
    OTHER_EXPENSES = "5500"
    TAXES_EXPENSE = "5510"
    LOAN_INTEREST_EXPENSE = "5520"
    MISC_EXPENSES = "5530"
    BAD_DEBT_EXPENSE = "5600"


CASH_ACCOUNT_CODES = (AccountCodes.CASH, AccountCodes.BANK)

# Codes whose balance runs against their type's natural side
CONTRA_ACCOUNT_CODES = frozenset(
    {
        AccountCodes.ACCUMULATED_DEPRECIATION,
        AccountCodes.OWNER_DRAWINGS,
        AccountCodes.SALES_DISCOUNT,
        AccountCodes.PURCHASE_DISCOUNT,
    }
)

ACCOUNT_CODE_RANGES = {
    AccountType.ASSET: (1000, 1999),
    AccountType.LIABILITY: (2000, 2999),
    AccountType.EQUITY: (3000, 3999),
    AccountType.REVENUE: (4000, 4999),
    AccountType.EXPENSE: (5000, 5999),
}

# (code, name, localized name, type, parent code)
_DEFAULT_ACCOUNT_ROWS = [
    ("1000", "Cash", "النقدية", AccountType.ASSET, None),
    ("1100", "Bank", "البنك", AccountType.ASSET, None),
    ("1200", "Accounts Receivable", "ذمم مدينة", AccountType.ASSET, None),
    ("1300", "Inventory", "المخزون", AccountType.ASSET, None),
    ("1350", "Supplier Advances", "سلفات موردين", AccountType.ASSET, None),
    ("1400", "Prepaid Expenses", "مصاريف مدفوعة مقدماً", AccountType.ASSET, None),
    ("1500", "Fixed Assets", "الأصول الثابتة", AccountType.ASSET, None),
    ("1501", "Machinery & Equipment", "آلات ومعدات", AccountType.ASSET, "1500"),
    ("1502", "Vehicles", "مركبات", AccountType.ASSET, "1500"),
    ("1503", "Furniture & Fixtures", "أثاث وتجهيزات", AccountType.ASSET, "1500"),
    ("1504", "Buildings", "مباني", AccountType.ASSET, "1500"),
    ("1505", "Land", "أراضي", AccountType.ASSET, "1500"),
    ("1510", "Accumulated Depreciation", "مجمع الإهلاك", AccountType.ASSET, "1500"),
    ("1600", "Loans Receivable", "قروض ممنوحة", AccountType.ASSET, None),
    ("2000", "Accounts Payable", "ذمم دائنة", AccountType.LIABILITY, None),
    ("2100", "Accrued Expenses", "مصاريف مستحقة", AccountType.LIABILITY, None),
    ("2150", "Customer Advances", "سلفات عملاء", AccountType.LIABILITY, None),
    ("2200", "Notes Payable", "أوراق دفع", AccountType.LIABILITY, None),
    ("2300", "Loans Payable", "قروض مستحقة", AccountType.LIABILITY, None),
    ("2400", "VAT Payable", "ضريبة المبيعات المستحقة", AccountType.LIABILITY, None),
    ("3000", "Owner's Capital", "رأس المال", AccountType.EQUITY, None),
    ("3100", "Owner's Drawings", "سحوبات المالك", AccountType.EQUITY, None),
    ("3200", "Retained Earnings", "الأرباح المحتجزة", AccountType.EQUITY, None),
    ("4000", "Sales Revenue", "إيرادات المبيعات", AccountType.REVENUE, None),
    ("4010", "Product Sales", "مبيعات منتجات", AccountType.REVENUE, "4000"),
    ("4100", "Service Revenue", "إيرادات الخدمات", AccountType.REVENUE, None),
    ("4110", "Service Sales", "مبيعات خدمات", AccountType.REVENUE, "4100"),
    ("4200", "Other Income", "إيرادات أخرى", AccountType.REVENUE, None),
    ("4210", "Bank Interest Income", "فوائد بنكية", AccountType.REVENUE, "4200"),
    ("4220", "Asset Sale Income", "بيع أصول", AccountType.REVENUE, "4200"),
    ("4230", "Miscellaneous Income", "إيرادات متنوعة", AccountType.REVENUE, "4200"),
    ("4300", "Sales Discount", "خصم المبيعات", AccountType.REVENUE, None),
    ("5000", "Cost of Goods Sold", "تكلفة البضاعة المباعة", AccountType.EXPENSE, None),
    ("5010", "Raw Materials", "مواد خام", AccountType.EXPENSE, "5000"),
    ("5020", "Shipping & Freight", "شحن ونقل بضاعة", AccountType.EXPENSE, "5000"),
    ("5030", "Purchased Goods", "شراء بضاعة جاهزة", AccountType.EXPENSE, "5000"),
    ("5050", "Purchase Discount", "خصم المشتريات", AccountType.EXPENSE, None),
    ("5100", "Salaries Expense", "مصاريف الرواتب", AccountType.EXPENSE, None),
    ("5200", "Rent Expense", "مصاريف الإيجار", AccountType.EXPENSE, None),
    ("5300", "Utilities Expense", "مصاريف المرافق", AccountType.EXPENSE, None),
    ("5310", "Electricity & Water", "كهرباء وماء", AccountType.EXPENSE, "5300"),
    ("5400", "Depreciation Expense", "مصاريف الإهلاك", AccountType.EXPENSE, None),
    ("5410", "Maintenance Expense", "مصاريف صيانة", AccountType.EXPENSE, None),
    ("5420", "Marketing Expense", "مصاريف تسويق", AccountType.EXPENSE, None),
    ("5430", "Office Supplies", "قرطاسية ومستلزمات مكتبية", AccountType.EXPENSE, None),
    ("5440", "Transportation Expense", "وقود ومواصلات", AccountType.EXPENSE, None),
    ("5445", "Travel Expense", "سفر وضيافة", AccountType.EXPENSE, None),
    ("5450", "Administrative Expense", "مصاريف إدارية", AccountType.EXPENSE, None),
    ("5460", "Communications Expense", "اتصالات وإنترنت", AccountType.EXPENSE, None),
    ("5470", "Small Equipment", "أدوات ومعدات صغيرة", AccountType.EXPENSE, None),
    ("5480", "Professional Fees", "مصاريف قانونية ومهنية", AccountType.EXPENSE, None),
    ("5490", "Insurance Expense", "تأمينات", AccountType.EXPENSE, None),
    ("5500", "Other Expenses", "مصاريف أخرى", AccountType.EXPENSE, None),
    ("5510", "Taxes", "ضرائب ورسوم", AccountType.EXPENSE, None),
    ("5520", "Loan Interest", "فوائد قروض", AccountType.EXPENSE, None),
    ("5530", "Miscellaneous Expenses", "مصاريف متنوعة", AccountType.EXPENSE, None),
    ("5600", "Bad Debt Expense", "مصروف ديون معدومة", AccountType.EXPENSE, None),
]


def normal_side_for(code: str, account_type: AccountType) -> NormalSide:
    """Normal balance side, flipped for contra accounts."""
    side = account_type.natural_side
    if code in CONTRA_ACCOUNT_CODES:
        return NormalSide.CREDIT if side == NormalSide.DEBIT else NormalSide.DEBIT
    return side


def account_type_for_code(code: str) -> Optional[AccountType]:
    """Classify a code by its numeric range; None when outside every range."""
    try:
        number = int(code)
    except (TypeError, ValueError):
        return None
    for account_type, (low, high) in ACCOUNT_CODE_RANGES.items():
        if low <= number <= high:
            return account_type
    return None


DEFAULT_ACCOUNTS: list[Account] = [
    Account(
        code=code,
        name=name,
        name_localized=name_localized,
        type=account_type,
        normal_side=normal_side_for(code, account_type),
        parent_code=parent_code,
    )
    for code, name, name_localized, account_type, parent_code in _DEFAULT_ACCOUNT_ROWS
]

_DEFAULTS_BY_CODE = {account.code: account for account in DEFAULT_ACCOUNTS}


def get_default_account(code: str) -> Optional[Account]:
    return _DEFAULTS_BY_CODE.get(code)


def fallback_account(code: str) -> Account:
    """Synthesize an account for a code used by entries but absent from the chart."""
    account_type = account_type_for_code(code) or AccountType.ASSET
    return Account(
        code=code,
        name=f"Account {code}",
        name_localized=code,
        type=account_type,
        normal_side=normal_side_for(code, account_type),
    )


class ChartOfAccountsService:
    """Service for the tenant's chart of accounts."""

    def __init__(self, db: Database):
        """Initialize chart of accounts service.

        Args:
            db: Database instance
        """
        self.db = db

    def seed(self) -> int:
        """Insert any default account the tenant is missing.

        Idempotent: a fully seeded chart is left untouched.

        Returns:
            Number of accounts inserted
        """
        existing = {account.code for account in self.db.list_accounts()}
        missing = [account for account in DEFAULT_ACCOUNTS if account.code not in existing]
        if not missing:
            return 0

        batch = WriteBatch()
        for account in missing:
            batch.add_account(account)
        self.db.commit_batch(batch)
        logger.info(
            "chart of accounts seeded",
            extra={"tenant_id": self.db.tenant_id, "inserted": len(missing)},
        )
        return len(missing)

    def list_accounts(self) -> list[Account]:
        """List all accounts, adding any missing default account first."""
        self.seed()
        return self.db.list_accounts()

    def get_account(self, code: str) -> Account:
        """Get account by code.

        Raises:
            NotFoundError: If the code is not in the chart
        """
        account = self.db.get_account(code)
        if account is None:
            account = get_default_account(code)
        if account is None:
            raise NotFoundError(f"Account {code} not found")
        return account

    def accounts_by_code(self) -> dict[str, Account]:
        return {account.code: account for account in self.list_accounts()}

"""Trial balance and balance sheet reports."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from factorybooks.database.base import Database
from factorybooks.domain.chart_of_accounts import ChartOfAccountsService, fallback_account
from factorybooks.domain.entities import (
    AccountBalance,
    AccountType,
    BalanceSheet,
    BalanceSheetLine,
    BalanceSheetSection,
    NormalSide,
    TrialBalance,
)
from factorybooks.domain.errors import ConsistencyError
from factorybooks.logging_config import get_logger

logger = get_logger("reports")

ZERO = Decimal("0.00")

NET_INCOME_LABEL = "Net Income"


class ReportService:
    """Builds financial reports from the journal."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db
        self.chart = ChartOfAccountsService(db)

    def compute_trial_balance(self, as_of_date: Optional[date] = None) -> TrialBalance:
        """Aggregate every journal entry up to ``as_of_date`` per account.

        Reversed entries and their reversals are both included, so they net
        to zero. Accounts without activity are left out.

        Args:
            as_of_date: Inclusive cut-off date; None means all entries

        Returns:
            TrialBalance with accounts ordered by code
        """
        accounts = self.chart.accounts_by_code()
        debits: dict[str, Decimal] = defaultdict(lambda: ZERO)
        credits: dict[str, Decimal] = defaultdict(lambda: ZERO)

        for entry in self.db.list_journal_entries(end_date=as_of_date):
            debits[entry.debit_account_code] += entry.debit_amount
            credits[entry.credit_account_code] += entry.credit_amount

        balances = []
        for code in sorted(set(debits) | set(credits)):
            account = accounts.get(code)
            if account is None:
                account = fallback_account(code)
                logger.warning(
                    "journal uses account missing from chart",
                    extra={"tenant_id": self.db.tenant_id, "code": code},
                )
            debit_total = debits[code]
            credit_total = credits[code]
            if account.normal_side == NormalSide.DEBIT:
                balance = debit_total - credit_total
            else:
                balance = credit_total - debit_total
            balances.append(
                AccountBalance(
                    code=code,
                    name=account.name,
                    type=account.type,
                    normal_side=account.normal_side,
                    debit_total=debit_total,
                    credit_total=credit_total,
                    balance=balance,
                )
            )

        trial_balance = TrialBalance(
            accounts=balances,
            total_debits=sum(debits.values(), ZERO),
            total_credits=sum(credits.values(), ZERO),
            as_of_date=as_of_date,
        )
        if not trial_balance.is_balanced:
            logger.error(
                "trial balance out of balance",
                extra={"tenant_id": self.db.tenant_id, "difference": trial_balance.difference},
            )
        return trial_balance

    def account_balance(self, code: str, as_of_date: Optional[date] = None) -> Decimal:
        """Balance of one account on its normal side; zero without activity."""
        for balance in self.compute_trial_balance(as_of_date).accounts:
            if balance.code == code:
                return balance.balance
        return ZERO

    def verify_trial_balance(self, as_of_date: Optional[date] = None) -> TrialBalance:
        """Return the trial balance, raising when debits and credits differ.

        Raises:
            ConsistencyError: With the exact difference
        """
        trial_balance = self.compute_trial_balance(as_of_date)
        if not trial_balance.is_balanced:
            raise ConsistencyError(
                f"Trial balance is off by {trial_balance.difference}",
                difference=trial_balance.difference,
            )
        return trial_balance

    def build_balance_sheet(self, as_of_date: Optional[date] = None) -> BalanceSheet:
        """Classify the trial balance into assets, liabilities and equity.

        Revenue and expense accounts are closed into a synthetic "Net Income"
        equity line. Contra accounts appear with a negative amount in their
        section.
        """
        trial_balance = self.compute_trial_balance(as_of_date)
        sections: dict[AccountType, list[BalanceSheetLine]] = {
            AccountType.ASSET: [],
            AccountType.LIABILITY: [],
            AccountType.EQUITY: [],
        }
        net_income = ZERO

        for balance in trial_balance.accounts:
            # Signed on the type's natural side so contra balances subtract
            if balance.type.natural_side == NormalSide.DEBIT:
                amount = balance.debit_total - balance.credit_total
            else:
                amount = balance.credit_total - balance.debit_total

            if balance.type == AccountType.REVENUE:
                net_income += amount
            elif balance.type == AccountType.EXPENSE:
                net_income -= amount
            else:
                sections[balance.type].append(
                    BalanceSheetLine(
                        code=balance.code,
                        name=balance.name,
                        amount=amount,
                        is_contra=balance.normal_side != balance.type.natural_side,
                    )
                )

        sections[AccountType.EQUITY].append(
            BalanceSheetLine(code="", name=NET_INCOME_LABEL, amount=net_income)
        )

        sheet = BalanceSheet(
            assets=BalanceSheetSection("Assets", sections[AccountType.ASSET]),
            liabilities=BalanceSheetSection("Liabilities", sections[AccountType.LIABILITY]),
            equity=BalanceSheetSection("Equity", sections[AccountType.EQUITY]),
            net_income=net_income,
            as_of_date=as_of_date,
        )
        if not sheet.is_balanced:
            logger.error(
                "balance sheet out of balance",
                extra={"tenant_id": self.db.tenant_id, "difference": sheet.difference},
            )
        return sheet

"""Tests for journal templates and account resolution."""

import pytest

from factorybooks.domain import templates
from factorybooks.domain.chart_of_accounts import DEFAULT_ACCOUNTS, AccountCodes
from factorybooks.domain.errors import ValidationError


def test_every_fixed_account_is_in_the_chart():
    """Test that templates only name accounts the chart defines."""
    codes = {acc.code for acc in DEFAULT_ACCOUNTS}
    for template in templates.JOURNAL_TEMPLATES.values():
        for code in (template.debit_account, template.credit_account):
            assert code is None or code in codes


def test_mapped_categories_point_into_the_chart():
    codes = {acc.code for acc in DEFAULT_ACCOUNTS}
    assert set(templates.CATEGORY_TO_REVENUE_ACCOUNT.values()) <= codes
    assert set(templates.CATEGORY_TO_EXPENSE_ACCOUNT.values()) <= codes


def test_unknown_template():
    with pytest.raises(ValidationError, match="Unknown journal template"):
        templates.get_template("NOPE")


@pytest.mark.parametrize(
    "template_id,debit,credit",
    [
        (templates.OWNER_CAPITAL, AccountCodes.CASH, AccountCodes.OWNER_CAPITAL),
        (templates.PAYMENT_RECEIPT, AccountCodes.CASH, AccountCodes.ACCOUNTS_RECEIVABLE),
        (templates.PAYMENT_DISBURSEMENT, AccountCodes.ACCOUNTS_PAYABLE, AccountCodes.CASH),
        (
            templates.DEPRECIATION,
            AccountCodes.DEPRECIATION_EXPENSE,
            AccountCodes.ACCUMULATED_DEPRECIATION,
        ),
        (templates.ENDORSEMENT, AccountCodes.ACCOUNTS_PAYABLE, AccountCodes.ACCOUNTS_RECEIVABLE),
    ],
)
def test_fixed_templates(template_id, debit, credit):
    template = templates.get_template(template_id)
    assert templates.resolve_accounts(template) == (debit, credit)


class TestLedgerTemplates:
    """Tests for the context-resolved ledger templates."""

    def test_income_by_category(self):
        template = templates.get_template(templates.LEDGER_INCOME)
        assert templates.resolve_accounts(template, {"category": "Services"}) == (
            AccountCodes.CASH,
            AccountCodes.SERVICE_REVENUE,
        )

    def test_sub_category_wins(self):
        template = templates.get_template(templates.LEDGER_INCOME)
        context = {"category": "sales", "sub_category": "Product Sales"}
        assert templates.resolve_accounts(template, context) == (AccountCodes.CASH, "4010")

    def test_unmapped_income_goes_to_sales(self):
        template = templates.get_template(templates.LEDGER_INCOME)
        assert templates.resolve_accounts(template, {"category": "mystery"})[1] == (
            AccountCodes.SALES_REVENUE
        )

    def test_income_on_account(self):
        """Test that unsettled AR entries debit Accounts Receivable."""
        template = templates.get_template(templates.LEDGER_INCOME)
        context = {"category": "sales", "is_arap_entry": True}
        assert templates.resolve_accounts(template, context)[0] == AccountCodes.ACCOUNTS_RECEIVABLE

    def test_income_on_account_settled_immediately(self):
        template = templates.get_template(templates.LEDGER_INCOME)
        context = {"category": "sales", "is_arap_entry": True, "immediate_settlement": True}
        assert templates.resolve_accounts(template, context)[0] == AccountCodes.CASH

    def test_expense_by_category(self):
        template = templates.get_template(templates.LEDGER_EXPENSE)
        assert templates.resolve_accounts(template, {"category": "rent"}) == (
            AccountCodes.RENT_EXPENSE,
            AccountCodes.CASH,
        )

    def test_expense_on_account(self):
        template = templates.get_template(templates.LEDGER_EXPENSE)
        context = {"category": "raw materials", "is_arap_entry": True}
        assert templates.resolve_accounts(template, context) == ("5010", AccountCodes.ACCOUNTS_PAYABLE)

    def test_unmapped_expense_goes_to_other(self):
        template = templates.get_template(templates.LEDGER_EXPENSE)
        assert templates.resolve_accounts(template, {})[0] == AccountCodes.OTHER_EXPENSES


def test_fixed_asset_purchase_on_credit():
    template = templates.get_template(templates.FIXED_ASSET_PURCHASE)
    assert templates.resolve_accounts(template) == (AccountCodes.FIXED_ASSETS, AccountCodes.CASH)
    assert templates.resolve_accounts(template, {"on_credit": True}) == (
        AccountCodes.FIXED_ASSETS,
        AccountCodes.ACCOUNTS_PAYABLE,
    )


@pytest.mark.parametrize(
    "category,expected",
    [
        ("Owner Capital", templates.OWNER_CAPITAL),
        ("loan received", templates.LOAN_RECEIVED),
        ("sales", None),
        (None, None),
    ],
)
def test_template_for_category(category, expected):
    assert templates.template_for_category(category) == expected

from decimal import Decimal

from pydantic import BaseModel


class AccountTotals(BaseModel):
    net_balance: Decimal = Decimal("0.00")
    liquid_balance: Decimal = Decimal("0.00")
    credit_used: Decimal = Decimal("0.00")
    active_accounts: int = 0


class DashboardSummary(AccountTotals):
    month_income: Decimal = Decimal("0.00")
    month_expense: Decimal = Decimal("0.00")
    month_bills: Decimal = Decimal("0.00")

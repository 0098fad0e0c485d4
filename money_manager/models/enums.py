from enum import Enum


class AccountKind(str, Enum):
    cash = "cash"
    bank = "bank"
    wallet = "wallet"
    credit = "credit"
    loan = "loan"


class TransactionKind(str, Enum):
    income = "income"
    expense = "expense"
    bill = "bill"
    transfer = "transfer"
    investment = "investment"


class CategoryKind(str, Enum):
    expense = "expense"
    income = "income"
    bill = "bill"


DEBIT_KINDS = frozenset({TransactionKind.expense, TransactionKind.bill, TransactionKind.investment})
LIQUID_ACCOUNT_KINDS = frozenset({AccountKind.cash, AccountKind.bank, AccountKind.wallet})

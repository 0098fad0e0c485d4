from decimal import Decimal
from uuid import UUID
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from money_manager.models.enums import DEBIT_KINDS, TransactionKind
from money_manager.utils.time_helpers import utcnow


class Transaction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id")
    kind: TransactionKind
    # Magnitud para income/expense/bill/investment; con signo solo en transfer
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    note: Optional[str] = None
    # Transfer.id o Investment.id según el tipo
    reference_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)


def balance_delta(kind: TransactionKind, amount: Decimal) -> Decimal:
    """Signed effect a row of ``kind`` with stored ``amount`` has on its account."""
    if kind == TransactionKind.transfer:
        return amount
    if kind in DEBIT_KINDS:
        return -abs(amount)
    return abs(amount)

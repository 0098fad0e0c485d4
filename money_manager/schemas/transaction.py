from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from money_manager.models.enums import TransactionKind
from money_manager.schemas.common import Amount


class LedgerEntryCreate(BaseModel):
    account_id: int
    category_id: Optional[int] = None
    amount: Amount
    note: Optional[str] = None
    date: Optional[datetime] = None


class TransactionUpdate(BaseModel):
    note: Optional[str] = None
    amount: Optional[Amount] = None
    created_at: Optional[datetime] = None
    category_id: Optional[int] = None
    account_id: Optional[int] = None


class TransactionRead(BaseModel):
    id: int
    account_id: int
    category_id: Optional[int] = None
    kind: TransactionKind
    amount: Decimal
    note: Optional[str] = None
    reference_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionResult(BaseModel):
    success: bool = True
    transaction: TransactionRead


class MonthlySummary(BaseModel):
    month: str
    income: Decimal
    expense: Decimal
    bill: Decimal
    investment: Decimal
    net: Decimal
    transactions: int

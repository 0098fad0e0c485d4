from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from money_manager.schemas.common import Amount


class TransferCreate(BaseModel):
    from_account_id: int
    to_account_id: Optional[int] = None
    amount: Amount
    note: Optional[str] = None
    date: Optional[datetime] = None


class TransferRead(BaseModel):
    id: int
    from_account_id: int
    to_account_id: Optional[int] = None
    amount: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransferResult(BaseModel):
    success: bool = True
    transfer_id: int
    transfer: TransferRead

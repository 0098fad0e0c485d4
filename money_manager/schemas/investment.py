from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from money_manager.schemas.common import Amount


class InvestmentCreate(BaseModel):
    amount: Amount
    type_id: str
    account_id: int
    name: str = Field(min_length=1, max_length=100)
    note: Optional[str] = None
    date: Optional[datetime] = None


class InvestmentRead(BaseModel):
    id: int
    account_id: int
    investment_type: str
    amount: Decimal
    note: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvestmentType(BaseModel):
    id: str
    name: str
    icon: str


class InvestmentResult(BaseModel):
    success: bool = True
    investment: InvestmentRead

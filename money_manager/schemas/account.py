from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from money_manager.models.enums import AccountKind
from money_manager.schemas.common import Money


class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    # el cliente web envía "type"
    kind: AccountKind = Field(validation_alias=AliasChoices("kind", "type"))
    balance: Money = Field(default=Decimal("0.00"), ge=0)
    credit_limit: Optional[Money] = Field(default=None, ge=0)


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    credit_limit: Optional[Money] = Field(default=None, ge=0)


class AccountRead(BaseModel):
    id: int
    name: str
    kind: AccountKind
    balance: Decimal
    credit_limit: Optional[Decimal] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

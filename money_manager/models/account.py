from decimal import Decimal
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from money_manager.models.enums import AccountKind
from money_manager.utils.time_helpers import utcnow


class Account(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    name: str
    kind: AccountKind
    # Solo el ledger modifica el saldo después de crear la cuenta
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    credit_limit: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

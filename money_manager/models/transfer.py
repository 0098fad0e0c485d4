from decimal import Decimal
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from money_manager.utils.time_helpers import utcnow


class Transfer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    from_account_id: int = Field(foreign_key="account.id")
    # Sin destino = salida de dinero hacia una cuenta no registrada
    to_account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

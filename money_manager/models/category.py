from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from money_manager.models.enums import CategoryKind
from money_manager.utils.time_helpers import utcnow


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    name: str
    icon: str = Field(default="tag")
    kind: CategoryKind = Field(default=CategoryKind.expense)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

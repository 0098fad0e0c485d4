from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from money_manager.utils.time_helpers import utcnow


class ShareLink(SQLModel, table=True):
    __tablename__ = "share_link"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    share_code: str = Field(index=True, unique=True)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

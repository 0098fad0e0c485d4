from sqlalchemy import Column, DateTime, JSON
from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from money_manager.utils.time_helpers import utcnow


class Notification(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    type: str = Field(default="info")  # success, info, warning, transfer
    title: str
    message: str = ""
    icon: Optional[str] = None
    meta: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

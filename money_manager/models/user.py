from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from uuid import uuid4, UUID
from datetime import datetime

from money_manager.utils.time_helpers import utcnow


class User(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

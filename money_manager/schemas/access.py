from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AccessRequestCreate(BaseModel):
    owner_id: UUID
    account_id: Optional[int] = None
    device_info: str = Field(default="", max_length=500)


class AccessRequestCreated(BaseModel):
    success: bool = True
    request_id: str
    expires_at: datetime


class AccessApprove(BaseModel):
    request_id: str
    approve: bool


class AccessApproveResult(BaseModel):
    success: bool = True
    approved: bool
    code: Optional[str] = None
    expires_at: Optional[datetime] = None


class AccessStatus(BaseModel):
    status: str
    expires_at: datetime


class AccessVerify(BaseModel):
    request_id: str
    code: str = Field(min_length=1, max_length=32)


class AccessVerifyResult(BaseModel):
    success: bool = True
    redirect: str
    access_token: str
    token_type: str = "bearer"

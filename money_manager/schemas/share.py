from datetime import datetime

from pydantic import BaseModel


class ShareLinkCreated(BaseModel):
    share_code: str
    share_url: str
    expires_at: datetime


class SharedAccess(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime

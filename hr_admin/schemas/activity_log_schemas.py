from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ActivityLogOut(BaseModel):
    log_id: int
    user_id: Optional[str] = None
    action: str
    module: str
    details: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityLogListOut(BaseModel):
    total: int
    page: int
    page_size: int
    logs: list[ActivityLogOut]

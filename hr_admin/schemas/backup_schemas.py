from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class BackupCreate(BaseModel):
    type: Literal["full", "incremental"] = "full"
    note: Optional[str] = None


class BackupOut(BaseModel):
    backup_id: int
    filename: str
    type: str
    size: str
    status: str
    created_by: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ScheduleUpdate(BaseModel):
    frequency: Literal["8hours", "daily", "weekly"]
    enabled: bool


class ScheduleOut(BaseModel):
    frequency: str
    enabled: bool
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None

    class Config:
        from_attributes = True


class SchedulerRunOut(BaseModel):
    ran: bool
    message: str
    backup: Optional[BackupOut] = None
    next_run: Optional[datetime] = None

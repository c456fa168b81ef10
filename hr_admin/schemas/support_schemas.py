from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

TicketStatus = Literal["Unread", "Read", "In Progress", "Resolved"]


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=60)
    message: str = Field(..., min_length=1)


class TicketStatusUpdate(BaseModel):
    status: TicketStatus
    resolution_comment: Optional[str] = None


class TicketOut(BaseModel):
    ticket_id: int
    employee_id: str
    subject: str
    category: str
    message: str
    status: str
    resolution_comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

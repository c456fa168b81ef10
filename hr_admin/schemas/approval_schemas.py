from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ApprovalActionIn(BaseModel):
    id: int
    comment: Optional[str] = Field(None, max_length=1000)


class ApprovalResult(BaseModel):
    success: bool
    message: str
    request_type: str
    request_id: int
    status: str
    current_approval_level: int
    approval_stage: str


class PendingRequestOut(BaseModel):
    request_type: str
    request_id: int
    employee_id: str
    employee_name: Optional[str] = None
    summary: str
    current_approval_level: int
    approval_stage: str
    submitted_at: Optional[datetime] = None


class PendingRequestListOut(BaseModel):
    approval_level: int
    requests: list[PendingRequestOut]
    errors: dict[str, str] = {}


class ApprovalActionOut(BaseModel):
    action_id: int
    request_type: str
    request_id: int
    approver_employee_id: str
    approval_level: int
    status: str
    comment: Optional[str] = None
    approved_at: Optional[datetime] = None

    class Config:
        from_attributes = True

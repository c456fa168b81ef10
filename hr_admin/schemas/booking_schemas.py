from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from hr_admin.utils.approval_stage import stage_label

CANCELLED = "Cancelled"


def booking_stage(level: int, status: str) -> str:
    if status == CANCELLED:
        return CANCELLED
    return stage_label(level, status)


class BookingCreate(BaseModel):
    property_name: str = Field(..., min_length=1, max_length=120)
    property_location: str = Field(..., min_length=1, max_length=200)
    nature_of_stay: str = Field(..., min_length=1, max_length=60)
    reason_for_use: str = Field(..., min_length=1)
    checkin_at: datetime
    checkout_at: datetime
    # checked in the router so the message matches the other booking rules
    number_of_guests: int = 1

    @field_validator("checkin_at", "checkout_at")
    def naive_local(cls, v: datetime):
        # stored as naive local time
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v


class BookingOut(BaseModel):
    booking_id: int
    employee_id: str
    property_name: str
    property_location: str
    nature_of_stay: str
    reason_for_use: str
    checkin_at: datetime
    checkout_at: datetime
    number_of_guests: int

    status: str
    current_approval_level: int
    submitted_at: Optional[datetime] = None

    @computed_field
    @property
    def approval_stage(self) -> str:
        return booking_stage(self.current_approval_level, self.status)

    class Config:
        from_attributes = True


class BookedSlotOut(BaseModel):
    booking_id: int
    checkin_at: datetime
    checkout_at: datetime
    # checkout plus the cleaning buffer
    available_from: datetime

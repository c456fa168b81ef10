# hr_admin/schemas/employee_schemas.py

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PositionOut(BaseModel):
    name: str
    salary: float
    prefix: str
    role_class: str


class NextEmployeeIdOut(BaseModel):
    position: str
    employee_id: str


class EmployeeCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=150)
    phone: Optional[str] = None

    position: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)

    # defaults to the position's base salary
    salary: Optional[float] = Field(None, ge=0)
    hire_date: Optional[date] = None

    @field_validator("email")
    def email_shape(cls, v):
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v

    class Config:
        extra = "forbid"


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=150)
    phone: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    hire_date: Optional[date] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"


class EmployeeOut(BaseModel):
    employee_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None

    position: str
    department: str
    salary: float
    role_class: str

    benefits_package: Optional[str] = None
    benefits_amount: float
    benefits_amount_remaining: float

    hire_date: Optional[date] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeListOut(BaseModel):
    total: int
    employees: list[EmployeeOut]


# ---------- APPROVERS ----------

class ApproverCreate(BaseModel):
    employee_id: str
    approval_level: str = Field(..., min_length=1, examples=["HR Manager"])
    numeric_level: int = Field(..., ge=1, le=4)
    can_approve: bool = True


class ApproverOut(BaseModel):
    approver_id: int
    employee_id: str
    approval_level: str
    numeric_level: int
    can_approve: bool

    class Config:
        from_attributes = True

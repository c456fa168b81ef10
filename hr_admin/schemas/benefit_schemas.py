from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from hr_admin.utils.approval_stage import stage_label


class ReimbursementCreate(BaseModel):
    patient_type: Literal["inpatient", "outpatient"]
    admission_date: date
    discharge_date: Optional[date] = None
    total_amount: float = Field(gt=0)
    claim_method: Literal["cash", "salary"]
    remarks: Optional[str] = None

    @field_validator("patient_type", "claim_method", mode="before")
    def lower(cls, v):
        return str(v).strip().lower() if v is not None else v


class ReimbursementUpdate(BaseModel):
    patient_type: Optional[Literal["inpatient", "outpatient"]] = None
    admission_date: Optional[date] = None
    discharge_date: Optional[date] = None
    total_amount: Optional[float] = Field(None, gt=0)
    claim_method: Optional[Literal["cash", "salary"]] = None
    remarks: Optional[str] = None


class ReimbursementOut(BaseModel):
    reimbursement_id: int
    employee_id: str
    patient_type: str
    admission_date: date
    discharge_date: Optional[date] = None
    total_amount: float
    claim_method: str
    remarks: Optional[str] = None

    status: str
    current_approval_level: int
    submitted_at: Optional[datetime] = None

    @computed_field
    @property
    def approval_stage(self) -> str:
        return stage_label(self.current_approval_level, self.status)

    class Config:
        from_attributes = True


class LOACreate(BaseModel):
    hospital_name: str = Field(..., min_length=1, max_length=150)
    visit_date: date
    reason_type: str = Field(..., min_length=1, max_length=60)
    preferred_doctor: Optional[str] = None
    remarks: Optional[str] = None


class LOAUpdate(BaseModel):
    hospital_name: Optional[str] = Field(None, min_length=1, max_length=150)
    visit_date: Optional[date] = None
    reason_type: Optional[str] = Field(None, min_length=1, max_length=60)
    preferred_doctor: Optional[str] = None
    remarks: Optional[str] = None


class LOAOut(BaseModel):
    loa_id: int
    employee_id: str
    hospital_name: str
    visit_date: date
    reason_type: str
    preferred_doctor: Optional[str] = None
    remarks: Optional[str] = None

    status: str
    current_approval_level: int
    submitted_at: Optional[datetime] = None

    @computed_field
    @property
    def approval_stage(self) -> str:
        return stage_label(self.current_approval_level, self.status)

    class Config:
        from_attributes = True


class BenefitsBalanceOut(BaseModel):
    employee_id: str
    benefits_package: Optional[str] = None
    benefits_amount: float
    benefits_amount_remaining: float

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from hr_admin.utils.approval_stage import ApprovalStatus, stage_label
from hr_admin.utils.loan_rules import CENT
from hr_admin.utils.money import money


def loan_stage(level: int, status: str) -> str:
    # a completed loan went through full approval first
    if status == "Completed":
        return stage_label(level, ApprovalStatus.APPROVED)
    return stage_label(level, status)


class LoanCreate(BaseModel):
    loan_type: Literal["salary", "housing", "car"]
    amount: float = Field(gt=0)
    repayment_term: int = Field(gt=0, le=120)
    purpose: Optional[str] = None

    car_make: Optional[str] = None
    car_model: Optional[str] = None
    car_year: Optional[str] = None

    property_type: Optional[str] = None
    property_address: Optional[str] = None

    @field_validator("purpose", "car_make", "car_model", "car_year", "property_type", "property_address",
                     mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @model_validator(mode="after")
    def amount_covers_term(self):
        # every monthly deduction must be at least one cent
        if money(self.amount) < CENT * self.repayment_term:
            raise ValueError(
                f"amount must be at least {CENT * self.repayment_term} for a {self.repayment_term}-month term"
            )
        return self


class LoanOut(BaseModel):
    loan_id: int
    employee_id: str
    loan_type: str
    amount: float
    repayment_term: int
    purpose: Optional[str] = None

    car_make: Optional[str] = None
    car_model: Optional[str] = None
    car_year: Optional[str] = None
    property_type: Optional[str] = None
    property_address: Optional[str] = None

    status: str
    current_approval_level: int
    submitted_at: Optional[datetime] = None

    @computed_field
    @property
    def approval_stage(self) -> str:
        return loan_stage(self.current_approval_level, self.status)

    class Config:
        from_attributes = True


class LoanListOut(BaseModel):
    loans: list[LoanOut]
    # loan type -> failure reason, for sources that could not be read
    errors: dict[str, str] = {}


class EligibilityOut(BaseModel):
    eligible: bool
    reason: Optional[str] = None
    role_class: str


class DeductionOut(BaseModel):
    deduction_id: int
    loan_id: int
    deduction_date: date
    amount: float
    status: str
    payment_amount: float
    actual_deduction_date: Optional[date] = None
    payment_notes: Optional[str] = None
    is_early_payment: bool

    class Config:
        from_attributes = True


class LoanDeductionsOut(LoanOut):
    employee_name: Optional[str] = None
    deductions: list[DeductionOut]

    paid_amount: float
    remaining_amount: float
    paid_months: int
    remaining_months: int


class LoanDeductionsListOut(BaseModel):
    loans: list[LoanDeductionsOut]
    errors: dict[str, str] = {}


# -------------------------------------------------
# Payments
# -------------------------------------------------
class PaymentHistoryCreate(BaseModel):
    loan_id: int = Field(alias="loanId")
    loan_type: str = Field(alias="loanType")
    payment_amount: Decimal = Field(alias="paymentAmount")
    notes: Optional[str] = None
    skip_deduction_processing: bool = Field(False, alias="skipDeductionProcessing")

    @field_validator("notes", mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    class Config:
        populate_by_name = True


class DeductionPaymentCreate(BaseModel):
    loan_id: int = Field(alias="loanId")
    loan_type: str = Field(alias="loanType")
    deduction_id: int = Field(alias="deductionId")
    payment_amount: Decimal = Field(alias="paymentAmount")
    notes: Optional[str] = None

    class Config:
        populate_by_name = True


class PaymentHistoryOut(BaseModel):
    payment_id: int
    loan_id: int
    loan_type: str
    payment_amount: float
    payment_date: datetime
    transaction_id: str
    notes: Optional[str] = None
    payment_method: str

    class Config:
        from_attributes = True


class RowResultOut(BaseModel):
    deduction_id: int
    outcome: Literal["applied", "failed", "not_attempted"]
    amount: float = 0
    reason: Optional[str] = None


class PaymentResult(BaseModel):
    success: bool
    message: str
    payment: PaymentHistoryOut
    applied_total: float
    leftover_amount: float
    rows: list[RowResultOut] = []
    loan_completed: bool = False


class DeductionPaymentResult(BaseModel):
    success: bool
    message: str
    deduction: DeductionOut
    loan_completed: bool = False


class ProcessDueResult(BaseModel):
    as_on: date
    processed: int
    completed_loans: list[int]

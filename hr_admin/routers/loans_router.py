import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hr_admin.core.security import get_current_employee, is_hr_admin, require_hr_admin
from hr_admin.models.employee_model import Employee
from hr_admin.models.loan_model import Loan, LoanDeduction
from hr_admin.schemas.loan_schema import (
    DeductionOut,
    EligibilityOut,
    LoanCreate,
    LoanDeductionsListOut,
    LoanDeductionsOut,
    LoanListOut,
    LoanOut,
    ProcessDueResult,
)
from hr_admin.services.loan_service import (
    REPAYING_STATUSES,
    active_loan_types,
    apply_row,
    complete_if_paid,
    get_loan_or_404,
    repayment_stats,
    resolve_loan_type,
)
from hr_admin.utils.activity import log_activity
from hr_admin.utils.database import get_db
from hr_admin.utils.fan_in import errors_of, gather_sources, merge_ok
from hr_admin.utils.loan_rules import CAR_LOAN, HOUSING_LOAN, LOAN_TYPES, check_eligibility
from hr_admin.utils.money import money
from hr_admin.utils.payment_allocation import InstallmentStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/loans", tags=["Loans"])


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _loans_of_type(db: Session, loan_type: str, statuses=None, employee_id: Optional[str] = None):
    q = db.query(Loan).filter(Loan.loan_type == loan_type)
    if statuses:
        q = q.filter(Loan.status.in_(statuses))
    if employee_id:
        q = q.filter(Loan.employee_id == employee_id)
    return q.order_by(Loan.submitted_at.desc(), Loan.loan_id.desc()).all()


def _fan_in(db: Session, types, statuses=None, employee_id: Optional[str] = None):
    """One query per loan type; a failing type is reported, not fatal."""
    sources = {
        t: (lambda t=t: _loans_of_type(db, t, statuses, employee_id))
        for t in types
    }
    results = gather_sources(sources, on_error=db.rollback)
    return merge_ok(results), errors_of(results)


def _with_deductions(loan: Loan) -> LoanDeductionsOut:
    base = LoanOut.model_validate(loan).model_dump(exclude={"approval_stage"})
    return LoanDeductionsOut(
        **base,
        employee_name=loan.employee.full_name if loan.employee else None,
        deductions=[DeductionOut.model_validate(d) for d in loan.deductions],
        **repayment_stats(loan),
    )


def _types_filter(loan_type: Optional[str]):
    return [resolve_loan_type(loan_type)] if loan_type else list(LOAN_TYPES)


# =====================================================
# ELIGIBILITY
# =====================================================
@router.get("/eligibility", response_model=EligibilityOut)
def loan_eligibility(
        loan_type: str = Query(..., description="salary / housing / car"),
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    lt = resolve_loan_type(loan_type)
    ok, reason = check_eligibility(me.role_class, lt, active_loan_types(db, me.employee_id))
    return EligibilityOut(eligible=ok, reason=reason, role_class=me.role_class)


# =====================================================
# SUBMIT
# =====================================================
@router.post("", response_model=LoanOut)
def submit_loan(
        payload: LoanCreate,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    lt = resolve_loan_type(payload.loan_type)

    ok, reason = check_eligibility(me.role_class, lt, active_loan_types(db, me.employee_id))
    if not ok:
        raise HTTPException(409, reason)

    if lt == CAR_LOAN and not (payload.car_make and payload.car_model and payload.car_year):
        raise HTTPException(400, "Car make, model and year are required for a Car Loan")
    if lt == HOUSING_LOAN and not (payload.property_type and payload.property_address):
        raise HTTPException(400, "Property type and address are required for a Housing Loan")

    loan = Loan(
        employee_id=me.employee_id,
        loan_type=lt,
        amount=money(payload.amount),
        repayment_term=payload.repayment_term,
        purpose=payload.purpose,
        car_make=payload.car_make if lt == CAR_LOAN else None,
        car_model=payload.car_model if lt == CAR_LOAN else None,
        car_year=payload.car_year if lt == CAR_LOAN else None,
        property_type=payload.property_type if lt == HOUSING_LOAN else None,
        property_address=payload.property_address if lt == HOUSING_LOAN else None,
        status="Pending",
        current_approval_level=1,
    )
    db.add(loan)
    db.flush()

    log_activity(
        db, me.employee_id, "CREATE", "LOANS",
        f"Submitted {lt} #{loan.loan_id} for {money(payload.amount)}",
    )
    db.commit()
    db.refresh(loan)
    return loan


# =====================================================
# LIST
# =====================================================
@router.get("", response_model=LoanListOut)
def list_loans(
        loan_type: Optional[str] = Query(None, description="salary / housing / car"),
        status: Optional[str] = Query(None, description="Pending / Approved / Rejected / Completed"),
        employee_id: Optional[str] = None,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    loans, errors = _fan_in(
        db,
        _types_filter(loan_type),
        statuses=[status] if status else None,
        employee_id=employee_id,
    )
    return LoanListOut(loans=[LoanOut.model_validate(x) for x in loans], errors=errors)


@router.get("/mine", response_model=list[LoanOut])
def my_loans(
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    return (
        db.query(Loan)
        .filter(Loan.employee_id == me.employee_id)
        .order_by(Loan.submitted_at.desc(), Loan.loan_id.desc())
        .all()
    )


# =====================================================
# DEDUCTIONS
# =====================================================
@router.get("/deductions", response_model=LoanDeductionsListOut)
def list_loan_deductions(
        loan_type: Optional[str] = Query(None, description="salary / housing / car"),
        employee_id: Optional[str] = None,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    loans, errors = _fan_in(db, _types_filter(loan_type), REPAYING_STATUSES, employee_id)
    return LoanDeductionsListOut(loans=[_with_deductions(x) for x in loans], errors=errors)


@router.get("/my-deductions", response_model=LoanDeductionsListOut)
def my_loan_deductions(
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    loans, errors = _fan_in(db, LOAN_TYPES, REPAYING_STATUSES, me.employee_id)
    return LoanDeductionsListOut(loans=[_with_deductions(x) for x in loans], errors=errors)


@router.post("/deductions/process-due", response_model=ProcessDueResult)
def process_due_deductions(
        as_on: Optional[date] = Query(None, description="Payroll date (defaults to today)"),
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    """
    Payroll run: every unpaid/partial row due on or before ``as_on`` of an
    approved loan is settled by salary deduction.
    """
    as_on = as_on or date.today()

    rows = (
        db.query(LoanDeduction)
        .join(Loan, Loan.loan_id == LoanDeduction.loan_id)
        .filter(
            Loan.status == "Approved",
            LoanDeduction.status != InstallmentStatus.PAID.value,
            LoanDeduction.deduction_date <= as_on,
        )
        .order_by(LoanDeduction.deduction_date.asc(), LoanDeduction.deduction_id.asc())
        .all()
    )

    touched = {}
    processed = 0
    for d in rows:
        gap = money(money(d.amount) - money(d.payment_amount))
        if gap <= 0:
            continue
        apply_row(d, gap, "Payroll deduction", d.deduction_date)
        touched[d.loan_id] = d.loan
        processed += 1

    db.flush()
    completed = [loan_id for loan_id, loan in touched.items() if complete_if_paid(loan)]

    log_activity(
        db, admin.employee_id, "UPDATE", "LOAN_DEDUCTIONS",
        f"Processed {processed} payroll deduction(s) as of {as_on}",
    )
    db.commit()

    logger.info("Payroll run %s: %d rows, completed loans %s", as_on, processed, completed)
    return ProcessDueResult(as_on=as_on, processed=processed, completed_loans=completed)


# =====================================================
# SINGLE LOAN
# =====================================================
@router.get("/{loan_id}", response_model=LoanDeductionsOut)
def get_loan(
        loan_id: int,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    loan = get_loan_or_404(db, loan_id)
    if loan.employee_id != me.employee_id and not is_hr_admin(db, me):
        raise HTTPException(404, "Loan not found")
    return _with_deductions(loan)


@router.delete("/{loan_id}")
def delete_loan(
        loan_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    loan = get_loan_or_404(db, loan_id)
    if loan.status not in ("Pending", "Rejected"):
        raise HTTPException(400, f"Cannot delete a loan that is {loan.status}")

    log_activity(db, admin.employee_id, "DELETE", "LOANS", f"Deleted {loan.loan_type} #{loan_id}")
    db.delete(loan)
    db.commit()
    return {"message": "Loan deleted successfully"}

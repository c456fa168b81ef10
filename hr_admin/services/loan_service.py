from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from hr_admin.models.loan_model import Loan, LoanDeduction
from hr_admin.utils.loan_rules import (
    LOAN_TYPE_SLUGS,
    LOAN_TYPES,
    build_monthly_schedule,
    first_deduction_date,
)
from hr_admin.utils.money import COMPLETION_TOLERANCE, money
from hr_admin.utils.payment_allocation import Installment, InstallmentStatus

ACTIVE_STATUSES = ("Pending", "Approved")
REPAYING_STATUSES = ("Approved", "Completed")


def resolve_loan_type(value: Optional[str]) -> str:
    """Accepts 'Salary Loan', 'salary' or 'salary-loan'."""
    v = (value or "").strip()
    if v in LOAN_TYPES:
        return v
    slug = v.lower().removesuffix("-loan").removesuffix(" loan")
    if slug in LOAN_TYPE_SLUGS:
        return LOAN_TYPE_SLUGS[slug]
    raise HTTPException(400, "Invalid loan type")


def get_loan_or_404(db: Session, loan_id: int, loan_type: Optional[str] = None) -> Loan:
    q = db.query(Loan).filter(Loan.loan_id == loan_id)
    if loan_type:
        q = q.filter(Loan.loan_type == loan_type)
    loan = q.first()
    if not loan:
        raise HTTPException(404, "Loan not found")
    return loan


def to_installment(d: LoanDeduction) -> Installment:
    return Installment(
        id=d.deduction_id,
        due_date=d.deduction_date,
        scheduled_amount=money(d.amount),
        status=InstallmentStatus(d.status),
        paid_amount=money(d.payment_amount),
        payment_date=d.actual_deduction_date,
        notes=d.payment_notes,
    )


def outstanding_installments(loan: Loan) -> List[Installment]:
    """Unpaid and partially paid rows, earliest due date first."""
    rows = [d for d in loan.deductions if d.status != InstallmentStatus.PAID.value]
    rows.sort(key=lambda d: (d.deduction_date, d.deduction_id))
    return [to_installment(d) for d in rows]


def apply_row(d: LoanDeduction, applied: Decimal, notes: Optional[str], pay_day: date) -> None:
    """Adds ``applied`` to a deduction row; status only moves toward Paid."""
    d.payment_amount = money(money(d.payment_amount) + money(applied))
    if d.payment_amount >= money(d.amount):
        d.status = InstallmentStatus.PAID.value
    else:
        d.status = InstallmentStatus.PARTIALLY_PAID.value

    d.actual_deduction_date = pay_day
    d.payment_notes = notes
    if d.deduction_date > pay_day:
        d.is_early_payment = True


def loan_paid_total(loan: Loan) -> Decimal:
    return money(sum((money(d.payment_amount) for d in loan.deductions), Decimal("0")))


def complete_if_paid(loan: Loan) -> bool:
    if loan.status != "Approved":
        return False
    if loan_paid_total(loan) >= money(loan.amount) - COMPLETION_TOLERANCE:
        loan.status = "Completed"
        return True
    return False


def create_schedule(db: Session, loan: Loan, approved_on: date) -> int:
    """Adds the monthly deduction rows of a freshly approved loan."""
    rows = build_monthly_schedule(loan.amount, loan.repayment_term, first_deduction_date(approved_on))
    for due, amount in rows:
        db.add(
            LoanDeduction(
                loan_id=loan.loan_id,
                deduction_date=due,
                amount=amount,
                status=InstallmentStatus.UNPAID.value,
                payment_amount=money(0),
            )
        )
    return len(rows)


def repayment_stats(loan: Loan) -> dict:
    paid = loan_paid_total(loan)
    if loan.status == "Completed":
        remaining = money(0)
    else:
        remaining = max(money(0), money(money(loan.amount) - paid))

    return {
        "paid_amount": float(paid),
        "remaining_amount": float(remaining),
        "paid_months": sum(1 for d in loan.deductions if d.status == InstallmentStatus.PAID.value),
        "remaining_months": sum(1 for d in loan.deductions if d.status != InstallmentStatus.PAID.value),
    }


def active_loan_types(db: Session, employee_id: str) -> List[str]:
    rows = (
        db.query(Loan.loan_type)
        .filter(Loan.employee_id == employee_id, Loan.status.in_(ACTIVE_STATUSES))
        .all()
    )
    return [r[0] for r in rows]

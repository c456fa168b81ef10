import logging
import time
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_admin.core.exceptions import InvalidAmount, LedgerWriteFailed, NoOutstandingInstallments, RowAllocationFailed
from hr_admin.core.security import get_current_employee, is_hr_admin, require_hr_admin
from hr_admin.models.employee_model import Employee
from hr_admin.models.loan_model import Loan, LoanDeduction, LoanPaymentHistory
from hr_admin.schemas.loan_schema import (
    DeductionOut,
    DeductionPaymentCreate,
    DeductionPaymentResult,
    PaymentHistoryCreate,
    PaymentHistoryOut,
    PaymentResult,
    RowResultOut,
)
from hr_admin.services.loan_service import (
    apply_row,
    complete_if_paid,
    get_loan_or_404,
    outstanding_installments,
    resolve_loan_type,
)
from hr_admin.utils.activity import log_activity
from hr_admin.utils.database import get_db
from hr_admin.utils.money import money
from hr_admin.utils.payment_allocation import (
    Applied,
    Failed,
    InstallmentStatus,
    RowAllocation,
    allocate,
    apply_allocations,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/loans", tags=["Loan Payments"])


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _payable_loan(db: Session, loan_id: int, loan_type: str) -> Loan:
    lt = resolve_loan_type(loan_type)
    loan = get_loan_or_404(db, loan_id)
    if loan.loan_type != lt:
        raise HTTPException(400, "Loan type does not match the loan")
    if loan.status != "Approved":
        raise HTTPException(400, f"Cannot record a payment for a {loan.status} loan")
    return loan


def new_transaction_id() -> str:
    return f"EP-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6].upper()}"


def write_ledger(
        db: Session,
        loan: Loan,
        amount: Decimal,
        notes: Optional[str],
        recorded_by: str,
) -> LoanPaymentHistory:
    """Ledger entry first and on its own; nothing else is written if it fails."""
    entry = LoanPaymentHistory(
        loan_id=loan.loan_id,
        loan_type=loan.loan_type,
        payment_amount=amount,
        transaction_id=new_transaction_id(),
        notes=notes,
        payment_method="Early Payment",
        recorded_by=recorded_by,
    )
    try:
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Ledger write for loan %s failed: %s", loan.loan_id, exc)
        raise LedgerWriteFailed(details={"loan_id": loan.loan_id, "reason": str(exc)}) from exc
    return entry


def _row_results(allocations, results) -> list[RowResultOut]:
    """Outcome for every planned row, including the ones never reached."""
    out = []
    for r in results:
        if isinstance(r, Applied):
            out.append(RowResultOut(deduction_id=r.installment_id, outcome="applied", amount=float(r.amount)))
        elif isinstance(r, Failed):
            out.append(RowResultOut(deduction_id=r.installment_id, outcome="failed", reason=r.reason))
    for alloc in allocations[len(results):]:
        out.append(RowResultOut(deduction_id=alloc.installment_id, outcome="not_attempted"))
    return out


# =====================================================
# EARLY PAYMENT (ledger + allocation)
# =====================================================
@router.post("/payment-history", response_model=PaymentResult)
def record_payment(
        payload: PaymentHistoryCreate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    """
    Records an early payment and spreads it over the loan's unpaid
    deductions, earliest due date first.

    The ledger row is written before any deduction. Deductions are then
    written one at a time; the first failure stops the run and is reported
    with the outcome of every planned row. Nothing already written is
    rolled back.
    """
    loan = _payable_loan(db, payload.loan_id, payload.loan_type)

    amount = money(payload.payment_amount)
    if amount <= 0:
        raise InvalidAmount()

    plan = None
    if not payload.skip_deduction_processing:
        outstanding = outstanding_installments(loan)
        if not outstanding:
            raise NoOutstandingInstallments()
        plan = allocate(amount, outstanding, note=payload.notes, today=date.today())

    entry = write_ledger(db, loan, amount, payload.notes, admin.employee_id)
    message = f"Payment of {amount:,.2f} recorded successfully"

    if plan is None:
        log_activity(
            db, admin.employee_id, "PAYMENT", "LOANS",
            f"Recorded {amount} on {loan.loan_type} #{loan.loan_id} (deductions not processed)",
        )
        db.commit()
        return PaymentResult(
            success=True,
            message=message,
            payment=PaymentHistoryOut.model_validate(entry),
            applied_total=0,
            leftover_amount=float(amount),
        )

    rows_by_id = {d.deduction_id: d for d in loan.deductions}

    def write_row(alloc: RowAllocation) -> None:
        d = rows_by_id[alloc.installment_id]
        try:
            apply_row(d, alloc.applied_amount, alloc.notes, alloc.payment_date)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

    results = apply_allocations(plan.allocations, write_row)
    rows = _row_results(plan.allocations, results)
    failed = next((r for r in results if isinstance(r, Failed)), None)

    if failed is not None:
        applied_total = money(sum((r.amount for r in results if isinstance(r, Applied)), Decimal("0")))
        log_activity(
            db, admin.employee_id, "PAYMENT", "LOANS",
            f"Payment {entry.transaction_id} stopped at deduction #{failed.installment_id}: {failed.reason}",
            status="ERROR",
        )
        db.commit()
        raise RowAllocationFailed(
            details={
                "payment_id": entry.payment_id,
                "transaction_id": entry.transaction_id,
                "failed_deduction_id": failed.installment_id,
                "reason": failed.reason,
                "applied_total": float(applied_total),
                "rows": [r.model_dump() for r in rows],
            }
        )

    completed = complete_if_paid(loan)
    log_activity(
        db, admin.employee_id, "PAYMENT", "LOANS",
        f"Recorded {amount} on {loan.loan_type} #{loan.loan_id} across {len(results)} deduction(s)",
    )
    db.commit()

    return PaymentResult(
        success=True,
        message=message,
        payment=PaymentHistoryOut.model_validate(entry),
        applied_total=float(plan.applied_total),
        leftover_amount=float(plan.leftover_amount),
        rows=rows,
        loan_completed=completed,
    )


@router.get("/payment-history", response_model=list[PaymentHistoryOut])
def list_payment_history(
        loan_id: Optional[int] = Query(None),
        loan_type: Optional[str] = Query(None, description="salary / housing / car"),
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    q = db.query(LoanPaymentHistory)

    if not is_hr_admin(db, me):
        # employees only see payments on their own loans
        q = q.join(Loan, Loan.loan_id == LoanPaymentHistory.loan_id).filter(
            Loan.employee_id == me.employee_id
        )

    if loan_id is not None:
        q = q.filter(LoanPaymentHistory.loan_id == loan_id)
    if loan_type:
        q = q.filter(LoanPaymentHistory.loan_type == resolve_loan_type(loan_type))

    return q.order_by(LoanPaymentHistory.payment_date.desc(), LoanPaymentHistory.payment_id.desc()).all()


# =====================================================
# SINGLE DEDUCTION PAYMENT
# =====================================================
@router.post("/deductions/payment", response_model=DeductionPaymentResult)
def pay_deduction(
        payload: DeductionPaymentCreate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    loan = _payable_loan(db, payload.loan_id, payload.loan_type)

    amount = money(payload.payment_amount)
    if amount <= 0:
        raise InvalidAmount()

    d = (
        db.query(LoanDeduction)
        .filter(
            LoanDeduction.deduction_id == payload.deduction_id,
            LoanDeduction.loan_id == loan.loan_id,
        )
        .first()
    )
    if not d:
        raise HTTPException(404, "Deduction not found")
    if d.status == InstallmentStatus.PAID.value:
        raise HTTPException(400, "Deduction is already paid")

    apply_row(d, amount, payload.notes, date.today())
    db.flush()

    completed = complete_if_paid(loan)
    log_activity(
        db, admin.employee_id, "PAYMENT", "LOAN_DEDUCTIONS",
        f"Paid {amount} on deduction #{d.deduction_id} of {loan.loan_type} #{loan.loan_id}",
    )
    db.commit()
    db.refresh(d)

    return DeductionPaymentResult(
        success=True,
        message="Deduction payment recorded successfully",
        deduction=DeductionOut.model_validate(d),
        loan_completed=completed,
    )

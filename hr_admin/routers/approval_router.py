import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hr_admin.core.exceptions import Forbidden
from hr_admin.core.security import get_current_employee
from hr_admin.models.approval_action_model import ApprovalAction
from hr_admin.models.benefits_model import MedicalLOA, MedicalReimbursement
from hr_admin.models.employee_model import Approver, Employee
from hr_admin.models.house_booking_model import HouseBooking
from hr_admin.models.loan_model import Loan
from hr_admin.schemas.approval_schemas import (
    ApprovalActionIn,
    ApprovalActionOut,
    ApprovalResult,
    PendingRequestListOut,
    PendingRequestOut,
)
from hr_admin.services.booking_service import property_conflict
from hr_admin.services.loan_service import create_schedule
from hr_admin.utils.activity import log_activity
from hr_admin.utils.approval_stage import APPROVE, REJECT, ApprovalStatus, advance, stage_label
from hr_admin.utils.database import get_db
from hr_admin.utils.fan_in import errors_of, gather_sources, merge_ok
from hr_admin.utils.loan_rules import CAR_LOAN, HOUSING_LOAN, SALARY_LOAN
from hr_admin.utils.money import money

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/approval", tags=["Approval"])

MIN_REJECT_COMMENT = 5


@dataclass(frozen=True)
class RequestKind:
    model: type
    id_attr: str
    # level at which an approval is final
    final_level: int
    loan_type: Optional[str] = None


REQUEST_TYPES = {
    "salary-loan": RequestKind(Loan, "loan_id", 4, SALARY_LOAN),
    "housing-loan": RequestKind(Loan, "loan_id", 4, HOUSING_LOAN),
    "car-loan": RequestKind(Loan, "loan_id", 4, CAR_LOAN),
    "medical-reimbursement": RequestKind(MedicalReimbursement, "reimbursement_id", 4),
    "medical-loa": RequestKind(MedicalLOA, "loa_id", 1),
    "house-booking": RequestKind(HouseBooking, "booking_id", 2),
}


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _kind_or_400(request_type: str) -> RequestKind:
    kind = REQUEST_TYPES.get(request_type)
    if not kind:
        raise HTTPException(400, "Invalid request type")
    return kind


def _query(db: Session, kind: RequestKind):
    q = db.query(kind.model)
    if kind.loan_type:
        q = q.filter(Loan.loan_type == kind.loan_type)
    return q


def _approver_of(db: Session, emp: Employee) -> Approver:
    approver = (
        db.query(Approver)
        .filter(Approver.employee_id == emp.employee_id, Approver.can_approve.is_(True))
        .first()
    )
    if not approver:
        raise Forbidden("You do not have approval privileges")
    return approver


def _summary(request_type: str, row) -> str:
    if isinstance(row, Loan):
        return f"{row.loan_type} of {money(row.amount):,.2f} over {row.repayment_term} months"
    if isinstance(row, MedicalReimbursement):
        return f"{row.patient_type.title()} reimbursement of {money(row.total_amount):,.2f}"
    if isinstance(row, MedicalLOA):
        return f"LOA at {row.hospital_name} on {row.visit_date}"
    if isinstance(row, HouseBooking):
        return f"{row.property_name}, {row.checkin_at:%Y-%m-%d %H:%M} to {row.checkout_at:%Y-%m-%d %H:%M}"
    return request_type


def _on_final_approval(db: Session, row) -> None:
    if isinstance(row, Loan):
        n = create_schedule(db, row, date.today())
        logger.info("Loan %s approved; %d deductions scheduled", row.loan_id, n)
    elif isinstance(row, MedicalReimbursement):
        emp = row.employee
        remaining = money(emp.benefits_amount_remaining) - money(row.total_amount)
        emp.benefits_amount_remaining = max(money(0), remaining)
    elif isinstance(row, HouseBooking):
        if property_conflict(db, row.property_name, row.checkin_at, row.checkout_at, exclude_id=row.booking_id):
            raise HTTPException(
                409,
                "This property is already booked or within a 3-hour cleaning period during the specified time",
            )


# =====================================================
# ACT ON A REQUEST
# =====================================================
@router.post("/{request_type}/{action}", response_model=ApprovalResult)
def act_on_request(
        request_type: str,
        action: str,
        payload: ApprovalActionIn,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    kind = _kind_or_400(request_type)
    action = action.lower()

    comment = (payload.comment or "").strip() or None
    if action == REJECT and len(comment or "") < MIN_REJECT_COMMENT:
        raise HTTPException(400, f"A rejection comment of at least {MIN_REJECT_COMMENT} characters is required")

    approver = _approver_of(db, me)

    row = _query(db, kind).filter(getattr(kind.model, kind.id_attr) == payload.id).first()
    if not row:
        raise HTTPException(404, "Request not found")

    new_status, new_level = advance(
        action,
        approver.numeric_level,
        row.current_approval_level,
        row.status,
        final_level=kind.final_level,
    )

    already = (
        db.query(ApprovalAction)
        .filter(
            ApprovalAction.request_type == request_type,
            ApprovalAction.request_id == payload.id,
            ApprovalAction.approval_level == row.current_approval_level,
        )
        .first()
    )
    if already:
        raise HTTPException(400, "This request has already been processed at your level")

    acted_level = row.current_approval_level
    db.add(
        ApprovalAction(
            request_type=request_type,
            request_id=payload.id,
            approver_employee_id=me.employee_id,
            approval_level=acted_level,
            status=ApprovalStatus.APPROVED.value if action == APPROVE else ApprovalStatus.REJECTED.value,
            comment=comment,
        )
    )

    row.status = new_status.value
    row.current_approval_level = new_level
    if new_status == ApprovalStatus.APPROVED:
        _on_final_approval(db, row)

    log_activity(
        db, me.employee_id, action.upper(), request_type.replace("-", "_"),
        f"{new_status.value} {request_type} #{payload.id} at level {acted_level}"
        + (f": {comment}" if comment else ""),
    )

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "This request has already been processed at your level")

    if new_status == ApprovalStatus.PENDING:
        message = f"Request approved at level {acted_level} and forwarded to the next approver"
    else:
        message = f"Request {new_status.value.lower()} successfully"

    return ApprovalResult(
        success=True,
        message=message,
        request_type=request_type,
        request_id=payload.id,
        status=new_status.value,
        current_approval_level=new_level,
        approval_stage=stage_label(new_level, new_status),
    )


# =====================================================
# PENDING QUEUE
# =====================================================
@router.get("/requests", response_model=PendingRequestListOut)
def pending_requests(
        request_type: Optional[str] = Query(None, description="e.g. salary-loan, house-booking"),
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    approver = _approver_of(db, me)
    level = approver.numeric_level

    names = [request_type] if request_type else list(REQUEST_TYPES)
    for name in names:
        _kind_or_400(name)

    def pending_of(name: str):
        kind = REQUEST_TYPES[name]
        rows = (
            _query(db, kind)
            .filter(
                kind.model.status == ApprovalStatus.PENDING.value,
                kind.model.current_approval_level == level,
            )
            .order_by(kind.model.submitted_at.asc())
            .all()
        )
        return [
            PendingRequestOut(
                request_type=name,
                request_id=getattr(r, kind.id_attr),
                employee_id=r.employee_id,
                employee_name=r.employee.full_name if r.employee else None,
                summary=_summary(name, r),
                current_approval_level=r.current_approval_level,
                approval_stage=stage_label(r.current_approval_level, r.status),
                submitted_at=r.submitted_at,
            )
            for r in rows
        ]

    results = gather_sources({n: (lambda n=n: pending_of(n)) for n in names}, on_error=db.rollback)
    return PendingRequestListOut(approval_level=level, requests=merge_ok(results), errors=errors_of(results))


@router.get("/{request_type}/{request_id}/history", response_model=list[ApprovalActionOut])
def approval_history(
        request_type: str,
        request_id: int,
        db: Session = Depends(get_db),
        _me: Employee = Depends(get_current_employee),
):
    _kind_or_400(request_type)
    return (
        db.query(ApprovalAction)
        .filter(ApprovalAction.request_type == request_type, ApprovalAction.request_id == request_id)
        .order_by(ApprovalAction.approval_level.asc())
        .all()
    )

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hr_admin.core.security import get_current_employee, require_hr_admin
from hr_admin.models.benefits_model import MedicalLOA, MedicalReimbursement
from hr_admin.models.employee_model import Employee
from hr_admin.schemas.benefit_schemas import (
    BenefitsBalanceOut,
    LOACreate,
    LOAOut,
    LOAUpdate,
    ReimbursementCreate,
    ReimbursementOut,
    ReimbursementUpdate,
)
from hr_admin.utils.activity import log_activity
from hr_admin.utils.database import get_db
from hr_admin.utils.money import money

router = APIRouter(prefix="/benefits", tags=["Benefits"])


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _check_claim_dates(admission: date, discharge: Optional[date]) -> None:
    today = date.today()
    if admission > today:
        raise HTTPException(400, "Admission date cannot be in the future")
    if discharge is not None:
        if discharge > today:
            raise HTTPException(400, "Discharge date cannot be in the future")
        if discharge < admission:
            raise HTTPException(400, "Discharge date cannot be before admission date")


def _check_balance(emp: Employee, amount) -> None:
    if money(amount) > money(emp.benefits_amount_remaining):
        raise HTTPException(
            400,
            f"Amount exceeds remaining benefits balance of {money(emp.benefits_amount_remaining):,.2f}",
        )


def _get_or_404(db: Session, model, id_attr: str, value: int, label: str):
    row = db.query(model).filter(getattr(model, id_attr) == value).first()
    if not row:
        raise HTTPException(404, f"{label} not found")
    return row


@router.get("/balance", response_model=BenefitsBalanceOut)
def my_benefits_balance(me: Employee = Depends(get_current_employee)):
    return BenefitsBalanceOut(
        employee_id=me.employee_id,
        benefits_package=me.benefits_package,
        benefits_amount=float(me.benefits_amount or 0),
        benefits_amount_remaining=float(me.benefits_amount_remaining or 0),
    )


# =====================================================
# MEDICAL REIMBURSEMENT
# =====================================================
@router.post("/medical-reimbursements", response_model=ReimbursementOut)
def submit_reimbursement(
        payload: ReimbursementCreate,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    _check_claim_dates(payload.admission_date, payload.discharge_date)
    _check_balance(me, payload.total_amount)

    row = MedicalReimbursement(
        employee_id=me.employee_id,
        patient_type=payload.patient_type,
        admission_date=payload.admission_date,
        discharge_date=payload.discharge_date,
        total_amount=money(payload.total_amount),
        claim_method=payload.claim_method,
        remarks=payload.remarks,
        status="Pending",
        current_approval_level=1,
    )
    db.add(row)
    db.flush()
    log_activity(
        db, me.employee_id, "CREATE", "MEDICAL_REIMBURSEMENT",
        f"Submitted reimbursement #{row.reimbursement_id} for {money(payload.total_amount)}",
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("/medical-reimbursements/mine", response_model=list[ReimbursementOut])
def my_reimbursements(
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    return (
        db.query(MedicalReimbursement)
        .filter(MedicalReimbursement.employee_id == me.employee_id)
        .order_by(MedicalReimbursement.submitted_at.desc(), MedicalReimbursement.reimbursement_id.desc())
        .all()
    )


@router.get("/medical-reimbursements", response_model=list[ReimbursementOut])
def list_reimbursements(
        status: Optional[str] = Query(None),
        employee_id: Optional[str] = None,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    q = db.query(MedicalReimbursement)
    if status:
        q = q.filter(MedicalReimbursement.status == status)
    if employee_id:
        q = q.filter(MedicalReimbursement.employee_id == employee_id)
    return q.order_by(MedicalReimbursement.submitted_at.desc(), MedicalReimbursement.reimbursement_id.desc()).all()


@router.get("/medical-reimbursements/{reimbursement_id}", response_model=ReimbursementOut)
def get_reimbursement(
        reimbursement_id: int,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    return _get_or_404(db, MedicalReimbursement, "reimbursement_id", reimbursement_id, "Reimbursement")


@router.put("/medical-reimbursements/{reimbursement_id}", response_model=ReimbursementOut)
def update_reimbursement(
        reimbursement_id: int,
        payload: ReimbursementUpdate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    row = _get_or_404(db, MedicalReimbursement, "reimbursement_id", reimbursement_id, "Reimbursement")
    if row.status != "Pending":
        raise HTTPException(400, f"Cannot edit a {row.status.lower()} reimbursement")

    data = payload.model_dump(exclude_unset=True)
    _check_claim_dates(
        data.get("admission_date") or row.admission_date,
        data.get("discharge_date", row.discharge_date),
    )
    if data.get("total_amount") is not None:
        _check_balance(row.employee, data["total_amount"])
        data["total_amount"] = money(data["total_amount"])

    for field, value in data.items():
        setattr(row, field, value)

    log_activity(db, admin.employee_id, "UPDATE", "MEDICAL_REIMBURSEMENT", f"Updated reimbursement #{reimbursement_id}")
    db.commit()
    db.refresh(row)
    return row


@router.delete("/medical-reimbursements/{reimbursement_id}")
def delete_reimbursement(
        reimbursement_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    row = _get_or_404(db, MedicalReimbursement, "reimbursement_id", reimbursement_id, "Reimbursement")
    log_activity(db, admin.employee_id, "DELETE", "MEDICAL_REIMBURSEMENT", f"Deleted reimbursement #{reimbursement_id}")
    db.delete(row)
    db.commit()
    return {"message": "Reimbursement deleted successfully"}


# =====================================================
# MEDICAL LOA
# =====================================================
@router.post("/medical-loas", response_model=LOAOut)
def submit_loa(
        payload: LOACreate,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    row = MedicalLOA(
        employee_id=me.employee_id,
        hospital_name=payload.hospital_name.strip(),
        visit_date=payload.visit_date,
        reason_type=payload.reason_type.strip(),
        preferred_doctor=payload.preferred_doctor,
        remarks=payload.remarks,
        status="Pending",
        current_approval_level=1,
    )
    db.add(row)
    db.flush()
    log_activity(db, me.employee_id, "CREATE", "MEDICAL_LOA", f"Requested LOA #{row.loa_id} at {row.hospital_name}")
    db.commit()
    db.refresh(row)
    return row


@router.get("/medical-loas/mine", response_model=list[LOAOut])
def my_loas(
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    return (
        db.query(MedicalLOA)
        .filter(MedicalLOA.employee_id == me.employee_id)
        .order_by(MedicalLOA.submitted_at.desc(), MedicalLOA.loa_id.desc())
        .all()
    )


@router.get("/medical-loas", response_model=list[LOAOut])
def list_loas(
        status: Optional[str] = Query(None),
        employee_id: Optional[str] = None,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    q = db.query(MedicalLOA)
    if status:
        q = q.filter(MedicalLOA.status == status)
    if employee_id:
        q = q.filter(MedicalLOA.employee_id == employee_id)
    return q.order_by(MedicalLOA.submitted_at.desc(), MedicalLOA.loa_id.desc()).all()


@router.get("/medical-loas/{loa_id}", response_model=LOAOut)
def get_loa(
        loa_id: int,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    return _get_or_404(db, MedicalLOA, "loa_id", loa_id, "LOA")


@router.put("/medical-loas/{loa_id}", response_model=LOAOut)
def update_loa(
        loa_id: int,
        payload: LOAUpdate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    row = _get_or_404(db, MedicalLOA, "loa_id", loa_id, "LOA")
    if row.status != "Pending":
        raise HTTPException(400, f"Cannot edit a {row.status.lower()} LOA")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(row, field, value)

    log_activity(db, admin.employee_id, "UPDATE", "MEDICAL_LOA", f"Updated LOA #{loa_id}")
    db.commit()
    db.refresh(row)
    return row


@router.delete("/medical-loas/{loa_id}")
def delete_loa(
        loa_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    row = _get_or_404(db, MedicalLOA, "loa_id", loa_id, "LOA")
    log_activity(db, admin.employee_id, "DELETE", "MEDICAL_LOA", f"Deleted LOA #{loa_id}")
    db.delete(row)
    db.commit()
    return {"message": "LOA deleted successfully"}

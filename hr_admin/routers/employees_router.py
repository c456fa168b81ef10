# hr_admin/routers/employees_router.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from hr_admin.core.security import require_hr_admin
from hr_admin.models.employee_model import Approver, Employee
from hr_admin.schemas import (
    ApproverCreate,
    ApproverOut,
    EmployeeCreate,
    EmployeeListOut,
    EmployeeOut,
    EmployeeUpdate,
    NextEmployeeIdOut,
    PositionOut,
)
from hr_admin.utils.activity import log_activity
from hr_admin.utils.database import get_db
from hr_admin.utils.money import money
from hr_admin.utils.position_data import (
    DEPARTMENTS,
    POSITIONS,
    benefits_for,
    find_position,
    next_employee_id,
    position_salary,
    role_class,
)

router = APIRouter(prefix="/admin", tags=["Employees"])

SORTABLE = {
    "employee_id": Employee.employee_id,
    "last_name": Employee.last_name,
    "first_name": Employee.first_name,
    "position": Employee.position,
    "department": Employee.department,
    "salary": Employee.salary,
    "hire_date": Employee.hire_date,
    "created_at": Employee.created_at,
}


def _get_employee_or_404(db: Session, employee_id: str) -> Employee:
    emp = db.query(Employee).filter(Employee.employee_id == employee_id).first()
    if not emp:
        raise HTTPException(404, "Employee not found")
    return emp


def _check_position(position: str) -> None:
    if not find_position(position):
        raise HTTPException(400, f"Unknown position: {position}")


# ---------- REFERENCE DATA ----------

@router.get("/positions", response_model=list[PositionOut])
def list_positions():
    return [PositionOut(**p._asdict()) for p in POSITIONS]


@router.get("/departments", response_model=list[str])
def list_departments():
    return DEPARTMENTS


@router.get("/employees/next-id", response_model=NextEmployeeIdOut)
def preview_next_id(
        position: str = Query(...),
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    ids = [r[0] for r in db.query(Employee.employee_id).all()]
    return NextEmployeeIdOut(position=position, employee_id=next_employee_id(position, ids))


# ---------- EMPLOYEES ----------

@router.get("/employees", response_model=EmployeeListOut)
def list_employees(
        search: Optional[str] = Query(None, description="Name, email or employee ID"),
        department: Optional[str] = None,
        position: Optional[str] = None,
        is_active: Optional[bool] = True,
        sort_by: str = Query("employee_id"),
        sort_dir: Literal["asc", "desc"] = "asc",
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=200),
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    q = db.query(Employee)

    if is_active is not None:
        q = q.filter(Employee.is_active.is_(is_active))
    if department:
        q = q.filter(Employee.department == department)
    if position:
        q = q.filter(Employee.position == position)
    if search:
        like = f"%{search.strip().lower()}%"
        q = q.filter(
            or_(
                func.lower(Employee.first_name).like(like),
                func.lower(Employee.last_name).like(like),
                func.lower(Employee.email).like(like),
                func.lower(Employee.employee_id).like(like),
            )
        )

    if sort_by not in SORTABLE:
        raise HTTPException(400, f"Cannot sort by {sort_by}")
    col = SORTABLE[sort_by]

    total = q.count()
    rows = (
        q.order_by(col.desc() if sort_dir == "desc" else col.asc(), Employee.employee_id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return EmployeeListOut(total=total, employees=[EmployeeOut.model_validate(r) for r in rows])


@router.get("/employees/{employee_id}", response_model=EmployeeOut)
def get_employee(
        employee_id: str,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    return _get_employee_or_404(db, employee_id)


@router.post("/employees", response_model=EmployeeOut)
def create_employee(
        payload: EmployeeCreate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    _check_position(payload.position)

    if db.query(Employee).filter(Employee.email == payload.email).first():
        raise HTTPException(400, "Email already exists")

    ids = [r[0] for r in db.query(Employee.employee_id).all()]
    new_id = next_employee_id(payload.position, ids)

    rc = role_class(payload.position)
    package, allowance = benefits_for(rc)
    salary = payload.salary if payload.salary is not None else position_salary(payload.position)

    emp = Employee(
        employee_id=new_id,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email,
        phone=payload.phone,
        position=payload.position,
        department=payload.department,
        salary=money(salary),
        role_class=rc,
        benefits_package=package or None,
        benefits_amount=allowance,
        benefits_amount_remaining=allowance,
        hire_date=payload.hire_date,
        is_active=True,
    )
    db.add(emp)
    log_activity(db, admin.employee_id, "CREATE", "EMPLOYEES", f"Created employee {new_id} ({emp.full_name})")
    db.commit()
    db.refresh(emp)
    return emp


@router.put("/employees/{employee_id}", response_model=EmployeeOut)
def update_employee(
        employee_id: str,
        payload: EmployeeUpdate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    emp = _get_employee_or_404(db, employee_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("email") is not None:
        email = data["email"].strip().lower()
        dup = (
            db.query(Employee)
            .filter(Employee.email == email, Employee.employee_id != employee_id)
            .first()
        )
        if dup:
            raise HTTPException(400, "Email already in use")
        data["email"] = email

    new_position = data.pop("position", None)
    if new_position and new_position != emp.position:
        _check_position(new_position)
        emp.position = new_position
        emp.role_class = role_class(new_position)

        # keep what was already used against the old allowance
        used = money(emp.benefits_amount) - money(emp.benefits_amount_remaining)
        package, allowance = benefits_for(emp.role_class)
        emp.benefits_package = package or None
        emp.benefits_amount = allowance
        emp.benefits_amount_remaining = max(money(0), allowance - used)

        if data.get("salary") is None:
            emp.salary = money(position_salary(new_position))

    for field, value in data.items():
        if value is None and field not in ("phone", "hire_date"):
            continue
        if field == "salary":
            value = money(value)
        setattr(emp, field, value)

    log_activity(db, admin.employee_id, "UPDATE", "EMPLOYEES", f"Updated employee {employee_id}")
    db.commit()
    db.refresh(emp)
    return emp


@router.delete("/employees/{employee_id}")
def deactivate_employee(
        employee_id: str,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    emp = _get_employee_or_404(db, employee_id)
    if emp.employee_id == admin.employee_id:
        raise HTTPException(400, "You cannot deactivate your own account")

    # soft delete; loans and requests keep pointing at the row
    emp.is_active = False
    log_activity(db, admin.employee_id, "DELETE", "EMPLOYEES", f"Deactivated employee {employee_id}")
    db.commit()
    return {"message": "Employee deactivated successfully"}


# ---------- APPROVERS ----------

@router.get("/approvers", response_model=list[ApproverOut])
def list_approvers(
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    return db.query(Approver).order_by(Approver.numeric_level.asc(), Approver.approver_id.asc()).all()


@router.post("/approvers", response_model=ApproverOut)
def create_approver(
        payload: ApproverCreate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    _get_employee_or_404(db, payload.employee_id)

    if db.query(Approver).filter(Approver.employee_id == payload.employee_id).first():
        raise HTTPException(400, "Employee is already an approver")

    approver = Approver(**payload.model_dump())
    db.add(approver)
    log_activity(
        db, admin.employee_id, "CREATE", "APPROVERS",
        f"Made {payload.employee_id} a level {payload.numeric_level} approver ({payload.approval_level})",
    )
    db.commit()
    db.refresh(approver)
    return approver


@router.delete("/approvers/{approver_id}")
def delete_approver(
        approver_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    approver = db.query(Approver).filter(Approver.approver_id == approver_id).first()
    if not approver:
        raise HTTPException(404, "Approver not found")

    log_activity(db, admin.employee_id, "DELETE", "APPROVERS", f"Removed approver {approver.employee_id}")
    db.delete(approver)
    db.commit()
    return {"message": "Approver removed successfully"}

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from hr_admin.core.config import ACCESS_TOKEN_MINUTES, JWT_ALGO, JWT_SECRET
from hr_admin.core.exceptions import Forbidden, Unauthenticated
from hr_admin.models.employee_model import Approver, Employee
from hr_admin.utils.database import get_db

TOKEN_COOKIE = "access_token"


def create_access_token(employee_id: str, minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": employee_id,
        "iat": now,
        "exp": now + timedelta(minutes=minutes or ACCESS_TOKEN_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGO)


def _token_from_request(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return request.cookies.get(TOKEN_COOKIE)


def get_current_employee(request: Request, db: Session = Depends(get_db)) -> Employee:
    """
    Session guard for every data route.

    Raises ``Unauthenticated`` (401) instead of redirecting; the client
    decides where to send the user.
    """
    token = _token_from_request(request)
    if not token:
        raise Unauthenticated()

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Session expired - Please log in again")
    except jwt.InvalidTokenError:
        raise Unauthenticated()

    employee_id = payload.get("sub")
    emp = db.query(Employee).filter(Employee.employee_id == employee_id).first()
    if not emp or not emp.is_active:
        raise Unauthenticated()
    return emp


def is_hr_admin(db: Session, emp: Employee) -> bool:
    position = (emp.position or "").upper()
    if "HR" in position and ("ADMIN" in position or "MANAGER" in position):
        return True

    approver = db.query(Approver).filter(Approver.employee_id == emp.employee_id).first()
    return bool(approver and approver.approval_level == "HR Manager")


def require_hr_admin(
        emp: Employee = Depends(get_current_employee),
        db: Session = Depends(get_db),
) -> Employee:
    if not is_hr_admin(db, emp):
        raise Forbidden()
    return emp


def require_system_admin(emp: Employee = Depends(get_current_employee)) -> Employee:
    # Class A (Senior Manager / System Administrator) runs the admin console
    if not (emp.role_class or "").startswith("Class A"):
        raise Forbidden("Unauthorized - Admin access required")
    return emp

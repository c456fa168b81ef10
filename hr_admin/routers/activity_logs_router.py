from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hr_admin.core.security import require_system_admin
from hr_admin.models.activity_log_model import ActivityLog
from hr_admin.models.employee_model import Employee
from hr_admin.schemas import ActivityLogListOut, ActivityLogOut
from hr_admin.utils.database import get_db

router = APIRouter(prefix="/admin/activity-logs", tags=["Activity Logs"])


@router.get("", response_model=ActivityLogListOut)
def list_activity_logs(
        action: Optional[str] = Query(None, description="CREATE / UPDATE / DELETE / APPROVE / ..."),
        user_id: Optional[str] = None,
        module: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = Query(1, ge=1),
        page_size: int = Query(50, ge=1, le=500),
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_system_admin),
):
    q = db.query(ActivityLog)

    if action and action.upper() != "ALL":
        q = q.filter(ActivityLog.action == action.upper())
    if user_id:
        q = q.filter(ActivityLog.user_id == user_id)
    if module:
        q = q.filter(ActivityLog.module == module.upper())
    if date_from:
        q = q.filter(ActivityLog.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        # inclusive of the whole day
        q = q.filter(ActivityLog.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    total = q.count()
    rows = (
        q.order_by(ActivityLog.created_at.desc(), ActivityLog.log_id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return ActivityLogListOut(
        total=total,
        page=page,
        page_size=page_size,
        logs=[ActivityLogOut.model_validate(r) for r in rows],
    )

import logging
from typing import Optional

from sqlalchemy.orm import Session

from hr_admin.models.activity_log_model import ActivityLog

logger = logging.getLogger("hr_admin.activity")


def log_activity(
        db: Session,
        user_id: Optional[str],
        action: str,
        module: str,
        details: str,
        status: str = "SUCCESS",
) -> ActivityLog:
    """Stages an activity row in the caller's transaction (no commit here)."""
    row = ActivityLog(
        user_id=user_id,
        action=action.upper(),
        module=module.upper(),
        details=details,
        status=status,
    )
    db.add(row)
    logger.info("%s %s by %s: %s [%s]", row.action, row.module, user_id, details, status)
    return row

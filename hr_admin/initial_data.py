import logging

from hr_admin.models.database_backup_model import BackupSchedule
from hr_admin.utils.database import SessionLocal

logger = logging.getLogger(__name__)


def init_seed() -> None:
    """Idempotent seed data needed on a fresh database."""
    db = SessionLocal()
    try:
        if not db.query(BackupSchedule).first():
            db.add(BackupSchedule(frequency="daily", enabled=False))
            db.commit()
            logger.info("Seeded default backup schedule (daily, disabled)")
    finally:
        db.close()

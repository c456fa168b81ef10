from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.sql import func
from hr_admin.utils.database import Base


class DatabaseBackup(Base):
    __tablename__ = "database_backups"

    backup_id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(200), nullable=False, unique=True)

    type = Column(String(30), nullable=False)  # Full Backup / Incremental Backup
    size = Column(String(20), nullable=False, default="0 KB")
    status = Column(String(20), nullable=False, default="In Progress")  # In Progress / Completed / Failed

    created_by = Column(String(200), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class BackupSchedule(Base):
    __tablename__ = "database_backup_schedule"

    schedule_id = Column(Integer, primary_key=True)
    frequency = Column(String(10), nullable=False, default="daily")  # 8hours / daily / weekly
    enabled = Column(Boolean, nullable=False, default=False)

    last_run = Column(DateTime, nullable=True)
    next_run = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

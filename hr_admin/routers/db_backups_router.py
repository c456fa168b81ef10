import logging
import os
import shutil
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session

from hr_admin.core.config import BACKUP_DIR, DATABASE_URL, PG_BIN_DIR
from hr_admin.core.security import require_system_admin
from hr_admin.models.database_backup_model import BackupSchedule, DatabaseBackup
from hr_admin.models.employee_model import Employee
from hr_admin.schemas.backup_schemas import (
    BackupCreate,
    BackupOut,
    ScheduleOut,
    ScheduleUpdate,
    SchedulerRunOut,
)
from hr_admin.utils.activity import log_activity
from hr_admin.utils.backup_schedule import human_size, next_run
from hr_admin.utils.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/database-backups", tags=["Database Backups"])

BACKUP_TYPES = {
    "full": "Full Backup",
    "incremental": "Incremental Backup",
}

# ------------------------------
# PostgreSQL tools
# ------------------------------
_EXE = ".exe" if os.name == "nt" else ""
PG_DUMP = shutil.which("pg_dump") or os.path.join(PG_BIN_DIR, f"pg_dump{_EXE}")
PSQL = shutil.which("psql") or os.path.join(PG_BIN_DIR, f"psql{_EXE}")


def _assert_tools():
    if not os.path.exists(PG_DUMP):
        raise HTTPException(500, "pg_dump not found")
    if not os.path.exists(PSQL):
        raise HTTPException(500, "psql not found")


def _conn_args():
    url = make_url(DATABASE_URL)
    args = [
        "-h", url.host or "127.0.0.1",
        "-p", str(url.port or 5432),
        "-U", url.username or "postgres",
        "-d", url.database or "",
    ]
    env = os.environ.copy()
    env["PGPASSWORD"] = url.password or ""
    return args, env


def run_cmd(cmd, env):
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, env=env)
    if p.returncode != 0:
        raise HTTPException(
            status_code=500,
            detail={
                "cmd": os.path.basename(cmd[0]),
                "stderr": p.stderr,
            },
        )
    return p


def _backup_path(backup: DatabaseBackup) -> Path:
    return BACKUP_DIR / backup.filename


def _get_backup_or_404(db: Session, backup_id: int) -> DatabaseBackup:
    backup = db.query(DatabaseBackup).filter(DatabaseBackup.backup_id == backup_id).first()
    if not backup:
        raise HTTPException(404, "Backup not found")
    return backup


def perform_backup(db: Session, kind: str, created_by: str, note=None) -> DatabaseBackup:
    """
    Dumps the database into BACKUP_DIR. Full backups carry schema and data,
    incremental ones data only. The row goes In Progress -> Completed | Failed.
    """
    _assert_tools()
    BACKUP_DIR.mkdir(parents=True, exist_ok=True)

    args, env = _conn_args()
    db_name = make_url(DATABASE_URL).database or "database"
    ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup = DatabaseBackup(
        filename=f"{db_name}_{kind}_{ts}.sql",
        type=BACKUP_TYPES[kind],
        size="0 KB",
        status="In Progress",
        created_by=created_by,
        note=note,
    )
    db.add(backup)
    db.commit()
    db.refresh(backup)

    path = _backup_path(backup)
    cmd = [PG_DUMP, *args, "--format=p", "--no-owner", "--no-privileges", "-f", str(path)]
    if kind == "incremental":
        cmd.append("--data-only")

    try:
        run_cmd(cmd, env)
    except (HTTPException, OSError) as exc:
        logger.error("Backup %s failed: %s", backup.filename, exc)
        backup.status = "Failed"
        db.commit()
        raise

    backup.size = human_size(path.stat().st_size) if path.exists() else "0 KB"
    backup.status = "Completed"
    db.commit()
    db.refresh(backup)
    logger.info("Backup %s completed (%s)", backup.filename, backup.size)
    return backup


def restore_from(path: str) -> None:
    _assert_tools()
    args, env = _conn_args()
    run_cmd([PSQL, *args, "-v", "ON_ERROR_STOP=1", "-f", path], env)


def _schedule(db: Session) -> BackupSchedule:
    row = db.query(BackupSchedule).order_by(BackupSchedule.schedule_id.asc()).first()
    if not row:
        row = BackupSchedule(frequency="daily", enabled=False)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


# ------------------------------
# BACKUPS
# ------------------------------
@router.post("", response_model=BackupOut)
def create_backup(
        payload: BackupCreate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_system_admin),
):
    backup = perform_backup(db, payload.type, admin.full_name, payload.note)
    log_activity(db, admin.employee_id, "BACKUP", "DATABASE", f"Created {backup.type.lower()} {backup.filename}")
    db.commit()
    db.refresh(backup)
    return backup


@router.get("", response_model=list[BackupOut])
def list_backups(
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_system_admin),
):
    return db.query(DatabaseBackup).order_by(DatabaseBackup.created_at.desc(), DatabaseBackup.backup_id.desc()).all()


# ------------------------------
# SCHEDULE
# ------------------------------
@router.get("/schedule", response_model=ScheduleOut)
def get_schedule(
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_system_admin),
):
    return _schedule(db)


@router.put("/schedule", response_model=ScheduleOut)
def update_schedule(
        payload: ScheduleUpdate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_system_admin),
):
    row = _schedule(db)
    row.frequency = payload.frequency
    row.enabled = payload.enabled
    row.next_run = next_run(payload.frequency, datetime.now()) if payload.enabled else None

    log_activity(
        db, admin.employee_id, "UPDATE", "DATABASE",
        f"Backup schedule {'enabled' if payload.enabled else 'disabled'} ({payload.frequency})",
    )
    db.commit()
    db.refresh(row)
    return row


@router.post("/scheduler/run", response_model=SchedulerRunOut)
def run_scheduler(
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_system_admin),
):
    """Runs a full backup when the schedule is enabled and due."""
    row = _schedule(db)
    now = datetime.now()

    if not row.enabled:
        return SchedulerRunOut(ran=False, message="Backup schedule is disabled", next_run=row.next_run)
    if row.next_run and now < row.next_run:
        return SchedulerRunOut(ran=False, message="No backup due yet", next_run=row.next_run)

    backup = perform_backup(db, "full", "Scheduler", note=f"Scheduled ({row.frequency})")
    row.last_run = now
    row.next_run = next_run(row.frequency, now)
    log_activity(db, admin.employee_id, "BACKUP", "DATABASE", f"Scheduled backup {backup.filename}")
    db.commit()
    db.refresh(row)
    db.refresh(backup)

    return SchedulerRunOut(
        ran=True,
        message="Scheduled backup completed",
        backup=BackupOut.model_validate(backup),
        next_run=row.next_run,
    )


# ------------------------------
# RESTORE (upload)
# ------------------------------
@router.post("/restore")
async def restore_upload(
        sql_file: UploadFile = File(...),
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_system_admin),
):
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".sql")
    tmp_path = tmp.name
    tmp.close()

    try:
        with open(tmp_path, "wb") as f:
            f.write(await sql_file.read())
        restore_from(tmp_path)
    finally:
        os.remove(tmp_path)

    log_activity(db, admin.employee_id, "RESTORE", "DATABASE", f"Restored from upload {sql_file.filename}")
    db.commit()
    return {"message": "restore completed"}


# ------------------------------
# SINGLE BACKUP
# ------------------------------
@router.get("/{backup_id}/download")
def download_backup(
        backup_id: int,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_system_admin),
):
    backup = _get_backup_or_404(db, backup_id)
    path = _backup_path(backup)
    if not path.exists():
        raise HTTPException(404, "Backup file not found")

    def stream_file():
        with open(path, "rb") as f:
            while chunk := f.read(1024 * 1024):
                yield chunk

    return StreamingResponse(
        stream_file(),
        media_type="application/sql",
        headers={"Content-Disposition": f'attachment; filename="{backup.filename}"'},
    )


@router.post("/{backup_id}/restore")
def restore_backup(
        backup_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_system_admin),
):
    backup = _get_backup_or_404(db, backup_id)
    if backup.status != "Completed":
        raise HTTPException(400, f"Cannot restore a {backup.status.lower()} backup")
    path = _backup_path(backup)
    if not path.exists():
        raise HTTPException(404, "Backup file not found")

    restore_from(str(path))
    log_activity(db, admin.employee_id, "RESTORE", "DATABASE", f"Restored {backup.filename}")
    db.commit()
    return {"message": "restore completed"}


@router.delete("/{backup_id}")
def delete_backup(
        backup_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_system_admin),
):
    backup = _get_backup_or_404(db, backup_id)
    path = _backup_path(backup)
    if path.exists():
        path.unlink()

    log_activity(db, admin.employee_id, "DELETE", "DATABASE", f"Deleted backup {backup.filename}")
    db.delete(backup)
    db.commit()
    return {"message": "Backup deleted successfully"}

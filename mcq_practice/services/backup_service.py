"""
Full-dataset backups.

A backup is a JSON snapshot of users, topics, questions, sessions and
session answers written to ``settings.BACKUP_DIR``, plus a ``BackupFile``
row describing it. Restoring replaces every one of those tables with the
snapshot's contents inside a single transaction.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, List, Optional

from sqlalchemy import DateTime, text
from sqlalchemy.orm import Session

from mcq_practice.core.config import settings
from mcq_practice.core.exceptions import NotFoundError, ValidationError
from mcq_practice.models.backup import BackupFile
from mcq_practice.models.password_reset import PasswordResetToken
from mcq_practice.models.practice_session import PracticeSession, SessionQuestion
from mcq_practice.models.question import Question
from mcq_practice.models.topic import Topic
from mcq_practice.models.user import User

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

# Parent tables first; restore inserts in this order and deletes in reverse
SNAPSHOT_MODELS = (User, Topic, Question, PracticeSession, SessionQuestion)


def _backup_dir() -> Path:
    path = Path(settings.BACKUP_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _row_to_dict(obj) -> dict:
    return {c.key: _serialize(getattr(obj, c.key)) for c in obj.__table__.columns}


def _dict_to_row(model, data: dict) -> dict:
    row = {}
    for column in model.__table__.columns:
        if column.key not in data:
            continue
        value = data[column.key]
        if isinstance(column.type, DateTime) and isinstance(value, str):
            value = datetime.fromisoformat(value)
        row[column.key] = value
    return row


def build_snapshot(db: Session) -> dict:
    tables = {}
    for model in SNAPSHOT_MODELS:
        rows = db.query(model).order_by(model.id.asc()).all()
        tables[model.__tablename__] = [_row_to_dict(r) for r in rows]
    return {
        "version": SNAPSHOT_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "tables": tables,
    }


def _new_filename(is_automatic: bool, suffix: str = "") -> str:
    now = datetime.now(timezone.utc)
    kind = "auto" if is_automatic else "manual"
    return f"backup-{now:%Y%m%d-%H%M%S-%f}-{kind}{suffix}.json"


def create_backup(db: Session, *, is_automatic: bool = False) -> BackupFile:
    snapshot = build_snapshot(db)
    data = json.dumps(snapshot, indent=2).encode("utf-8")

    filename = _new_filename(is_automatic)
    (_backup_dir() / filename).write_bytes(data)

    record = BackupFile(
        filename=filename,
        size=len(data),
        is_automatic=is_automatic,
        status="success",
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    counts = {name: len(rows) for name, rows in snapshot["tables"].items()}
    logger.info(f"Backup {filename} created ({len(data)} bytes, {counts})")
    return record


def record_failed_backup(db: Session, *, is_automatic: bool, error: str) -> BackupFile:
    """Leave a trace of a failed run so it shows up in the backup list."""
    record = BackupFile(
        filename=_new_filename(is_automatic, suffix="-failed"),
        size=0,
        is_automatic=is_automatic,
        status="error",
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.error(f"Backup failed ({record.filename}): {error}")
    return record


def list_backups(db: Session) -> List[BackupFile]:
    return (
        db.query(BackupFile)
        .order_by(BackupFile.created_at.desc(), BackupFile.id.desc())
        .all()
    )


def get_backup(db: Session, backup_id: int) -> Optional[BackupFile]:
    return db.query(BackupFile).get(backup_id)


def read_backup_content(backup: BackupFile) -> dict:
    if backup.status != "success":
        raise ValidationError(f"Backup {backup.filename} did not complete and has no content")

    path = _backup_dir() / backup.filename
    if not path.exists():
        raise NotFoundError(f"Backup file {backup.filename} is missing on disk")
    try:
        content = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Backup file {backup.filename} is corrupt") from e

    if not isinstance(content, dict) or not isinstance(content.get("tables"), dict):
        raise ValidationError(f"Backup file {backup.filename} has an unknown format")
    return content


def _check_confirmation(backup: BackupFile, confirm_filename: str) -> None:
    if confirm_filename != backup.filename:
        raise ValidationError(
            "Please type the backup filename exactly to confirm this action"
        )


def _reset_sequences(db: Session) -> None:
    # Explicit ids leave PostgreSQL serial sequences behind
    if db.get_bind().dialect.name != "postgresql":
        return
    for model in SNAPSHOT_MODELS:
        table = model.__tablename__
        db.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
            )
        )
    db.commit()


def restore_backup(db: Session, *, backup: BackupFile, confirm_filename: str) -> dict:
    """
    Overwrite all current data with the backup's snapshot.

    Either the whole snapshot is loaded or nothing changes.
    """
    _check_confirmation(backup, confirm_filename)
    content = read_backup_content(backup)
    tables = content["tables"]

    restored = {}
    try:
        db.query(PasswordResetToken).delete(synchronize_session=False)
        for model in reversed(SNAPSHOT_MODELS):
            db.query(model).delete(synchronize_session=False)

        for model in SNAPSHOT_MODELS:
            rows = [_dict_to_row(model, r) for r in tables.get(model.__tablename__, [])]
            if rows:
                db.execute(model.__table__.insert(), rows)
            restored[model.__tablename__] = len(rows)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Restoring backup {backup.filename} failed, nothing was changed")
        raise

    _reset_sequences(db)
    db.expire_all()
    logger.warning(f"Database restored from backup {backup.filename}: {restored}")
    return restored


def delete_backup(db: Session, *, backup: BackupFile, confirm_filename: str) -> None:
    _check_confirmation(backup, confirm_filename)

    path = _backup_dir() / backup.filename
    if path.exists():
        path.unlink()
    db.delete(backup)
    db.commit()
    logger.info(f"Backup {backup.filename} deleted")


def next_backup_time(now: datetime | None = None) -> datetime:
    """Next daily run at BACKUP_HOUR:BACKUP_MINUTE UTC, strictly after ``now``."""
    now = now or datetime.now(timezone.utc)
    candidate = now.replace(
        hour=settings.BACKUP_HOUR,
        minute=settings.BACKUP_MINUTE,
        second=0,
        microsecond=0,
    )
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def last_successful_backup(db: Session) -> Optional[BackupFile]:
    return (
        db.query(BackupFile)
        .filter(BackupFile.status == "success")
        .order_by(BackupFile.created_at.desc(), BackupFile.id.desc())
        .first()
    )

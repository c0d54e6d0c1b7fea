# mcq_practice/api/v1/endpoints/backups.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mcq_practice.core.security import get_current_admin
from mcq_practice.db.session import get_db
from mcq_practice.models.backup import BackupFile
from mcq_practice.models.user import User
from mcq_practice.schemas.auth import MessageResponse
from mcq_practice.schemas.backup import (
    BackupConfirm,
    BackupContent,
    BackupList,
    BackupPublic,
    BackupSchedule,
    RestoreResult,
)
from mcq_practice.services import backup_service

router = APIRouter(prefix="/backups", tags=["backups"])


def _get_backup_or_404(db: Session, backup_id: int) -> BackupFile:
    backup = backup_service.get_backup(db, backup_id)
    if not backup:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Backup not found")
    return backup


@router.post("/create", response_model=BackupPublic, status_code=status.HTTP_201_CREATED)
def create_backup(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return backup_service.create_backup(db, is_automatic=False)


@router.get("/", response_model=BackupList)
def list_backups(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return BackupList(backups=backup_service.list_backups(db))


@router.get("/schedule", response_model=BackupSchedule)
def backup_schedule(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    last = backup_service.last_successful_backup(db)
    return BackupSchedule(
        last_backup=last.created_at if last else None,
        next_backup=backup_service.next_backup_time(),
    )


@router.get("/{backup_id}/content", response_model=BackupContent)
def backup_content(
    backup_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    backup = _get_backup_or_404(db, backup_id)
    return BackupContent(
        backup=BackupPublic.model_validate(backup),
        content=backup_service.read_backup_content(backup),
    )


@router.post("/{backup_id}/restore", response_model=RestoreResult)
def restore_backup(
    backup_id: int,
    payload: BackupConfirm,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Replace all users, topics, questions and sessions with the backup's
    contents. The filename must be typed back as confirmation.
    """
    backup = _get_backup_or_404(db, backup_id)
    filename = backup.filename
    restored = backup_service.restore_backup(
        db, backup=backup, confirm_filename=payload.confirm_filename
    )
    return RestoreResult(
        message=f"Database restored from {filename}",
        restored=restored,
    )


@router.delete("/{backup_id}", response_model=MessageResponse)
def delete_backup(
    backup_id: int,
    payload: BackupConfirm,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    backup = _get_backup_or_404(db, backup_id)
    filename = backup.filename
    backup_service.delete_backup(db, backup=backup, confirm_filename=payload.confirm_filename)
    return MessageResponse(message=f"Backup {filename} deleted")

# mcq_practice/schemas/backup.py
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class BackupPublic(BaseModel):
    id: int
    filename: str
    size: int
    is_automatic: bool
    status: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class BackupList(BaseModel):
    backups: list[BackupPublic]


class BackupContent(BaseModel):
    backup: BackupPublic
    content: dict[str, Any]


class BackupConfirm(BaseModel):
    """Destructive backup actions require the filename typed back."""

    confirm_filename: str


class BackupSchedule(BaseModel):
    last_backup: datetime | None = None
    next_backup: datetime


class RestoreResult(BaseModel):
    message: str
    restored: dict[str, int]

# mcq_practice/models/backup.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from mcq_practice.db.base import Base


class BackupFile(Base):
    __tablename__ = "backup_files"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), unique=True, nullable=False)
    size = Column(Integer, nullable=False, default=0)  # bytes
    is_automatic = Column(Boolean, nullable=False, default=False)

    # 'success' / 'error'
    status = Column(String(20), nullable=False, default="success")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

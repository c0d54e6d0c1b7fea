"""
Backup Tasks for Worker
Executed by RQ workers; the daily run is put on the rq scheduler by
``schedule_daily_backup()`` and reschedules itself after every run.
"""

import logging

from mcq_practice.db.session import SessionLocal
from mcq_practice.services import backup_service

logger = logging.getLogger(__name__)


def backup_task(is_automatic: bool = True) -> dict:
    """
    Worker task creating one full backup.

    A failure is logged and recorded as an ``error`` backup entry; it is
    never raised, so one bad night cannot take the worker down.

    Returns:
        Dictionary with the outcome
    """
    db = SessionLocal()
    try:
        logger.info(f"Starting {'scheduled' if is_automatic else 'manual'} backup")
        backup = backup_service.create_backup(db, is_automatic=is_automatic)
        return {
            "status": "success",
            "backup_id": backup.id,
            "filename": backup.filename,
            "size": backup.size,
        }

    except Exception as e:
        logger.error(f"Backup task failed: {e}", exc_info=True)
        db.rollback()
        try:
            backup_service.record_failed_backup(db, is_automatic=is_automatic, error=str(e))
        except Exception as record_error:
            logger.error(f"Could not record failed backup: {record_error}")
        return {
            "status": "error",
            "error": str(e),
            "message": "Backup failed",
        }

    finally:
        db.close()
        if is_automatic:
            _schedule_next_run()


def _schedule_next_run() -> None:
    from mcq_practice.workers.queue import schedule_daily_backup

    try:
        job_id = schedule_daily_backup()
        logger.info(f"Next automatic backup scheduled as {job_id}")
    except Exception as e:
        logger.error(f"Could not schedule the next automatic backup: {e}")

# mcq_practice/workers/queue.py
from datetime import datetime

from redis import Redis
from rq import Queue

from mcq_practice.core.config import settings

BACKUP_QUEUE_NAME = "backups"

_redis_conn: Redis | None = None


def get_redis_connection() -> Redis:
    global _redis_conn
    if _redis_conn is None:
        _redis_conn = Redis.from_url(settings.REDIS_URL)
    return _redis_conn


def get_queue(name: str = BACKUP_QUEUE_NAME) -> Queue:
    return Queue(name, connection=get_redis_connection())


def schedule_daily_backup(run_at: datetime | None = None) -> str:
    """
    Put the next automatic backup on the rq scheduler.

    The job id is derived from the run date, so scheduling the same day
    twice (API restarts, the job rescheduling itself) keeps a single job.
    """
    from mcq_practice.services.backup_service import next_backup_time
    from mcq_practice.workers.tasks import backup_task

    run_at = run_at or next_backup_time()
    q = get_queue(BACKUP_QUEUE_NAME)
    job = q.enqueue_at(
        run_at,
        backup_task,
        is_automatic=True,
        job_id=f"daily-backup-{run_at:%Y%m%d}",
    )
    return job.id

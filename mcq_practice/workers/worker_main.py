# mcq_practice/workers/worker_main.py
from rq import Queue, SimpleWorker

from mcq_practice.core.logging_config import setup_logging
from mcq_practice.workers.queue import BACKUP_QUEUE_NAME, get_redis_connection, schedule_daily_backup


QUEUE_NAMES = [BACKUP_QUEUE_NAME]


def main():
    setup_logging()
    redis_conn = get_redis_connection()

    queues = [Queue(name, connection=redis_conn) for name in QUEUE_NAMES]

    # make sure a chain of daily backups exists even if the API never scheduled one
    schedule_daily_backup()

    worker = SimpleWorker(queues, connection=redis_conn)

    worker.work(with_scheduler=True)


if __name__ == "__main__":
    main()

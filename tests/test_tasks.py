from datetime import datetime, timezone

import pytest

from mcq_practice.core.config import settings
from mcq_practice.models.backup import BackupFile
from mcq_practice.services import backup_service
from mcq_practice.workers import queue, tasks


@pytest.fixture
def task_env(session_factory, monkeypatch):
    """Point the task at the test database and record rescheduling."""
    scheduled = []
    monkeypatch.setattr(tasks, "SessionLocal", session_factory)
    monkeypatch.setattr(tasks, "_schedule_next_run", lambda: scheduled.append(True))
    return scheduled


class TestBackupTask:
    def test_automatic_backup(self, task_env, db_session, backup_dir):
        result = tasks.backup_task(is_automatic=True)

        assert result["status"] == "success"
        assert result["filename"].endswith("-auto.json")
        assert (backup_dir / result["filename"]).exists()
        assert task_env == [True]

        record = db_session.query(BackupFile).one()
        assert record.is_automatic is True

    def test_manual_run_does_not_reschedule(self, task_env):
        result = tasks.backup_task(is_automatic=False)
        assert result["status"] == "success"
        assert task_env == []

    def test_failure_is_recorded_not_raised(self, task_env, db_session, monkeypatch):
        def broken(db, *, is_automatic):
            raise OSError("disk full")

        monkeypatch.setattr(backup_service, "create_backup", broken)

        result = tasks.backup_task(is_automatic=True)

        assert result["status"] == "error"
        assert "disk full" in result["error"]
        record = db_session.query(BackupFile).one()
        assert record.status == "error"
        assert task_env == [True]


class TestNextBackupTime:
    def test_later_today(self, monkeypatch):
        monkeypatch.setattr(settings, "BACKUP_HOUR", 2)
        monkeypatch.setattr(settings, "BACKUP_MINUTE", 0)
        now = datetime(2024, 5, 1, 1, 30, tzinfo=timezone.utc)
        assert backup_service.next_backup_time(now) == datetime(2024, 5, 1, 2, 0, tzinfo=timezone.utc)

    def test_tomorrow_once_passed(self, monkeypatch):
        monkeypatch.setattr(settings, "BACKUP_HOUR", 2)
        monkeypatch.setattr(settings, "BACKUP_MINUTE", 0)
        now = datetime(2024, 5, 1, 2, 0, tzinfo=timezone.utc)
        assert backup_service.next_backup_time(now) == datetime(2024, 5, 2, 2, 0, tzinfo=timezone.utc)


class FakeQueue:
    def __init__(self):
        self.calls = []

    def enqueue_at(self, run_at, func, **kwargs):
        self.calls.append((run_at, func, kwargs))
        return type("Job", (), {"id": kwargs["job_id"]})()


class TestScheduleDailyBackup:
    def test_job_id_follows_run_date(self, monkeypatch):
        fake = FakeQueue()
        monkeypatch.setattr(queue, "get_queue", lambda name=queue.BACKUP_QUEUE_NAME: fake)
        run_at = datetime(2024, 5, 2, 2, 0, tzinfo=timezone.utc)

        job_id = queue.schedule_daily_backup(run_at)

        assert job_id == "daily-backup-20240502"
        assert fake.calls == [
            (run_at, tasks.backup_task, {"is_automatic": True, "job_id": "daily-backup-20240502"})
        ]

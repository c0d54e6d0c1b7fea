# mcq_practice/main.py
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from mcq_practice import models  # noqa
from mcq_practice.api.v1.endpoints import (
    auth,
    backups,
    health,
    questions,
    sessions,
    statistics,
    topics,
    users,
)
from mcq_practice.core.config import settings
from mcq_practice.core.exceptions import AppError
from mcq_practice.core.logging_config import setup_logging
from mcq_practice.db.init_db import init_db

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def on_startup():
    setup_logging()
    init_db()

    if settings.BACKUP_SCHEDULE_ENABLED:
        from mcq_practice.workers.queue import schedule_daily_backup

        try:
            job_id = schedule_daily_backup()
            logger.info(f"Daily backup scheduled as job {job_id}")
        except Exception as e:
            logger.warning(f"Could not schedule the daily backup (is Redis running?): {e}")


app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/v1")
app.include_router(topics.router, prefix="/api/v1")
app.include_router(questions.router, prefix="/api/v1")
app.include_router(sessions.router, prefix="/api/v1")
app.include_router(statistics.router, prefix="/api/v1")
app.include_router(backups.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1/health")

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

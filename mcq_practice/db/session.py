# mcq_practice/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mcq_practice.core.config import settings

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# SQLite connections are shared across FastAPI worker threads;
# the backup worker holds PostgreSQL connections across idle nights
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    pool_pre_ping=not _is_sqlite,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

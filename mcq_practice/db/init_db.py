# mcq_practice/db/init_db.py
from mcq_practice import models  # noqa
from mcq_practice.db.base import Base
from mcq_practice.db.session import SessionLocal, engine
from mcq_practice.services.user_service import ensure_default_admin


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()

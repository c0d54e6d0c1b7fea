import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="mcq-uploads-"))
os.environ.setdefault("BACKUP_SCHEDULE_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mcq_practice import models  # noqa
from mcq_practice.core.config import settings
from mcq_practice.core.security import get_password_hash
from mcq_practice.db.base import Base
from mcq_practice.db.session import get_db
from mcq_practice.main import app
from mcq_practice.models.question import Question
from mcq_practice.models.topic import Topic
from mcq_practice.models.user import ROLE_ADMIN, ROLE_STUDENT, User

ADMIN_PASSWORD = "admin-pass"
STUDENT_PASSWORD = "student-pass"


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite shared by the test session and the app."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def backup_dir(tmp_path, monkeypatch):
    path = tmp_path / "backups"
    monkeypatch.setattr(settings, "BACKUP_DIR", str(path))
    return path


@pytest.fixture
def override_db(session_factory):
    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    """Anonymous client. Startup hooks (seeding, scheduling) do not run."""
    return TestClient(app)


def make_user(db, *, username, password, role=ROLE_STUDENT, approved=True, active=True):
    user = User(
        username=username,
        full_name=username.title(),
        email=f"{username}@example.com",
        password_hash=get_password_hash(password),
        role=role,
        approved=approved,
        active=active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_topic(db, name="Biology", description=None):
    topic = Topic(name=name, description=description)
    db.add(topic)
    db.commit()
    db.refresh(topic)
    return topic


def make_question(db, *, topic=None, correct="A", text="Which one?", **kwargs):
    question = Question(
        text=text,
        topic_id=topic.id if topic is not None else None,
        option_a=kwargs.pop("option_a", "first"),
        option_b=kwargs.pop("option_b", "second"),
        option_c=kwargs.pop("option_c", "third"),
        option_d=kwargs.pop("option_d", "fourth"),
        correct_option=correct,
        **kwargs,
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


def login(client, username, password):
    response = client.post(
        "/api/v1/auth/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, username="admin", password=ADMIN_PASSWORD, role=ROLE_ADMIN)


@pytest.fixture
def student_user(db_session):
    return make_user(db_session, username="student", password=STUDENT_PASSWORD)


@pytest.fixture
def admin_client(override_db, admin_user):
    c = TestClient(app)
    login(c, admin_user.username, ADMIN_PASSWORD)
    return c


@pytest.fixture
def student_client(override_db, student_user):
    c = TestClient(app)
    login(c, student_user.username, STUDENT_PASSWORD)
    return c


@pytest.fixture
def topic(db_session):
    return make_topic(db_session)

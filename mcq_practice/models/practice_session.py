# mcq_practice/models/practice_session.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mcq_practice.db.base import Base


class PracticeSession(Base):
    """One completed quiz attempt. Rows are never edited after creation."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # NULL means a mixed-topic session
    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=True, index=True)

    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    score = Column(Float, nullable=False)  # 0-100, unrounded
    time_spent = Column(Integer, nullable=False, default=0)  # seconds

    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="sessions")
    topic = relationship("Topic")
    questions = relationship(
        "SessionQuestion",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionQuestion.id",
    )


class SessionQuestion(Base):
    __tablename__ = "session_questions"

    id = Column(Integer, primary_key=True, index=True)

    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False, index=True)

    selected_option = Column(String(1), nullable=True)
    is_correct = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0)  # seconds

    session = relationship("PracticeSession", back_populates="questions")
    question = relationship("Question")

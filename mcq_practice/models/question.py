# mcq_practice/models/question.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mcq_practice.db.base import Base

OPTION_LETTERS = ("A", "B", "C", "D")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)

    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=True, index=True)
    subtopic = Column(String(100), nullable=True)
    difficulty = Column(String(20), nullable=False, default="medium")
    image_path = Column(String(255), nullable=True)

    option_a = Column(Text, nullable=False)
    option_b = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)
    option_d = Column(Text, nullable=False)
    correct_option = Column(String(1), nullable=False)  # A / B / C / D
    explanation = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    topic = relationship("Topic", back_populates="questions")

    def option(self, letter: str) -> str | None:
        return getattr(self, f"option_{letter.lower()}", None)

# mcq_practice/schemas/session.py
from datetime import datetime

from pydantic import BaseModel, Field

from mcq_practice.schemas.question import OptionLetter, QuestionPublic


class SessionAnswerIn(BaseModel):
    question_id: int
    selected_option: OptionLetter | None = None
    time_spent: int = Field(default=0, ge=0)


class SessionCreate(BaseModel):
    """
    A whole attempt in one request: the session row and every
    per-question row are written in a single transaction.
    """

    topic_id: int | None = None
    answers: list[SessionAnswerIn] = Field(min_length=1)


class SessionQuestionPublic(BaseModel):
    id: int
    session_id: int
    question_id: int
    selected_option: str | None = None
    is_correct: bool
    time_spent: int

    model_config = {"from_attributes": True}


class SessionQuestionDetail(SessionQuestionPublic):
    question: QuestionPublic


class SessionPublic(BaseModel):
    id: int
    user_id: int
    topic_id: int | None = None
    topic_name: str | None = None
    total_questions: int
    correct_answers: int
    score: float
    time_spent: int
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class SessionDetail(SessionPublic):
    username: str | None = None
    full_name: str | None = None
    questions: list[SessionQuestionPublic] = []

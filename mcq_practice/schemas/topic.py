# mcq_practice/schemas/topic.py
from datetime import datetime

from pydantic import BaseModel, Field


class TopicBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class TopicCreate(TopicBase):
    pass


class TopicUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None


class TopicPublic(TopicBase):
    id: int
    question_count: int = 0
    created_at: datetime | None = None

    model_config = {"from_attributes": True}

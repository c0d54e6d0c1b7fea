# mcq_practice/schemas/question.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

OptionLetter = Literal["A", "B", "C", "D"]

# NOT NULL columns of Question
REQUIRED_FIELDS = (
    "text",
    "difficulty",
    "option_a",
    "option_b",
    "option_c",
    "option_d",
    "correct_option",
)


class QuestionBase(BaseModel):
    text: str = Field(min_length=1)
    topic_id: int | None = None
    subtopic: str | None = None
    difficulty: str = "medium"
    image_path: str | None = None
    option_a: str = Field(min_length=1)
    option_b: str = Field(min_length=1)
    option_c: str = Field(min_length=1)
    option_d: str = Field(min_length=1)
    correct_option: OptionLetter
    explanation: str | None = None


class QuestionCreate(QuestionBase):
    @model_validator(mode="after")
    def _correct_option_has_text(self):
        if not getattr(self, f"option_{self.correct_option.lower()}").strip():
            raise ValueError(f"Option {self.correct_option} is empty")
        return self


class QuestionUpdate(BaseModel):
    """Partial update; omitted fields are left alone."""

    text: str | None = Field(default=None, min_length=1)
    topic_id: int | None = None
    subtopic: str | None = None
    difficulty: str | None = None
    image_path: str | None = None
    option_a: str | None = Field(default=None, min_length=1)
    option_b: str | None = Field(default=None, min_length=1)
    option_c: str | None = Field(default=None, min_length=1)
    option_d: str | None = Field(default=None, min_length=1)
    correct_option: OptionLetter | None = None
    explanation: str | None = None

    @model_validator(mode="after")
    def _required_fields_not_null(self):
        cleared = [
            name for name in REQUIRED_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class QuestionPublic(QuestionBase):
    id: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class BulkQuestionIn(BaseModel):
    """One entry of a bulk import; the topic is given by name."""

    text: str
    topic: str
    subtopic: str | None = None
    difficulty: str = "medium"
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str
    explanation: str | None = None


class BulkQuestionsRequest(BaseModel):
    questions: list[BulkQuestionIn]


class BulkTextRequest(BaseModel):
    text: str


class BulkImportResult(BaseModel):
    message: str
    count: int


class ImageUploadResult(BaseModel):
    image_path: str

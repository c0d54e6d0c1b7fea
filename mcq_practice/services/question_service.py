# mcq_practice/services/question_service.py
import logging
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from mcq_practice.core.exceptions import ConflictError, NotFoundError, ValidationError
from mcq_practice.models.practice_session import SessionQuestion
from mcq_practice.models.question import OPTION_LETTERS, Question
from mcq_practice.schemas.question import QuestionCreate, QuestionUpdate
from mcq_practice.services import topic_service

logger = logging.getLogger(__name__)

# Upper bound accepted for "all questions in topic"
MAX_RANDOM_COUNT = 9999


def _check_topic(db: Session, topic_id: int | None) -> None:
    if topic_id is not None and topic_service.get_topic(db, topic_id) is None:
        raise NotFoundError(f"Topic {topic_id} not found")


def _check_required_text(question: Question) -> None:
    blank = [
        name for name in ("text", "option_a", "option_b", "option_c", "option_d")
        if not (getattr(question, name) or "").strip()
    ]
    if blank:
        raise ValidationError(f"Question fields cannot be empty: {', '.join(blank)}")


def _check_correct_option(question: Question) -> None:
    if question.correct_option not in OPTION_LETTERS:
        raise ValidationError("Correct option must be one of: A, B, C, D")
    if not (question.option(question.correct_option) or "").strip():
        raise ValidationError(
            f"Correct option {question.correct_option} refers to an empty option"
        )


def create_question(db: Session, *, obj_in: QuestionCreate) -> Question:
    _check_topic(db, obj_in.topic_id)
    db_obj = Question(**obj_in.model_dump())
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def get_question(db: Session, question_id: int) -> Optional[Question]:
    return db.query(Question).get(question_id)


def list_questions(
    db: Session,
    *,
    topic_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Question]:
    query = db.query(Question)
    if topic_id is not None:
        query = query.filter(Question.topic_id == topic_id)
    return (
        query.order_by(Question.created_at.desc(), Question.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def random_questions(
    db: Session,
    *,
    count: int,
    topic_id: int | None = None,
) -> List[Question]:
    """
    Random sample of up to ``count`` questions, optionally from one topic.
    Returns fewer when the bank is smaller; the caller decides if that is fatal.
    """
    query = db.query(Question)
    if topic_id is not None:
        query = query.filter(Question.topic_id == topic_id)
    return query.order_by(func.random()).limit(count).all()


def update_question(
    db: Session,
    *,
    db_obj: Question,
    obj_in: QuestionUpdate,
) -> Question:
    update_data = obj_in.model_dump(exclude_unset=True)
    if "topic_id" in update_data:
        _check_topic(db, update_data["topic_id"])

    for field, value in update_data.items():
        setattr(db_obj, field, value)

    try:
        _check_required_text(db_obj)
        _check_correct_option(db_obj)
    except ValidationError:
        db.rollback()
        raise

    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def delete_question(db: Session, *, db_obj: Question) -> None:
    answered = (
        db.query(SessionQuestion)
        .filter(SessionQuestion.question_id == db_obj.id)
        .count()
    )
    if answered:
        raise ConflictError(
            f"Cannot delete question {db_obj.id}: it appears in {answered} "
            f"recorded session answer(s)"
        )
    db.delete(db_obj)
    db.commit()


def bulk_create_questions(db: Session, items: Sequence) -> List[Question]:
    """
    Insert a batch of parsed questions in one transaction.

    Each item carries the topic by name; unknown topics are created.
    Nothing is de-duplicated, so importing the same batch twice
    stores every question twice.
    """
    incomplete = [
        item for item in items
        if not all(
            (getattr(item, name) or "").strip()
            for name in ("text", "topic", "option_a", "option_b", "option_c", "option_d")
        )
    ]
    if incomplete:
        raise ValidationError(f"{len(incomplete)} question(s) are missing required fields")

    bad_correct = [item for item in items if item.correct_option not in OPTION_LETTERS]
    if bad_correct:
        raise ValidationError(
            f"{len(bad_correct)} question(s) have incorrect 'CORRECT' values. "
            "Only A, B, C, or D are allowed."
        )

    created: List[Question] = []
    try:
        for item in items:
            topic = topic_service.get_or_create_topic(db, item.topic)
            question = Question(
                text=item.text.strip(),
                topic_id=topic.id,
                subtopic=item.subtopic,
                difficulty=item.difficulty or "medium",
                option_a=item.option_a,
                option_b=item.option_b,
                option_c=item.option_c,
                option_d=item.option_d,
                correct_option=item.correct_option,
                explanation=item.explanation,
            )
            db.add(question)
            created.append(question)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Bulk import stored {len(created)} questions")
    return created

# mcq_practice/services/topic_service.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from mcq_practice.core.exceptions import ConflictError
from mcq_practice.models.practice_session import PracticeSession
from mcq_practice.models.question import Question
from mcq_practice.models.topic import Topic
from mcq_practice.schemas.topic import TopicCreate, TopicUpdate

logger = logging.getLogger(__name__)


def get_topic(db: Session, topic_id: int) -> Optional[Topic]:
    return db.query(Topic).get(topic_id)


def get_topic_by_name(db: Session, name: str) -> Optional[Topic]:
    return (
        db.query(Topic)
        .filter(func.lower(Topic.name) == name.strip().lower())
        .first()
    )


def count_questions(db: Session, topic_id: int) -> int:
    return db.query(Question).filter(Question.topic_id == topic_id).count()


def list_topics_with_counts(db: Session) -> List[Tuple[Topic, int]]:
    rows = (
        db.query(Topic, func.count(Question.id))
        .outerjoin(Question, Question.topic_id == Topic.id)
        .group_by(Topic.id)
        .order_by(Topic.name.asc())
        .all()
    )
    return [(topic, count) for topic, count in rows]


def create_topic(db: Session, *, obj_in: TopicCreate) -> Topic:
    if get_topic_by_name(db, obj_in.name):
        raise ConflictError(f"Topic '{obj_in.name}' already exists")

    db_obj = Topic(name=obj_in.name.strip(), description=obj_in.description)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def get_or_create_topic(db: Session, name: str) -> Topic:
    """Used by bulk import; flushes but leaves the commit to the caller."""
    topic = get_topic_by_name(db, name)
    if topic is None:
        topic = Topic(name=name.strip())
        db.add(topic)
        db.flush()
        logger.info(f"Created topic '{topic.name}' during bulk import")
    return topic


def update_topic(db: Session, *, db_obj: Topic, obj_in: TopicUpdate) -> Topic:
    update_data = obj_in.model_dump(exclude_unset=True)
    new_name = update_data.get("name")
    if new_name:
        existing = get_topic_by_name(db, new_name)
        if existing is not None and existing.id != db_obj.id:
            raise ConflictError(f"Topic '{new_name}' already exists")
        update_data["name"] = new_name.strip()

    for field, value in update_data.items():
        setattr(db_obj, field, value)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def delete_topic(db: Session, *, db_obj: Topic) -> None:
    """
    Delete a topic that no question uses any more.

    Past sessions on the topic are kept and become mixed-topic sessions.
    """
    question_count = count_questions(db, db_obj.id)
    if question_count:
        raise ConflictError(
            f"Cannot delete topic '{db_obj.name}': it has {question_count} "
            f"associated question(s). Move or delete them first."
        )

    db.query(PracticeSession).filter(PracticeSession.topic_id == db_obj.id).update(
        {PracticeSession.topic_id: None}, synchronize_session=False
    )
    db.delete(db_obj)
    db.commit()
    logger.info(f"Deleted topic {db_obj.id} '{db_obj.name}'")

# mcq_practice/api/v1/endpoints/topics.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mcq_practice.core.security import get_current_admin, get_current_user
from mcq_practice.db.session import get_db
from mcq_practice.models.topic import Topic
from mcq_practice.models.user import User
from mcq_practice.schemas.topic import TopicCreate, TopicPublic, TopicUpdate
from mcq_practice.services import topic_service

router = APIRouter(prefix="/topics", tags=["topics"])


def _topic_to_public(topic: Topic, question_count: int) -> TopicPublic:
    return TopicPublic(
        id=topic.id,
        name=topic.name,
        description=topic.description,
        question_count=question_count,
        created_at=topic.created_at,
    )


def _get_topic_or_404(db: Session, topic_id: int) -> Topic:
    topic = topic_service.get_topic(db, topic_id)
    if not topic:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")
    return topic


@router.get("/", response_model=List[TopicPublic])
def list_topics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [
        _topic_to_public(topic, count)
        for topic, count in topic_service.list_topics_with_counts(db)
    ]


@router.get("/{topic_id}", response_model=TopicPublic)
def get_topic(
    topic_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    topic = _get_topic_or_404(db, topic_id)
    return _topic_to_public(topic, topic_service.count_questions(db, topic.id))


@router.post("/", response_model=TopicPublic, status_code=status.HTTP_201_CREATED)
def create_topic(
    obj_in: TopicCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    topic = topic_service.create_topic(db, obj_in=obj_in)
    return _topic_to_public(topic, 0)


@router.put("/{topic_id}", response_model=TopicPublic)
def update_topic(
    topic_id: int,
    obj_in: TopicUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    topic = _get_topic_or_404(db, topic_id)
    topic = topic_service.update_topic(db, db_obj=topic, obj_in=obj_in)
    return _topic_to_public(topic, topic_service.count_questions(db, topic.id))


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topic(
    topic_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    topic = _get_topic_or_404(db, topic_id)
    topic_service.delete_topic(db, db_obj=topic)
    return None

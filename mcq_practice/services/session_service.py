# mcq_practice/services/session_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from mcq_practice.core.exceptions import ConflictError, NotFoundError, ValidationError
from mcq_practice.models.practice_session import PracticeSession, SessionQuestion
from mcq_practice.models.question import Question
from mcq_practice.models.user import User
from mcq_practice.schemas.session import (
    SessionAnswerIn,
    SessionCreate,
    SessionDetail,
    SessionPublic,
    SessionQuestionPublic,
)
from mcq_practice.services import topic_service
from mcq_practice.services.scoring_service import score_session

logger = logging.getLogger(__name__)


def create_session(
    db: Session,
    *,
    user: User,
    obj_in: SessionCreate,
) -> PracticeSession:
    """
    Record a completed attempt: the session row and one row per presented
    question, committed together. Scores are recomputed here from the
    stored answer key rather than trusted from the client.
    """
    if obj_in.topic_id is not None and topic_service.get_topic(db, obj_in.topic_id) is None:
        raise NotFoundError(f"Topic {obj_in.topic_id} not found")

    ids = [a.question_id for a in obj_in.answers]
    if len(set(ids)) != len(ids):
        raise ValidationError("Each question may only appear once in a session")

    found = {q.id: q for q in db.query(Question).filter(Question.id.in_(ids)).all()}
    missing = [qid for qid in ids if qid not in found]
    if missing:
        raise ValidationError(f"Unknown question id(s): {', '.join(map(str, missing))}")

    questions = [found[qid] for qid in ids]
    result = score_session(
        questions,
        [a.selected_option for a in obj_in.answers],
        [a.time_spent for a in obj_in.answers],
    )

    session = PracticeSession(
        user_id=user.id,
        topic_id=obj_in.topic_id,
        total_questions=result.total_questions,
        correct_answers=result.correct_answers,
        score=result.score,
        time_spent=result.time_spent,
    )
    session.questions = [
        SessionQuestion(
            question_id=answer.question_id,
            selected_option=answer.selected_option,
            is_correct=correct,
            time_spent=answer.time_spent,
        )
        for answer, correct in zip(obj_in.answers, result.is_correct)
    ]

    try:
        db.add(session)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(session)

    logger.info(
        f"User {user.id} completed session {session.id}: "
        f"{result.correct_answers}/{result.total_questions} ({result.score:.1f}%)"
    )
    return session


def add_session_question(
    db: Session,
    *,
    session: PracticeSession,
    answer: SessionAnswerIn,
) -> SessionQuestion:
    """
    Append a single answer row to an existing session.

    Kept for clients that still post answers one by one; the session's
    aggregates are not touched and a session never holds more rows than
    its ``total_questions``.
    """
    if len(session.questions) >= session.total_questions:
        raise ConflictError(f"Session {session.id} already has all its questions recorded")
    if any(sq.question_id == answer.question_id for sq in session.questions):
        raise ConflictError(f"Question {answer.question_id} is already recorded for this session")

    question = db.query(Question).get(answer.question_id)
    if question is None:
        raise ValidationError(f"Unknown question id: {answer.question_id}")

    row = SessionQuestion(
        session_id=session.id,
        question_id=question.id,
        selected_option=answer.selected_option,
        is_correct=answer.selected_option is not None
        and answer.selected_option == question.correct_option,
        time_spent=answer.time_spent,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_session(db: Session, session_id: int) -> Optional[PracticeSession]:
    return db.query(PracticeSession).get(session_id)


def list_sessions_for_user(
    db: Session,
    *,
    user: User,
    skip: int = 0,
    limit: int = 100,
) -> List[PracticeSession]:
    """Newest first."""
    return (
        db.query(PracticeSession)
        .options(joinedload(PracticeSession.topic))
        .filter(PracticeSession.user_id == user.id)
        .order_by(PracticeSession.completed_at.desc(), PracticeSession.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_sessions(
    db: Session,
    *,
    user_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
) -> List[PracticeSession]:
    query = db.query(PracticeSession).options(joinedload(PracticeSession.topic))
    if user_id is not None:
        query = query.filter(PracticeSession.user_id == user_id)
    return (
        query.order_by(PracticeSession.completed_at.desc(), PracticeSession.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_session_questions(db: Session, *, session: PracticeSession) -> List[SessionQuestion]:
    return (
        db.query(SessionQuestion)
        .options(joinedload(SessionQuestion.question))
        .filter(SessionQuestion.session_id == session.id)
        .order_by(SessionQuestion.id.asc())
        .all()
    )


def session_to_public(session: PracticeSession) -> SessionPublic:
    return SessionPublic(
        id=session.id,
        user_id=session.user_id,
        topic_id=session.topic_id,
        topic_name=session.topic.name if session.topic else None,
        total_questions=session.total_questions,
        correct_answers=session.correct_answers,
        score=session.score,
        time_spent=session.time_spent,
        completed_at=session.completed_at,
    )


def session_to_detail(session: PracticeSession) -> SessionDetail:
    return SessionDetail(
        **session_to_public(session).model_dump(),
        username=session.user.username if session.user else None,
        full_name=session.user.full_name if session.user else None,
        questions=[SessionQuestionPublic.model_validate(sq) for sq in session.questions],
    )

# mcq_practice/api/v1/endpoints/sessions.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mcq_practice.core.security import get_current_admin, get_current_user
from mcq_practice.db.session import get_db
from mcq_practice.models.practice_session import PracticeSession
from mcq_practice.models.user import User
from mcq_practice.schemas.session import (
    SessionAnswerIn,
    SessionCreate,
    SessionDetail,
    SessionPublic,
    SessionQuestionDetail,
    SessionQuestionPublic,
)
from mcq_practice.services import session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_visible_session(db: Session, session_id: int, user: User) -> PracticeSession:
    """Students only see their own sessions; admins see all of them."""
    session = session_service.get_session(db, session_id)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    if session.user_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view this session",
        )
    return session


@router.post("/", response_model=SessionPublic, status_code=status.HTTP_201_CREATED)
def create_session(
    obj_in: SessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Record a finished attempt with all of its answers.
    """
    session = session_service.create_session(db, user=current_user, obj_in=obj_in)
    return session_service.session_to_public(session)


@router.post(
    "/{session_id}/questions",
    response_model=SessionQuestionPublic,
    status_code=status.HTTP_201_CREATED,
)
def add_session_question(
    session_id: int,
    answer: SessionAnswerIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    session = _get_visible_session(db, session_id, current_user)
    if session.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the session owner can record answers",
        )
    return session_service.add_session_question(db, session=session, answer=answer)


@router.get("/user", response_model=List[SessionPublic])
def list_my_sessions(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sessions = session_service.list_sessions_for_user(
        db, user=current_user, skip=skip, limit=limit
    )
    return [session_service.session_to_public(s) for s in sessions]


@router.get("/", response_model=List[SessionPublic])
def list_sessions(
    user_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    sessions = session_service.list_sessions(db, user_id=user_id, skip=skip, limit=limit)
    return [session_service.session_to_public(s) for s in sessions]


@router.get("/{session_id}", response_model=SessionDetail)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    session = _get_visible_session(db, session_id, current_user)
    return session_service.session_to_detail(session)


@router.get("/{session_id}/questions", response_model=List[SessionQuestionDetail])
def list_session_questions(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Per-question review: the full question (answer key and explanation
    included) alongside what was selected.
    """
    session = _get_visible_session(db, session_id, current_user)
    return session_service.list_session_questions(db, session=session)

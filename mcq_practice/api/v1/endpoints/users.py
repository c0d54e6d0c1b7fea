# mcq_practice/api/v1/endpoints/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mcq_practice.core.security import get_current_admin, get_current_user
from mcq_practice.db.session import get_db
from mcq_practice.models.user import User
from mcq_practice.schemas.auth import MessageResponse
from mcq_practice.schemas.user import (
    AdminPasswordReset,
    Role,
    UserCreate,
    UserPublic,
    UserUpdate,
)
from mcq_practice.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/me", response_model=UserPublic)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/", response_model=List[UserPublic])
def list_users(
    role: Role | None = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return user_service.list_users(db, role=role, skip=skip, limit=limit)


@router.get("/pending-approval", response_model=List[UserPublic])
def list_pending_approval(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return user_service.list_pending_users(db)


@router.post("/", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(
    obj_in: UserCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Admin adds a user directly; no approval step.
    """
    return user_service.create_user(db, obj_in=obj_in)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return _get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    obj_in: UserUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user_or_404(db, user_id)
    return user_service.update_user(db, db_obj=user, obj_in=obj_in)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user_or_404(db, user_id)
    user_service.delete_user(db, db_obj=user, acting_user=current_admin)
    return None


@router.post("/{user_id}/approve", response_model=UserPublic)
def approve_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user_or_404(db, user_id)
    return user_service.approve_user(db, db_obj=user)


@router.post("/{user_id}/reject", response_model=MessageResponse)
def reject_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user_or_404(db, user_id)
    user_service.reject_user(db, db_obj=user)
    return MessageResponse(message="The user has been removed from the system.")


@router.post("/{user_id}/toggle-active", response_model=UserPublic)
def toggle_active(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user_or_404(db, user_id)
    return user_service.toggle_active(db, db_obj=user, acting_user=current_admin)


@router.post("/{user_id}/reset-password", response_model=MessageResponse)
def reset_password(
    user_id: int,
    payload: AdminPasswordReset,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user_or_404(db, user_id)
    user_service.set_password(db, db_obj=user, password=payload.new_password)
    return MessageResponse(message=f"Password for {user.username} has been reset.")

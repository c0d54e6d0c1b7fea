# mcq_practice/services/user_service.py
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from mcq_practice.core.config import settings
from mcq_practice.core.exceptions import ConflictError, ValidationError
from mcq_practice.core.security import get_password_hash
from mcq_practice.models.password_reset import PasswordResetToken
from mcq_practice.models.user import ROLE_ADMIN, User
from mcq_practice.schemas.auth import RegisterRequest
from mcq_practice.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _ensure_unique(db: Session, *, username: str | None, email: str | None, exclude_id: int | None = None) -> None:
    if username:
        existing = db.query(User).filter(User.username == username).first()
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("Username already exists")
    if email:
        existing = db.query(User).filter(User.email == email).first()
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("Email already registered")


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).get(user_id)


def register_user(db: Session, *, obj_in: RegisterRequest) -> User:
    """
    Self-registration. The account stays unapproved and inactive until
    an admin approves it.
    """
    _ensure_unique(db, username=obj_in.username, email=obj_in.email)
    user = User(
        username=obj_in.username,
        full_name=obj_in.full_name,
        email=obj_in.email,
        password_hash=get_password_hash(obj_in.password),
        role="student",
        approved=False,
        active=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.username} registered, pending approval")
    return user


def create_user(db: Session, *, obj_in: UserCreate) -> User:
    """Admin-created accounts are usable straight away."""
    _ensure_unique(db, username=obj_in.username, email=obj_in.email)
    user = User(
        username=obj_in.username,
        full_name=obj_in.full_name,
        email=obj_in.email,
        password_hash=get_password_hash(obj_in.password),
        role=obj_in.role,
        approved=True,
        active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(
    db: Session,
    *,
    role: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> List[User]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_pending_users(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.approved.is_(False))
        .order_by(User.created_at.asc(), User.id.asc())
        .all()
    )


def approve_user(db: Session, *, db_obj: User) -> User:
    db_obj.approved = True
    db_obj.active = True
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    logger.info(f"User {db_obj.username} approved")
    return db_obj


def reject_user(db: Session, *, db_obj: User) -> None:
    """Rejecting a registration removes the pending account."""
    if db_obj.approved:
        raise ConflictError("Only users pending approval can be rejected")
    username = db_obj.username
    delete_user(db, db_obj=db_obj)
    logger.info(f"Registration of {username} rejected")


def toggle_active(db: Session, *, db_obj: User, acting_user: User) -> User:
    if db_obj.id == acting_user.id:
        raise ConflictError("You cannot deactivate your own account")
    db_obj.active = not db_obj.active
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def update_user(db: Session, *, db_obj: User, obj_in: UserUpdate) -> User:
    update_data = obj_in.model_dump(exclude_unset=True)
    _ensure_unique(
        db,
        username=update_data.get("username"),
        email=update_data.get("email"),
        exclude_id=db_obj.id,
    )
    for field, value in update_data.items():
        setattr(db_obj, field, value)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def delete_user(db: Session, *, db_obj: User, acting_user: User | None = None) -> None:
    """Removes the user together with their sessions and reset tokens."""
    if acting_user is not None and db_obj.id == acting_user.id:
        raise ConflictError("You cannot delete your own account")
    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == db_obj.id).delete(
        synchronize_session=False
    )
    db.delete(db_obj)
    db.commit()


def set_password(db: Session, *, db_obj: User, password: str) -> User:
    db_obj.password_hash = get_password_hash(password)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def create_password_reset_token(db: Session, *, email: str) -> Optional[str]:
    """
    Returns the new token, or None when no account has this e-mail.
    The caller must not reveal which of the two happened.
    """
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        return None

    token = secrets.token_urlsafe(32)
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
    )
    db.commit()
    logger.debug(f"Password reset token issued for user {user.id}: {token}")
    return token


def reset_password_with_token(db: Session, *, token: str, password: str) -> User:
    record = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.token == token)
        .first()
    )
    if (
        record is None
        or record.used
        or _as_utc(record.expires_at) < datetime.now(timezone.utc)
    ):
        raise ValidationError("Invalid or expired reset token")

    user = get_user(db, record.user_id)
    if user is None:
        raise ValidationError("Invalid or expired reset token")

    record.used = True
    db.add(record)
    return set_password(db, db_obj=user, password=password)


def ensure_default_admin(db: Session) -> Optional[User]:
    """Seed an admin account on an empty installation."""
    if db.query(User).filter(User.role == ROLE_ADMIN).first() is not None:
        return None

    admin = User(
        username=settings.DEFAULT_ADMIN_USERNAME,
        full_name="Administrator",
        email=settings.DEFAULT_ADMIN_EMAIL,
        password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        role=ROLE_ADMIN,
        approved=True,
        active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Created default administrator '{admin.username}'")
    return admin

# mcq_practice/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, Request, Response
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from mcq_practice.core.config import settings
from mcq_practice.core.exceptions import AuthError, PermissionDeniedError
from mcq_practice.db.session import get_db
from mcq_practice.models.user import User
from mcq_practice.schemas.auth import TokenPayload

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Swagger's "Authorize" button; browsers use the session cookie instead
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """Look the user up by username (or e-mail) and check the password."""
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        user = db.query(User).filter(User.email == username).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def ensure_can_sign_in(user: User) -> None:
    if not user.approved:
        raise PermissionDeniedError("Your account is pending approval by an administrator")
    if not user.active:
        raise PermissionDeniedError("Your account has been deactivated")


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_session_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)


def decode_token(token: str) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return TokenPayload(**payload)
    except (JWTError, PydanticValidationError) as e:
        raise AuthError("Could not validate credentials") from e


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    bearer_token: str | None = Depends(oauth2_scheme),
) -> User:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME) or bearer_token
    if not token:
        raise AuthError()

    payload = decode_token(token)
    try:
        user_id = int(payload.sub)
    except ValueError as e:
        raise AuthError("Could not validate credentials") from e

    user = db.query(User).get(user_id)
    if user is None:
        raise AuthError("User no longer exists")
    ensure_can_sign_in(user)
    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return current_user

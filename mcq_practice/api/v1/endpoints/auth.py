# mcq_practice/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from mcq_practice.core.config import settings
from mcq_practice.core.security import (
    authenticate_user,
    clear_session_cookie,
    create_session_token,
    ensure_can_sign_in,
    set_session_cookie,
)
from mcq_practice.db.session import get_db
from mcq_practice.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    Token,
)
from mcq_practice.schemas.user import UserPublic
from mcq_practice.services import user_service

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = user_service.register_user(db, obj_in=payload)
    return RegisterResponse(
        message="Registration successful. Your account is pending approval by an administrator.",
        user=UserPublic.model_validate(user),
    )


# JSON login used by the web client; the session lives in an HttpOnly cookie
@router.post("/login", response_model=UserPublic)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    user = authenticate_user(db, payload.username, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )
    ensure_can_sign_in(user)

    set_session_cookie(response, create_session_token(user))
    return user


# OAuth2 form login for the "Authorize" button in the API docs
@router.post("/token", response_model=Token)
def login_for_access_token_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    ensure_can_sign_in(user)
    return Token(access_token=create_session_token(user))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_session_cookie(response)
    return MessageResponse(message="Logged out")


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    token = user_service.create_password_reset_token(db, email=payload.email)
    return ForgotPasswordResponse(
        message="If an account with that email exists, you'll receive reset instructions.",
        reset_token=token if settings.DEBUG else None,
    )


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user_service.reset_password_with_token(db, token=payload.token, password=payload.password)
    return MessageResponse(message="Your password has been reset successfully.")

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timedelta
import logging
import secrets

from app.database import get_db
from app.models.users import User
from app.schemas.user import (
    ForgotPassword,
    PasswordReset,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from app.core.auth import get_current_user
from app.core.hashing import hash_password, verify_password
from app.core.jwt import PASSWORD_RESET, create_access_token, create_password_reset_token, decode_token
from app.core.rate_limiter import limiter
from app.core.config import settings
from app.core.email import EmailDeliveryError, send_password_reset_email

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger("app.auth")

COMMON_PASSWORDS = {
    "password",
    "password123",
    "12345678",
    "qwerty123",
    "admin123",
    "welcome123",
    "letmein123",
}


def _reject_weak_password(password: str) -> None:
    if password.lower() in COMMON_PASSWORDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password is too common. Please choose a stronger password.",
        )

    if password.isdigit():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password cannot be numbers only.",
        )


def _invalid_reset_link() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid or expired reset token",
    )


# ---------------- SIGNUP ----------------
@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
def signup(request: Request, user_data: UserCreate, db: Session = Depends(get_db)):
    _reject_weak_password(user_data.password)

    if db.query(User.id).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")

    # The very first account owns the installation; everyone after starts as a plain user
    is_first_account = db.query(User.id).first() is None

    user = User(
        email=user_data.email,
        full_name=user_data.full_name,
        password_hash=hash_password(user_data.password),
        role="owner" if is_first_account else "user",
    )

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to create account")

    logger.info(f"Account created for {user.email} with role {user.role}")
    return user


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == form_data.username).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.info(f"Failed login for {form_data.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if user.role == "blocked":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Your account has been blocked")

    # Role is returned for UI gating only; the server re-reads it on every request
    return TokenResponse(
        access_token=create_access_token(data={"sub": str(user.id), "role": user.role}),
        role=user.role,
    )


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# ---------------- LOGOUT ----------------
@router.post("/logout")
def logout():
    # Tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}


# ---------------- FORGOT PASSWORD ----------------
@router.post("/forgot-password")
@limiter.limit("3/minute")
def forgot_password(request: Request, body: ForgotPassword, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()

    if user and user.role != "blocked":
        nonce = secrets.token_urlsafe(16)

        user.reset_token_hash = hash_password(nonce)
        user.reset_token_expires_at = datetime.utcnow() + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        db.commit()

        token = create_password_reset_token(user.id, nonce)
        try:
            send_password_reset_email(user.email, f"{settings.FRONTEND_RESET_URL}?token={token}")
        except (EmailDeliveryError, OSError) as exc:
            logger.error(f"Password reset email to {user.email} failed: {exc}")

    # Same answer whether or not the account exists
    return {"message": "If the email exists, a reset link has been sent."}


# ---------------- RESET PASSWORD ----------------
@router.post("/reset-password")
def reset_password(reset_data: PasswordReset, db: Session = Depends(get_db)):
    payload = decode_token(reset_data.token, PASSWORD_RESET)
    if payload is None or not str(payload.get("sub", "")).isdigit():
        raise _invalid_reset_link()

    user = db.get(User, int(payload["sub"]))

    # One link per request: the stored nonce hash is cleared on use
    if (
        user is None
        or user.reset_token_expires_at is None
        or user.reset_token_expires_at < datetime.utcnow()
        or not verify_password(payload.get("nonce", ""), user.reset_token_hash)
    ):
        raise _invalid_reset_link()

    _reject_weak_password(reset_data.new_password)

    user.password_hash = hash_password(reset_data.new_password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.commit()

    logger.info(f"Password reset for {user.email}")
    return {"message": "Password reset successful. Please login."}

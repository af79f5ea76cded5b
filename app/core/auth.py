# app/core/auth.py

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.users import User
from app.core.jwt import decode_access_token

# Bearer tokens are issued by POST /auth/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise _unauthorized("Invalid token payload")

    user = db.get(User, int(subject))
    if user is None:
        raise _unauthorized("User not found")

    # The role claim in the token is informational; the stored role decides
    if user.role == "blocked":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been blocked",
        )

    return user


def require_role(*roles: str):
    """Dependency allowing only accounts whose stored role is one of ``roles``."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin privileges required",
            )
        return current_user

    return dependency


# Customer and product writes, user management
get_admin_user = require_role("owner", "admin")

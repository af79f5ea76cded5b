from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from app.core.config import settings

ACCESS = "access"
PASSWORD_RESET = "password_reset"


def _encode(claims: dict, token_type: str, expires_in: timedelta) -> str:
    to_encode = claims.copy()
    to_encode.update({
        "exp": datetime.now(timezone.utc) + expires_in,
        "type": token_type,
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    return _encode(
        data,
        ACCESS,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_password_reset_token(user_id: int, nonce: str) -> str:
    """Signed link token; ``nonce`` must still match the hash stored on the account."""
    return _encode(
        {"sub": str(user_id), "nonce": nonce},
        PASSWORD_RESET,
        timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
    )


def decode_token(token: str, expected_type: str):
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    # A reset link is never a session and a session never resets a password
    if payload.get("type") != expected_type:
        return None

    return payload


def decode_access_token(token: str):
    return decode_token(token, ACCESS)

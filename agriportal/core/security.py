from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from agriportal.core.config import settings

TokenType = Literal["access", "refresh"]

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Access token lifetimes (minutes) chosen by the "remember me" checkbox
REMEMBER_ME_ACCESS_MINUTES = 60 * 24
SESSION_ACCESS_MINUTES = 60 * 8
REMEMBER_ME_REFRESH_DAYS = 30


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def _encode(user_id: int, token_type: TokenType, lifetime: timedelta) -> str:
    issued = datetime.now(timezone.utc)
    claims = {"sub": str(user_id), "type": token_type, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode(user_id, "access", timedelta(minutes=minutes))


def create_refresh_token(user_id: int, expires_days: int | None = None) -> str:
    days = expires_days or settings.REFRESH_TOKEN_EXPIRE_DAYS
    return _encode(user_id, "refresh", timedelta(days=days))


def decode_token(token: str) -> Optional[dict[str, Any]]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def user_id_from_token(token: str, token_type: TokenType = "access") -> Optional[int]:
    """Return the user id carried by a token of the given type, or None"""
    payload = decode_token(token)
    if not payload or payload.get("type") != token_type:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None


def create_token_pair(user_id: int, remember_me: bool = False) -> dict[str, Any]:
    access_minutes = REMEMBER_ME_ACCESS_MINUTES if remember_me else SESSION_ACCESS_MINUTES
    refresh_days = REMEMBER_ME_REFRESH_DAYS if remember_me else settings.REFRESH_TOKEN_EXPIRE_DAYS
    return {
        "access_token": create_access_token(user_id, access_minutes),
        "refresh_token": create_refresh_token(user_id, refresh_days),
        "expires_in": access_minutes * 60,
        "token_type": "bearer",
    }

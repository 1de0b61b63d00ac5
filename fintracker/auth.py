# fintracker/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from .config import Settings
from .errors import ApiError

BEARER_PREFIX = "bearer "

_contexts = {}


def _pwd_context(rounds: int) -> CryptContext:
    # one context per work factor
    ctx = _contexts.get(rounds)
    if ctx is None:
        ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        _contexts[rounds] = ctx
    return ctx


def hash_password(password: str, rounds: int = 10) -> str:
    return _pwd_context(rounds).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _pwd_context(10).verify(password, password_hash)
    except (ValueError, TypeError):
        # unrecognised or corrupt hash in the row
        return False


def create_access_token(user_id: int, settings: Settings, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """Return the ``userId`` claim of a valid token, or raise ``ApiError(401)``."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise ApiError(401, "Token expired")
    except jwt.InvalidTokenError:
        raise ApiError(401, "Invalid token")

    user_id = claims.get("userId")
    if not isinstance(user_id, int):
        raise ApiError(401, "Invalid token")
    return user_id


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None

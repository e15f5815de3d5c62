from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from ..config import Settings

# bcrypt truncates at 72 bytes; longer inputs are rejected instead.
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password is required")

    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > _BCRYPT_MAX_BYTES:
        raise ValueError("Password must be 72 bytes or less")

    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > _BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def create_access_token(
    *,
    subject: int,
    role: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(subject), "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> dict:
    """
    Verify signature and expiry and return the claims.
    Raises jose.JWTError (ExpiredSignatureError included) on any failure.
    """
    claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    if not isinstance(claims, dict):
        raise JWTError("Unexpected token payload")
    return claims

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_session_token(
    subject: str | int,
    username: str,
    is_admin: bool,
    expires_delta_seconds: int | None = None,
) -> str:
    """
    Create the signed token stored in the session cookie.
    """
    if expires_delta_seconds is None:
        expires_delta_seconds = settings.session_max_age_seconds

    expire = datetime.now(timezone.utc) + timedelta(seconds=expires_delta_seconds)
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "username": username,
        "is_admin": is_admin,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a session token.
    Raises ValueError with descriptive message if token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise ValueError("Session has expired. Please log in again.") from None
    except JWTError as exc:
        raise ValueError("Invalid session token") from exc
    return payload

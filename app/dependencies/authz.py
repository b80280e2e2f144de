# app/dependencies/authz.py
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import decode_token
from app.models.user import User

settings = get_settings()
logger = logging.getLogger("app.auth")

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the signed-in user from the session cookie, or a bearer token header.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise _unauthorized(str(exc)) from None

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise _unauthorized("Invalid session payload")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user or not user.is_active:
        raise _unauthorized("User not found")

    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency for administrator-only override operations.
    """
    if not current_user.is_admin:
        logger.warning("User id=%s denied an administrator-only operation", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required.",
        )
    return current_user

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import create_session_token, get_password_hash, verify_password
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger("app.auth")


class AuthenticationError(Exception):
    pass


class UsernameTakenError(ValueError):
    pass


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def register_user(db: Session, data: RegisterRequest, *, is_admin: bool = False) -> User:
    """
    Create a user account. Raises UsernameTakenError if the username exists.
    """
    if get_user_by_username(db, data.username):
        logger.info("Registration rejected: username '%s' already exists", data.username)
        raise UsernameTakenError("Username already exists")

    user = User(
        username=data.username,
        hashed_password=get_password_hash(data.password),
        is_admin=is_admin,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration of the same username
        db.rollback()
        raise UsernameTakenError("Username already exists") from None
    db.refresh(user)
    logger.info("Registered user id=%s username='%s'", user.id, user.username)
    return user


def authenticate_user(db: Session, login_data: LoginRequest) -> User:
    user = get_user_by_username(db, login_data.username)
    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("Failed login for username '%s'", login_data.username)
        raise AuthenticationError("Invalid username or password")

    if not user.is_active:
        logger.warning("Login attempt for inactive user id=%s", user.id)
        raise AuthenticationError("Account is disabled")

    logger.info("User id=%s logged in", user.id)
    return user


def issue_session_token(user: User) -> str:
    return create_session_token(
        subject=user.id,
        username=user.username,
        is_admin=user.is_admin,
    )

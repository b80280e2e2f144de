from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.dependencies.authz import get_current_user
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, UserResponse
from app.services.auth_service import (
    AuthenticationError,
    UsernameTakenError,
    authenticate_user,
    issue_session_token,
    register_user,
)

router = APIRouter()

settings = get_settings()


def _open_session(response: Response, user: User) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=issue_session_token(user),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED, tags=["auth"])
def register(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> User:
    """
    Create an account and sign it in.
    """
    try:
        user = register_user(db, payload)
    except UsernameTakenError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    _open_session(response, user)
    return user


@router.post("/login", response_model=UserResponse, tags=["auth"])
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> User:
    try:
        user = authenticate_user(db, payload)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    _open_session(response, user)
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, tags=["auth"])
def logout() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session_cookie_name, httponly=True, samesite="lax")
    return response


@router.get("/user", response_model=UserResponse, tags=["auth"])
def read_current_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Return the current authenticated user.
    """
    return current_user

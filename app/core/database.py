from typing import Callable, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings

settings = get_settings()


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """
    SQLite ships with foreign key enforcement switched off; turn it on for
    every pooled connection so patient/doctor references are checked.
    """

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_engine_kwargs: dict = {"future": True, "pool_pre_ping": True}
if settings.database_url.startswith("sqlite"):
    # SQLite connections are shared with the threadpool FastAPI runs sync routes in
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

# Main SQLAlchemy engine
engine = create_engine(str(settings.database_url), **_engine_kwargs)

if settings.database_url.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a DB session for the duration of a request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    """
    FastAPI dependency returning the session factory.

    Background jobs run after the response has been sent, when the request
    session is already closed, so they open their own session from this factory.
    """
    return SessionLocal

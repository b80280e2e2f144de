# app/models/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Alembic autogenerate and the test suite both read `Base.metadata`,
    so every model module must be imported through `app.models`.
    """

    pass

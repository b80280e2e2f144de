import os

# Settings are cached on first import; pin a throwaway environment before the app loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("REDIS_URL", None)

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import enable_sqlite_foreign_keys, get_db, get_session_factory  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Appointment, Base, Doctor, Patient, User  # noqa: E402
from app.services.cache_service import ResourceCache, get_resource_cache  # noqa: E402

TEST_PASSWORD = "correct-horse-42"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def app_client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_resource_cache] = lambda: ResourceCache(None)
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


def _create_user(db, username: str, *, is_admin: bool = False) -> User:
    user = User(username=username, hashed_password=get_password_hash(TEST_PASSWORD), is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _login(client: TestClient, username: str) -> TestClient:
    response = client.post("/api/login", json={"username": username, "password": TEST_PASSWORD})
    assert response.status_code == 200, response.text
    return client


@pytest.fixture()
def anonymous_client(app_client):
    return TestClient(app_client)


@pytest.fixture()
def client(app_client, db):
    _create_user(db, "frontdesk")
    return _login(TestClient(app_client), "frontdesk")


@pytest.fixture()
def admin_client(app_client, db):
    _create_user(db, "admin", is_admin=True)
    return _login(TestClient(app_client), "admin")


@pytest.fixture()
def make_patient(db):
    def _make(name: str = "Jane Doe", **fields) -> Patient:
        patient = Patient(name=name, **fields)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    return _make


@pytest.fixture()
def make_doctor(db):
    def _make(name: str = "Gregory House", **fields) -> Doctor:
        doctor = Doctor(name=name, **fields)
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    return _make


@pytest.fixture()
def make_appointment(db):
    def _make(patient: Patient, doctor: Doctor | None = None, scheduled_at: datetime | None = None, **fields):
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id if doctor else None,
            scheduled_at=scheduled_at or datetime(2030, 1, 7, 10, 0, tzinfo=timezone.utc),
            **fields,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make

"""Shared fixtures: in-memory database, seeded users and signed bearer tokens."""

import os
import time
from datetime import datetime, timezone

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from clinic_api.config import AUTH_JWT_ALGORITHM, AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET  # noqa: E402
from clinic_api.database import Base, get_db  # noqa: E402
from clinic_api.main import app  # noqa: E402
from clinic_api.models import Appointment, User  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DOCTOR_1 = "doctor-1"
DOCTOR_2 = "doctor-2"
MANAGER = "manager-1"
MODERATOR = "moderator-1"
ADMIN = "admin-1"
PATIENT_1 = "patient-1"
PATIENT_2 = "patient-2"
PLAIN_USER = "user-1"
NURSE = "nurse-1"  # role the scheduling core does not know


def utc(value: str) -> datetime:
    """'2024-01-01T10:00' -> aware UTC datetime"""
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def make_token(user_id: str, expires_in: int = 3600, **claims) -> str:
    payload = {"sub": user_id, "aud": AUTH_JWT_AUDIENCE, "exp": int(time.time()) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, AUTH_JWT_SECRET, algorithm=AUTH_JWT_ALGORITHM)


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def users(db):
    rows = [
        User(id=DOCTOR_1, email="house@clinic.test", display_name="Dr. House", role="doctor", staff_id=1),
        User(id=DOCTOR_2, email="wilson@clinic.test", username="wilson", role="doctor", staff_id=2),
        User(id=MANAGER, email="manager@clinic.test", display_name="Cuddy", role="manager"),
        User(id=MODERATOR, email="moderator@clinic.test", role="moderator"),
        User(id=ADMIN, email="admin@clinic.test", role="admin"),
        User(id=PATIENT_1, email="p1@mail.test", display_name="Ann Patient", role="patient", phone_number="+15550001"),
        User(id=PATIENT_2, email="p2@mail.test", username="bob", role="patient"),
        User(id=PLAIN_USER, email="u1@mail.test", role="user"),
        User(id=NURSE, email="nurse@clinic.test", role="nurse"),
    ]
    db.add_all(rows)
    db.commit()
    return {u.id: u for u in rows}


@pytest.fixture
def make_appointment(db, users):
    def _make(
        starts_at: str,
        ends_at: str,
        doctor_id: str = DOCTOR_1,
        patient_id: str = PATIENT_1,
        status: str = "start",
        created_by: str = MANAGER,
        title: str = None,
    ) -> Appointment:
        appointment = Appointment(
            created_by=created_by,
            doctor_id=doctor_id,
            patient_id=patient_id,
            starts_at=utc(starts_at),
            ends_at=utc(ends_at),
            status=status,
            title=title,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def client(db, users):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

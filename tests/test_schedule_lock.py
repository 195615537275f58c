"""Per-doctor schedule lock on a file-backed SQLite database shared by two sessions."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic_api.database import Base
from clinic_api.domain.scheduling.errors import Conflict, StorageUnavailable
from clinic_api.domain.scheduling.repository import AppointmentRepository
from clinic_api.domain.scheduling.roles import Actor, Role
from clinic_api.domain.scheduling.schemas import AppointmentCreate
from clinic_api.domain.scheduling.service import AppointmentService
from clinic_api.models import Appointment, User
from tests.conftest import DOCTOR_1, MANAGER, PATIENT_1, PATIENT_2, utc

manager = Actor(id=MANAGER, role=Role.MANAGER)


@pytest.fixture
def sessions(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'clinic.db'}",
        connect_args={"check_same_thread": False, "timeout": 0.2},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    with Session() as seed:
        seed.add_all(
            [
                User(id=DOCTOR_1, email="house@clinic.test", role="doctor"),
                User(id=MANAGER, email="manager@clinic.test", role="manager"),
                User(id=PATIENT_1, email="p1@mail.test", role="patient"),
                User(id=PATIENT_2, email="p2@mail.test", role="patient"),
            ]
        )
        seed.commit()

    first, second = Session(), Session()
    try:
        yield first, second
    finally:
        first.close()
        second.close()
        engine.dispose()


def _booking(patient_id: str) -> AppointmentCreate:
    return AppointmentCreate(
        doctorId=DOCTOR_1,
        patientId=patient_id,
        startsAt="2024-01-01T10:00:00Z",
        endsAt="2024-01-01T10:30:00Z",
    )


def _active_rows(session) -> int:
    session.expire_all()
    return (
        session.query(Appointment)
        .filter(Appointment.doctor_id == DOCTOR_1, Appointment.status == "start")
        .count()
    )


def test_second_writer_waits_while_schedule_is_checked(sessions) -> None:
    first, second = sessions

    AppointmentService(first)._ensure_free(DOCTOR_1, utc("2024-01-01T10:00"), utc("2024-01-01T10:30"))

    # The first session still holds the lock, so the competing booking cannot slip in
    with pytest.raises(StorageUnavailable):
        AppointmentService(second).create_appointment(_booking(PATIENT_2), manager)

    AppointmentRepository.create_appointment(
        first,
        created_by=MANAGER,
        doctor_id=DOCTOR_1,
        patient_id=PATIENT_1,
        starts_at=utc("2024-01-01T10:00"),
        ends_at=utc("2024-01-01T10:30"),
        status="start",
    )

    assert _active_rows(second) == 1


def test_competing_booking_conflicts_once_first_commits(sessions) -> None:
    first, second = sessions

    AppointmentService(first).create_appointment(_booking(PATIENT_1), manager)

    with pytest.raises(Conflict):
        AppointmentService(second).create_appointment(_booking(PATIENT_2), manager)

    assert _active_rows(first) == 1


def test_rejected_booking_releases_the_lock(sessions) -> None:
    first, second = sessions
    AppointmentService(first).create_appointment(_booking(PATIENT_1), manager)

    with pytest.raises(Conflict):
        AppointmentService(second).create_appointment(_booking(PATIENT_2), manager)

    # The rejected session no longer blocks other writers
    later = AppointmentService(first).create_appointment(
        AppointmentCreate(
            doctorId=DOCTOR_1,
            patientId=PATIENT_2,
            startsAt="2024-01-01T11:00:00Z",
        ),
        manager,
    )
    assert later.id
    assert _active_rows(second) == 2

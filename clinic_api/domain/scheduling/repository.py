"""Appointment repository - Database operations for appointments"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, User
from .errors import StorageUnavailable
from .roles import ACTIVE_STATUSES

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(db: Session, action: str) -> Iterator[None]:
    """Roll back and surface any database failure as StorageUnavailable"""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"❌ Storage failure while {action}: {type(e).__name__}: {e}")
        try:
            db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error(f"❌ Rollback failed after storage failure: {rollback_error}")
        raise StorageUnavailable(f"Storage unavailable while {action}") from e


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: str) -> Optional[Appointment]:
        """Get an appointment with doctor and patient rows joined in"""
        with storage_errors(db, "loading appointment"):
            return (
                db.query(Appointment)
                .options(joinedload(Appointment.doctor), joinedload(Appointment.patient))
                .filter(Appointment.id == appointment_id)
                .first()
            )

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        with storage_errors(db, "loading user"):
            return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def search_appointments(
        db: Session,
        doctor_id: Optional[str] = None,
        patient_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """Filter appointments; date bounds apply to starts_at and are inclusive"""
        query = db.query(Appointment).options(
            joinedload(Appointment.doctor), joinedload(Appointment.patient)
        )

        if doctor_id:
            query = query.filter(Appointment.doctor_id == doctor_id)

        if patient_id:
            query = query.filter(Appointment.patient_id == patient_id)

        if start_date:
            query = query.filter(Appointment.starts_at >= start_date)

        if end_date:
            query = query.filter(Appointment.starts_at <= end_date)

        if status:
            query = query.filter(Appointment.status == status)

        with storage_errors(db, "listing appointments"):
            return query.order_by(Appointment.starts_at.asc(), Appointment.id.asc()).all()

    @staticmethod
    def find_overlapping(
        db: Session,
        doctor_id: str,
        starts_at: datetime,
        ends_at: datetime,
        exclude_id: Optional[str] = None,
    ) -> Optional[Appointment]:
        """
        First active appointment of the doctor overlapping [starts_at, ends_at).

        Half-open intervals overlap iff existing.start < ends_at and starts_at < existing.end,
        which covers containment in either direction and partial overlap on either side.
        """
        query = db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.status.in_([s.value for s in ACTIVE_STATUSES]),
            Appointment.starts_at < ends_at,
            Appointment.ends_at > starts_at,
        )

        if exclude_id:
            query = query.filter(Appointment.id != exclude_id)

        with storage_errors(db, "checking for conflicts"):
            return query.order_by(Appointment.starts_at.asc()).first()

    @staticmethod
    def lock_doctor_schedule(db: Session, doctor_id: str) -> None:
        """
        Serialize conflict check and write for one doctor until the transaction ends.

        PostgreSQL takes a transaction-scoped advisory lock keyed on the doctor.
        SQLite has a single writer lock, so the transaction is opened with
        BEGIN IMMEDIATE and other writers wait (or time out) until it ends.
        """
        dialect = db.get_bind().dialect.name
        with storage_errors(db, "locking doctor schedule"):
            if dialect == "postgresql":
                db.execute(select(func.pg_advisory_xact_lock(func.hashtext(doctor_id))))
            elif dialect == "sqlite":
                connection = db.connection()
                if not connection.connection.dbapi_connection.in_transaction:
                    connection.exec_driver_sql("BEGIN IMMEDIATE")

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        """Insert an appointment and commit"""
        with storage_errors(db, "creating appointment"):
            appointment = Appointment(**appointment_data)
            db.add(appointment)
            db.commit()
            db.refresh(appointment)
            return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Apply exactly the given fields (None clears a column) and commit"""
        with storage_errors(db, "updating appointment"):
            for key, value in updates.items():
                setattr(appointment, key, value)
            db.commit()
            db.refresh(appointment)
            return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        with storage_errors(db, "deleting appointment"):
            db.delete(appointment)
            db.commit()

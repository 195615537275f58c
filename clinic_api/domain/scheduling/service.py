"""Appointment service - Business logic for scheduling operations"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...models import Appointment
from ...shared.validators import ensure_utc, parse_timestamp
from .conflicts import ConflictDetector
from .errors import Conflict, Forbidden, InvalidTime, MissingField, NotFound, SchedulingError
from .permissions import (
    can_create_appointment,
    can_delete_appointment,
    can_edit_appointment,
    can_reassign_doctor,
    can_view_appointments,
    can_view_appointments_as_patient,
)
from .repository import AppointmentRepository
from .roles import Actor, AppointmentStatus, Role, is_active_status, is_elevated, is_patient
from .schemas import NULLABLE_COLUMNS, UPDATE_COLUMNS, AppointmentCreate, AppointmentFilters, AppointmentUpdate
from .time_validator import calculate_end_time, validate_appointment_time

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Appointment time overlaps an existing appointment"
FIELD_NAMES = {column: field for field, column in UPDATE_COLUMNS.items()}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class AppointmentService:
    """
    Service layer for appointment scheduling.

    Every operation checks in a fixed order and stops at the first failure:
    field presence, permission, time validity, conflicts, then the write.
    """

    def __init__(self, db: Session, detector: Optional[ConflictDetector] = None):
        self.db = db
        self.repo = AppointmentRepository()
        self.detector = detector or ConflictDetector(db)

    def get_appointment(self, appointment_id: str, actor: Actor) -> Appointment:
        """Get a single appointment the actor is allowed to see"""
        appointment = self._get_existing(appointment_id)

        allowed = (
            can_view_appointments(actor.role, appointment.doctor_id, actor.id)
            or can_view_appointments_as_patient(actor.role, appointment.patient_id, actor.id)
            or (actor.role == Role.DOCTOR and appointment.created_by == actor.id)
        )
        if not allowed:
            raise Forbidden("Not allowed to view this appointment")
        return appointment

    def list_appointments(self, actor: Actor, filters: AppointmentFilters) -> list[Appointment]:
        """List appointments in the scope the actor's role allows, ordered by start time"""
        patient_id = filters.patient_id

        if actor.role == Role.DOCTOR:
            doctor_id = actor.id
        elif is_patient(actor.role):
            if patient_id and patient_id != actor.id:
                return []
            doctor_id = None
            patient_id = actor.id
        elif is_elevated(actor.role):
            doctor_id = filters.doctor_id
        else:
            raise Forbidden("Access denied")

        try:
            start_date = parse_timestamp(filters.start_date) if filters.start_date else None
            end_date = parse_timestamp(filters.end_date) if filters.end_date else None
        except ValueError as e:
            raise InvalidTime("bad format") from e

        return self.repo.search_appointments(
            self.db,
            doctor_id=doctor_id,
            patient_id=patient_id,
            start_date=start_date,
            end_date=end_date,
            status=filters.status.value if filters.status else None,
        )

    def create_appointment(self, data: AppointmentCreate, actor: Actor) -> Appointment:
        """Create an appointment; the end defaults to a standard slot after the start"""
        missing = [
            name
            for name in ("doctorId", "patientId", "startsAt")
            if _is_blank(getattr(data, name))
        ]
        if missing:
            raise MissingField(f"Missing required fields: {', '.join(missing)}")

        if not can_create_appointment(actor.role, data.doctorId, actor.id):
            logger.warning(
                f"⚠️ {actor.role} {actor.id} may not create appointments for doctor {data.doctorId}"
            )
            raise Forbidden("Not allowed to create appointments for this doctor")

        ends_at = calculate_end_time(data.startsAt) if _is_blank(data.endsAt) else data.endsAt
        starts_at, ends_at = validate_appointment_time(data.startsAt, ends_at)

        try:
            self._ensure_free(data.doctorId, starts_at, ends_at)
            self._require_user(data.doctorId, "Doctor")
            self._require_user(data.patientId, "Patient")
        except SchedulingError:
            # Release the schedule lock taken by _ensure_free
            self.db.rollback()
            raise

        appointment = self.repo.create_appointment(
            self.db,
            created_by=actor.id,
            doctor_id=data.doctorId,
            patient_id=data.patientId,
            starts_at=starts_at,
            ends_at=ends_at,
            status=(data.status or AppointmentStatus.START).value,
            notes=data.notes or None,
            title=data.title or None,
            label=data.label or None,
        )
        logger.info(
            f"✅ Appointment {appointment.id} created by {actor.id} for doctor {appointment.doctor_id}"
        )
        return appointment

    def update_appointment(
        self, appointment_id: str, data: AppointmentUpdate, actor: Actor
    ) -> Appointment:
        """Apply a partial update; only fields present in the request change"""
        existing = self._get_existing(appointment_id)

        if not can_edit_appointment(actor.role, existing, actor.id):
            raise Forbidden("Not allowed to edit this appointment")

        patch = data.to_patch()

        doctor_changed = "doctor_id" in patch and patch["doctor_id"] != existing.doctor_id
        if doctor_changed and not can_reassign_doctor(actor.role):
            logger.warning(f"⚠️ {actor.role} {actor.id} tried to reassign appointment {existing.id}")
            raise Forbidden("Only managers can move an appointment to another doctor")

        for column, value in patch.items():
            if value is None and column not in NULLABLE_COLUMNS:
                raise MissingField(f"{FIELD_NAMES[column]} cannot be null")

        starts_at = ensure_utc(existing.starts_at)
        ends_at = ensure_utc(existing.ends_at)
        times_changed = "starts_at" in patch or "ends_at" in patch
        if times_changed:
            starts_at, ends_at = validate_appointment_time(
                patch.get("starts_at", starts_at), patch.get("ends_at", ends_at)
            )
            if "starts_at" in patch:
                patch["starts_at"] = starts_at
            if "ends_at" in patch:
                patch["ends_at"] = ends_at

        # Moving a cancelled/completed appointment back to an active status claims its slot again
        reactivated = (
            "status" in patch
            and is_active_status(patch["status"])
            and not is_active_status(existing.status)
        )

        try:
            if times_changed or doctor_changed or reactivated:
                self._ensure_free(
                    patch.get("doctor_id", existing.doctor_id), starts_at, ends_at, exclude_id=existing.id
                )

            if doctor_changed:
                self._require_user(patch["doctor_id"], "Doctor")
            if "patient_id" in patch and patch["patient_id"] != existing.patient_id:
                self._require_user(patch["patient_id"], "Patient")
        except SchedulingError:
            self.db.rollback()
            raise

        appointment = self.repo.update_appointment(self.db, existing, **patch)
        logger.info(f"✅ Appointment {appointment.id} updated by {actor.id}: {sorted(patch)}")
        return appointment

    def delete_appointment(self, appointment_id: str, actor: Actor) -> dict:
        """Hard-delete an appointment"""
        existing = self._get_existing(appointment_id)

        if not can_delete_appointment(actor.role, existing, actor.id):
            raise Forbidden("Not allowed to delete this appointment")

        self.repo.delete_appointment(self.db, existing)
        logger.info(f"🗑️ Appointment {appointment_id} deleted by {actor.id}")
        return {"success": True}

    def _get_existing(self, appointment_id: str) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def _require_user(self, user_id: str, label: str) -> None:
        if not self.repo.get_user_by_id(self.db, user_id):
            raise NotFound(f"{label} not found")

    def _ensure_free(
        self,
        doctor_id: str,
        starts_at: datetime,
        ends_at: datetime,
        exclude_id: Optional[str] = None,
    ) -> None:
        """
        Raise Conflict if the doctor is already booked in the window.

        The doctor's schedule stays locked until the surrounding transaction commits,
        so the check and the following write are atomic on PostgreSQL.
        """
        self.repo.lock_doctor_schedule(self.db, doctor_id)
        conflict = self.detector.find_conflict(doctor_id, starts_at, ends_at, exclude_id=exclude_id)
        if conflict:
            raise Conflict(CONFLICT_MESSAGE, conflicting_appointment=conflict)

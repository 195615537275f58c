"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import ensure_utc
from .roles import AppointmentStatus

UNNAMED = "Unnamed"


class AppointmentCreate(BaseModel):
    """
    Schema for creating an appointment.

    Required fields are declared optional here so that their absence is reported
    by the service as a missing field rather than a schema error.
    """

    doctorId: Optional[str] = None
    patientId: Optional[str] = None
    startsAt: Optional[Any] = None
    endsAt: Optional[Any] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    title: Optional[str] = None
    label: Optional[str] = None


# Request field -> column, for partial updates
UPDATE_COLUMNS = {
    "doctorId": "doctor_id",
    "patientId": "patient_id",
    "startsAt": "starts_at",
    "endsAt": "ends_at",
    "status": "status",
    "notes": "notes",
    "title": "title",
    "label": "label",
}
NULLABLE_COLUMNS = frozenset({"notes", "title", "label"})


class AppointmentUpdate(BaseModel):
    """
    Schema for a partial update.

    A field left out of the request body is untouched; a field sent as null is
    cleared (only allowed for notes, title and label).
    """

    doctorId: Optional[str] = None
    patientId: Optional[str] = None
    startsAt: Optional[Any] = None
    endsAt: Optional[Any] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    title: Optional[str] = None
    label: Optional[str] = None

    def to_patch(self) -> dict[str, Any]:
        """Only the fields present in the request, keyed by column name"""
        patch = {}
        for field in self.model_fields_set:
            value = getattr(self, field)
            if isinstance(value, AppointmentStatus):
                value = value.value
            patch[UPDATE_COLUMNS[field]] = value
        return patch


class AppointmentFilters(BaseModel):
    """Query-string filters for listing appointments"""

    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[AppointmentStatus] = None

    @field_validator("doctor_id", "patient_id", "start_date", "end_date", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DoctorSummary(BaseModel):
    id: str
    name: str
    staffId: Optional[int] = None
    staffName: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> "DoctorSummary":
        return cls(
            id=user.id,
            name=user.display_name or user.username or user.email or UNNAMED,
            staffId=user.staff_id,
            staffName=user.staff_name,
        )


class PatientSummary(BaseModel):
    id: str
    fullName: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> "PatientSummary":
        return cls(
            id=user.id,
            fullName=user.display_name or user.username or UNNAMED,
            email=user.email,
            phone=user.phone_number or None,
        )


class AppointmentResponse(BaseModel):
    """Schema for appointment response, with doctor and patient display data joined in"""

    id: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    createdBy: str
    doctorId: str
    patientId: str
    startsAt: datetime
    endsAt: datetime
    status: AppointmentStatus
    notes: Optional[str] = None
    title: Optional[str] = None
    label: Optional[str] = None
    doctor: Optional[DoctorSummary] = None
    patient: Optional[PatientSummary] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            createdAt=ensure_utc(appointment.created_at),
            updatedAt=ensure_utc(appointment.updated_at),
            createdBy=appointment.created_by,
            doctorId=appointment.doctor_id,
            patientId=appointment.patient_id,
            startsAt=ensure_utc(appointment.starts_at),
            endsAt=ensure_utc(appointment.ends_at),
            status=appointment.status,
            notes=appointment.notes,
            title=appointment.title,
            label=appointment.label,
            doctor=DoctorSummary.from_user(appointment.doctor) if appointment.doctor else None,
            patient=PatientSummary.from_user(appointment.patient) if appointment.patient else None,
        )


class ConflictingAppointment(BaseModel):
    """The existing appointment a rejected request collided with"""

    id: str
    startsAt: datetime
    endsAt: datetime
    status: AppointmentStatus
    title: Optional[str] = None

    @classmethod
    def from_model(cls, appointment) -> "ConflictingAppointment":
        return cls(
            id=appointment.id,
            startsAt=ensure_utc(appointment.starts_at),
            endsAt=ensure_utc(appointment.ends_at),
            status=appointment.status,
            title=appointment.title,
        )


class AppointmentEnvelope(BaseModel):
    appointment: AppointmentResponse


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]


class DeleteResponse(BaseModel):
    success: bool = True

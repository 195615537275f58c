import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base


def generate_id():
    """Generate an opaque identifier for users and appointments"""
    return str(uuid.uuid4())


def utc_now():
    return datetime.now(timezone.utc)


class User(Base):
    """Identity record mirrored from the auth provider; role drives scheduling permissions"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=True)
    display_name = Column(String(255), nullable=True)
    username = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    role = Column(String(20), nullable=True, index=True)  # doctor, manager, moderator, admin, patient, user
    staff_id = Column(Integer, nullable=True)  # Clinic staff number (doctors only)
    staff_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    doctor_appointments = relationship(
        "Appointment", foreign_keys="Appointment.doctor_id", back_populates="doctor"
    )
    patient_appointments = relationship(
        "Appointment", foreign_keys="Appointment.patient_id", back_populates="patient"
    )


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_doctor_starts", "doctor_id", "starts_at"),
        Index("ix_appointments_patient_starts", "patient_id", "starts_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    doctor_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    patient_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False)  # UTC
    ends_at = Column(DateTime(timezone=True), nullable=False)  # UTC, exclusive
    status = Column(String(20), nullable=False, default="start")
    notes = Column(Text, nullable=True)
    title = Column(String(255), nullable=True)
    label = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    doctor = relationship("User", foreign_keys=[doctor_id], back_populates="doctor_appointments")
    patient = relationship(
        "User", foreign_keys=[patient_id], back_populates="patient_appointments"
    )

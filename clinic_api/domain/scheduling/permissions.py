"""
Appointment permission rules.

Pure decisions over (role, ownership, actor id). No I/O. A missing or unknown
role denies everything.
"""

from typing import Optional, Protocol, Union

from .roles import Role, is_elevated, is_patient

RoleLike = Union[Role, str, None]


class OwnedAppointment(Protocol):
    doctor_id: str
    created_by: str


def can_view_appointments(role: RoleLike, doctor_id: Optional[str], current_user_id: str) -> bool:
    """Doctor-scoped view: a doctor sees only their own calendar"""
    role = Role.parse(role)
    if role is None:
        return False
    if is_elevated(role):
        return True
    if role == Role.DOCTOR:
        return doctor_id == current_user_id
    # Patients go through can_view_appointments_as_patient
    return False


def can_view_appointments_as_patient(
    role: RoleLike, patient_id: Optional[str], current_user_id: str
) -> bool:
    """Patient-scoped view: patients and plain users see only their own appointments"""
    role = Role.parse(role)
    if role is None:
        return False
    if is_patient(role):
        return patient_id == current_user_id
    return False


def can_create_appointment(role: RoleLike, doctor_id: Optional[str], current_user_id: str) -> bool:
    role = Role.parse(role)
    if role is None:
        return False
    if role == Role.DOCTOR:
        return doctor_id == current_user_id
    return is_elevated(role)


def _owns(appointment: OwnedAppointment, current_user_id: str) -> bool:
    return appointment.doctor_id == current_user_id or appointment.created_by == current_user_id


def can_edit_appointment(role: RoleLike, appointment: OwnedAppointment, current_user_id: str) -> bool:
    role = Role.parse(role)
    if role is None:
        return False
    if role == Role.DOCTOR:
        return _owns(appointment, current_user_id)
    return is_elevated(role)


def can_delete_appointment(
    role: RoleLike, appointment: OwnedAppointment, current_user_id: str
) -> bool:
    # Same ownership rule as editing
    return can_edit_appointment(role, appointment, current_user_id)


def can_reassign_doctor(role: RoleLike) -> bool:
    """Moving an appointment to another doctor is reserved to elevated roles"""
    return is_elevated(role)

"""Roles, appointment statuses and the requesting actor"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Role(str, Enum):
    DOCTOR = "doctor"
    MANAGER = "manager"
    MODERATOR = "moderator"
    ADMIN = "admin"
    PATIENT = "patient"
    USER = "user"

    @classmethod
    def parse(cls, value: Union["Role", str, None]) -> Optional["Role"]:
        """Map a stored role string to a Role; unknown or empty values become None"""
        if value is None or isinstance(value, Role):
            return value
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            return None


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    START = "start"
    PAUSE = "pause"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULE = "reschedule"


ELEVATED_ROLES = frozenset({Role.MANAGER, Role.MODERATOR, Role.ADMIN})
PATIENT_ROLES = frozenset({Role.PATIENT, Role.USER})

# Only these statuses block a doctor's time
ACTIVE_STATUSES = frozenset({AppointmentStatus.BOOKED, AppointmentStatus.START, AppointmentStatus.PAUSE})


def is_elevated(role: Union[Role, str, None]) -> bool:
    """Manager, moderator and admin see and edit every doctor's calendar"""
    return Role.parse(role) in ELEVATED_ROLES


def is_patient(role: Union[Role, str, None]) -> bool:
    return Role.parse(role) in PATIENT_ROLES


def is_active_status(status: Union[AppointmentStatus, str, None]) -> bool:
    if status is None:
        return False
    try:
        return AppointmentStatus(status) in ACTIVE_STATUSES
    except ValueError:
        # Unknown stored status: holds no slot
        return False


@dataclass(frozen=True)
class Actor:
    """Authenticated requester, resolved once per request"""

    id: str
    role: Optional[Role] = None

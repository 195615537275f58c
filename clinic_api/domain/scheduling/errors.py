"""
Scheduling error kinds.

Every check in the scheduling core fails fast with one of these. The HTTP layer
renders them through a single exception handler using ``status_code`` and ``code``.
"""

from typing import Any, Optional

from .schemas import ConflictingAppointment


class SchedulingError(Exception):
    status_code = 500
    code = "scheduling_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class Unauthenticated(SchedulingError):
    status_code = 401
    code = "unauthenticated"


class NotFound(SchedulingError):
    status_code = 404
    code = "not_found"


class Forbidden(SchedulingError):
    status_code = 403
    code = "forbidden"


class MissingField(SchedulingError):
    status_code = 400
    code = "missing_field"


class InvalidTime(SchedulingError):
    status_code = 400
    code = "invalid_time"


class Conflict(SchedulingError):
    """An active appointment for the same doctor overlaps the requested window"""

    status_code = 409
    code = "conflict"

    def __init__(self, message: str, conflicting_appointment: Optional[Any] = None):
        super().__init__(message)
        # Snapshot now; the ORM row may be expired by the time the error is rendered
        self.conflicting_appointment: Optional[ConflictingAppointment] = (
            ConflictingAppointment.from_model(conflicting_appointment)
            if conflicting_appointment is not None
            else None
        )

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.conflicting_appointment is not None:
            body["conflictingAppointment"] = self.conflicting_appointment.model_dump(mode="json")
        return body


class StorageUnavailable(SchedulingError):
    """The persistence layer failed or timed out; never to be read as success or "no conflict" """

    status_code = 500
    code = "storage_unavailable"

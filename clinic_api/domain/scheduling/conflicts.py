"""Double-booking detection for a doctor's calendar"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...config import CONFLICT_CHECK_FAIL_OPEN
from ...models import Appointment
from .errors import StorageUnavailable
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)


class ConflictDetector:
    """
    Finds an active appointment that would overlap a candidate window.

    Only appointments in the active statuses (booked, start, pause) count. When
    several overlap, the earliest by start time is reported; with the no-overlap
    invariant intact there is at most one.

    A storage failure is raised as StorageUnavailable. Setting ``fail_open``
    (CONFLICT_CHECK_FAIL_OPEN) lets the write proceed instead; that path is logged
    every time it is taken.
    """

    def __init__(self, db: Session, fail_open: Optional[bool] = None):
        self.db = db
        self.repo = AppointmentRepository()
        self.fail_open = CONFLICT_CHECK_FAIL_OPEN if fail_open is None else fail_open

    def find_conflict(
        self,
        doctor_id: str,
        starts_at: datetime,
        ends_at: datetime,
        exclude_id: Optional[str] = None,
    ) -> Optional[Appointment]:
        try:
            conflict = self.repo.find_overlapping(
                self.db, doctor_id, starts_at, ends_at, exclude_id=exclude_id
            )
        except StorageUnavailable:
            if not self.fail_open:
                raise
            logger.warning(
                f"⚠️ Conflict check failed for doctor {doctor_id} "
                f"[{starts_at.isoformat()}, {ends_at.isoformat()}); "
                "CONFLICT_CHECK_FAIL_OPEN is set, allowing the write without a conflict check"
            )
            return None

        if conflict:
            logger.info(
                f"📅 Doctor {doctor_id} already booked: appointment {conflict.id} overlaps "
                f"[{starts_at.isoformat()}, {ends_at.isoformat()})"
            )
        return conflict

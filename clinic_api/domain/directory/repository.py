"""Directory repository - user lookups by role"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import User
from ..scheduling.repository import storage_errors
from ..scheduling.roles import PATIENT_ROLES, Role


class DirectoryRepository:
    """Repository for doctor/patient listings"""

    @staticmethod
    def get_doctors(db: Session) -> list[User]:
        """All doctors ordered by display name"""
        with storage_errors(db, "listing doctors"):
            return (
                db.query(User)
                .filter(User.role == Role.DOCTOR.value)
                .order_by(func.coalesce(User.display_name, User.username, User.email).asc())
                .all()
            )

    @staticmethod
    def get_patients(db: Session, exclude_id: Optional[str] = None) -> list[User]:
        """Patients and plain users, newest first"""
        query = db.query(User).filter(User.role.in_([r.value for r in PATIENT_ROLES]))

        if exclude_id:
            query = query.filter(User.id != exclude_id)

        with storage_errors(db, "listing patients"):
            return query.order_by(User.created_at.desc()).all()

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        with storage_errors(db, "loading user"):
            return db.query(User).filter(User.id == user_id).first()

"""Directory service - who can be picked when booking"""

import logging

from sqlalchemy.orm import Session

from ...models import User
from ..scheduling.errors import Forbidden
from ..scheduling.roles import Actor, Role, is_elevated
from .repository import DirectoryRepository

logger = logging.getLogger(__name__)


class DirectoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = DirectoryRepository()

    def _require_staff(self, actor: Actor) -> None:
        if actor.role != Role.DOCTOR and not is_elevated(actor.role):
            logger.warning(f"⚠️ Directory access denied for {actor.id} ({actor.role})")
            raise Forbidden("Access denied. Staff role required.")

    def get_doctors(self, actor: Actor) -> list[User]:
        """All doctors; a requesting doctor is always part of the list"""
        self._require_staff(actor)
        doctors = self.repo.get_doctors(self.db)

        if actor.role == Role.DOCTOR and all(d.id != actor.id for d in doctors):
            current = self.repo.get_user_by_id(self.db, actor.id)
            if current:
                doctors.insert(0, current)

        return doctors

    def get_patients(self, actor: Actor) -> list[User]:
        self._require_staff(actor)
        return self.repo.get_patients(self.db, exclude_id=actor.id)

"""Professional service - Business logic for professionals"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...error_messages import not_found
from ...models import Professional, User
from ...plan_limits import can_add_professional
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from ..goals.service import GoalService
from ..notifications.service import NotificationService
from .repository import ProfessionalRepository
from .schemas import ProfessionalCreate, ProfessionalUpdate

logger = logging.getLogger(__name__)


class ProfessionalService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProfessionalRepository()
        self.notifications = NotificationService(db)

    def get_professionals(self, user: User) -> list[Professional]:
        return self.repo.get_professionals(self.db, user.id)

    def get_professional(self, professional_id: int, user: User) -> Professional:
        professional = self.repo.get_professional_by_id(self.db, professional_id, user.id)
        if not professional:
            raise not_found("professional")
        return professional

    def create_professional(self, data: ProfessionalCreate, user: User) -> Professional:
        can_add, error_message = can_add_professional(self.db, user)
        if not can_add:
            logger.warning(f"⚠️ User {user.id} reached professional limit")
            raise HTTPException(status_code=403, detail=error_message)

        professional = self.repo.create_professional(
            self.db, user.id, status="active", **data.model_dump()
        )
        logger.info(f"✅ Professional {professional.id} created for user {user.id}")

        self.notifications.notify(
            user.id,
            "Profissional Adicionado",
            f"{professional.name} foi adicionado à equipe.",
            "success",
        )
        GoalService(self.db).record_progress(user.id, "professional")
        publish_change("professionals", user.id, INSERT, professional)
        return professional

    def update_professional(self, professional_id: int, data: ProfessionalUpdate, user: User) -> Professional:
        professional = self.get_professional(professional_id, user)
        professional = self.repo.update_professional(
            self.db, professional, **data.model_dump(exclude_unset=True)
        )
        publish_change("professionals", user.id, UPDATE, professional)
        return professional

    def update_status(self, professional_id: int, status: str, user: User) -> Professional:
        professional = self.get_professional(professional_id, user)
        professional = self.repo.update_professional(self.db, professional, status=status)
        publish_change("professionals", user.id, UPDATE, professional)
        return professional

    def delete_professional(self, professional_id: int, user: User) -> dict:
        professional = self.get_professional(professional_id, user)
        name = professional.name
        snapshot = {"id": professional.id}
        self.repo.delete_professional(self.db, professional)

        self.notifications.notify(user.id, "Profissional Removido", f"{name} foi removido da equipe.", "info")
        publish_change("professionals", user.id, DELETE, snapshot)
        return {"message": "Profissional removido"}

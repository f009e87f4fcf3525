"""Patient service - Business logic for patient operations"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...error_messages import map_db_error_to_user_message, not_found
from ...models import Patient, User
from ...plan_limits import can_add_patient
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from ..goals.service import GoalService
from ..notifications.service import NotificationService
from .repository import PatientRepository
from .schemas import PatientCreate, PatientUpdate

logger = logging.getLogger(__name__)


class PatientService:
    """Service layer for patient business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PatientRepository()
        self.notifications = NotificationService(db)

    def get_patients(self, user: User) -> list[Patient]:
        return self.repo.get_patients(self.db, user.id)

    def get_patient(self, patient_id: int, user: User) -> Patient:
        patient = self.repo.get_patient_by_id(self.db, patient_id, user.id)
        if not patient:
            raise not_found("patient")
        return patient

    def _save(self, write, *args, **kwargs) -> Patient:
        """Run a repository write, turning constraint violations into 409s"""
        try:
            return write(self.db, *args, **kwargs)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Patient write rejected: {e.orig}")
            raise HTTPException(status_code=409, detail=map_db_error_to_user_message(e)) from e

    def create_patient(self, data: PatientCreate, user: User) -> Patient:
        """Create a patient within the plan quota"""
        logger.info(f"📥 Creating patient for user_id: {user.id}")

        can_add, error_message = can_add_patient(self.db, user)
        if not can_add:
            logger.warning(f"⚠️ User {user.id} reached patient limit")
            raise HTTPException(status_code=403, detail=error_message)

        values = data.model_dump()
        values["status"] = "active"
        patient = self._save(self.repo.create_patient, user.id, **values)

        self.notifications.notify(
            user.id,
            "Cliente Adicionado",
            f"{patient.name} foi adicionado com sucesso.",
            "success",
        )
        GoalService(self.db).record_progress(user.id, "patient")
        publish_change("patients", user.id, INSERT, patient)
        return patient

    def update_patient(self, patient_id: int, data: PatientUpdate, user: User) -> Patient:
        patient = self.get_patient(patient_id, user)
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates and not (updates["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Nome é obrigatório")

        patient = self._save(self.repo.update_patient, patient, **updates)
        self.notifications.notify(
            user.id, "Cliente Atualizado", f"Os dados de {patient.name} foram atualizados.", "info"
        )
        publish_change("patients", user.id, UPDATE, patient)
        return patient

    def _update_fields(self, patient_id: int, user: User, **updates) -> Patient:
        patient = self.get_patient(patient_id, user)
        patient = self.repo.update_patient(self.db, patient, **updates)
        publish_change("patients", user.id, UPDATE, patient)
        return patient

    def update_notes(self, patient_id: int, notes: Optional[str], user: User) -> Patient:
        return self._update_fields(patient_id, user, notes=notes)

    def update_photo(self, patient_id: int, photo_url: Optional[str], user: User) -> Patient:
        return self._update_fields(patient_id, user, profile_photo_url=photo_url)

    def update_status(self, patient_id: int, status: str, user: User) -> Patient:
        return self._update_fields(patient_id, user, status=status)

    def delete_patient(self, patient_id: int, user: User) -> dict:
        patient = self.get_patient(patient_id, user)
        name = patient.name
        snapshot = {"id": patient.id}
        self.repo.delete_patient(self.db, patient)

        logger.info(f"🗑️ Deleted patient {patient_id} for user {user.id}")
        self.notifications.notify(user.id, "Cliente Removido", f"{name} foi removido.", "info")
        publish_change("patients", user.id, DELETE, snapshot)
        return {"message": "Cliente removido"}

    def check_overdue_payments(self, user: User, today: Optional[date] = None) -> int:
        """Notify once per patient whose payment is overdue; returns how many were notified"""
        today = today or date.today()
        overdue = self.repo.get_overdue_patients(self.db, user.id, today)
        for patient in overdue:
            self.notifications.notify(
                user.id,
                "Pagamento Atrasado",
                f"O pagamento de {patient.name} está atrasado.",
                "warning",
            )
        if overdue:
            logger.info(f"⏰ {len(overdue)} overdue patients for user {user.id}")
        return len(overdue)

"""Appointment service - Business logic for scheduling"""

import logging
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_SESSION_PRICE
from ...error_messages import not_found
from ...models import Appointment, User
from ...plan_limits import can_add_appointment
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from ..financial.service import FinancialService
from ..goals.service import GoalService
from ..notifications.service import NotificationService
from ..patients.repository import PatientRepository
from ..professionals.repository import ProfessionalRepository
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate

logger = logging.getLogger(__name__)


def period_bounds(period: str, reference: date) -> tuple[date, date]:
    """Inclusive date range of a day, a Monday-based week or a calendar month"""
    if period == "day":
        return reference, reference
    if period == "week":
        start = reference - timedelta(days=reference.weekday())
        return start, start + timedelta(days=6)
    if period == "month":
        start = reference.replace(day=1)
        return start, start + relativedelta(months=1) - timedelta(days=1)
    raise HTTPException(status_code=400, detail=f"Período inválido: {period}")


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.notifications = NotificationService(db)

    def get_appointments(
        self, user: User, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Appointment]:
        if start_date and end_date and start_date > end_date:
            raise HTTPException(status_code=400, detail="Data inicial maior que a data final")
        return self.repo.get_appointments(self.db, user.id, start_date, end_date)

    def get_appointment(self, appointment_id: int, user: User) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id, user.id)
        if not appointment:
            raise not_found("appointment")
        return appointment

    def _check_ownership(self, user: User, patient_id: Optional[int], professional_id: Optional[int]) -> None:
        """Patient and professional must belong to the same tenant"""
        if patient_id is not None and not PatientRepository.get_patient_by_id(self.db, patient_id, user.id):
            raise not_found("patient")
        if professional_id is not None and not ProfessionalRepository.get_professional_by_id(
            self.db, professional_id, user.id
        ):
            raise not_found("professional")

    def create_appointment(self, data: AppointmentCreate, user: User) -> Appointment:
        logger.info(f"📅 Creating appointment for user_id: {user.id}")

        can_add, error_message = can_add_appointment(self.db, user)
        if not can_add:
            logger.warning(f"⚠️ User {user.id} reached monthly appointment limit")
            raise HTTPException(status_code=403, detail=error_message)

        self._check_ownership(user, data.patient_id, data.professional_id)

        appointment = self.repo.create_appointment(self.db, user.id, **data.model_dump())
        GoalService(self.db).record_progress(user.id, "appointment")
        publish_change("appointments", user.id, INSERT, appointment)

        if appointment.status == "completed":
            self._bill_completed(appointment, user)
        return appointment

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate, user: User) -> Appointment:
        appointment = self.get_appointment(appointment_id, user)
        updates = data.model_dump(exclude_unset=True)
        self._check_ownership(user, updates.get("patient_id"), updates.get("professional_id"))

        was_completed = appointment.status == "completed"
        appointment = self.repo.update_appointment(self.db, appointment, **updates)
        publish_change("appointments", user.id, UPDATE, appointment)

        if appointment.status == "completed" and not was_completed:
            self._bill_completed(appointment, user)
        return appointment

    def update_status(self, appointment_id: int, status: str, user: User) -> Appointment:
        appointment = self.get_appointment(appointment_id, user)
        was_completed = appointment.status == "completed"
        appointment = self.repo.update_appointment(self.db, appointment, status=status)
        publish_change("appointments", user.id, UPDATE, appointment)

        if status == "completed" and not was_completed:
            self._bill_completed(appointment, user)
        return appointment

    def _bill_completed(self, appointment: Appointment, user: User) -> None:
        """A completed appointment is billed as one financial session"""
        session = FinancialService(self.db).create_session_for_appointment(
            appointment, DEFAULT_SESSION_PRICE
        )
        if session is None:
            return
        patient_name = appointment.patient.name if appointment.patient else "cliente"
        logger.info(f"🧾 Session {session.id} billed for appointment {appointment.id}")
        self.notifications.notify(
            user.id,
            "Sessão Registrada",
            f"Sessão de {patient_name} em {appointment.appointment_date.strftime('%d/%m/%Y')} registrada.",
            "success",
        )

    def delete_appointment(self, appointment_id: int, user: User) -> dict:
        appointment = self.get_appointment(appointment_id, user)
        snapshot = {"id": appointment.id}
        self.repo.delete_appointment(self.db, appointment)
        publish_change("appointments", user.id, DELETE, snapshot)
        return {"message": "Agendamento removido"}

    def get_counts_by_professional(
        self, user: User, period: str = "day", reference_date: Optional[date] = None
    ) -> dict:
        start, end = period_bounds(period, reference_date or date.today())
        rows = self.repo.count_by_professional(self.db, user.id, start, end)
        counts = [
            {
                "professional_id": professional_id,
                "professional_name": name or "Sem profissional",
                "count": count,
            }
            for professional_id, name, count in rows
        ]
        counts.sort(key=lambda c: (-c["count"], c["professional_name"]))
        return {"period": period, "start_date": start, "end_date": end, "counts": counts}

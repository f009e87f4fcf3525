"""Appointment repository - Database operations for appointments"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Professional


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointments(
        db: Session,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Appointment]:
        query = (
            db.query(Appointment)
            .options(joinedload(Appointment.patient), joinedload(Appointment.professional))
            .filter(Appointment.user_id == user_id)
        )
        if start_date:
            query = query.filter(Appointment.appointment_date >= start_date)
        if end_date:
            query = query.filter(Appointment.appointment_date <= end_date)
        return query.order_by(
            Appointment.appointment_date.asc(), Appointment.appointment_time.asc()
        ).all()

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int, user_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_appointments_on(db: Session, day: date, status: Optional[str] = None) -> list[Appointment]:
        """All tenants' appointments on a day (used by the reminder job)"""
        query = db.query(Appointment).options(
            joinedload(Appointment.patient), joinedload(Appointment.professional)
        ).filter(Appointment.appointment_date == day)
        if status:
            query = query.filter(Appointment.status == status)
        return query.all()

    @staticmethod
    def count_by_professional(db: Session, user_id: int, start: date, end: date) -> list[tuple]:
        return (
            db.query(Appointment.professional_id, Professional.name, func.count(Appointment.id))
            .outerjoin(Professional, Professional.id == Appointment.professional_id)
            .filter(
                Appointment.user_id == user_id,
                Appointment.appointment_date >= start,
                Appointment.appointment_date <= end,
            )
            .group_by(Appointment.professional_id, Professional.name)
            .all()
        )

    @staticmethod
    def create_appointment(db: Session, user_id: int, **appointment_data) -> Appointment:
        appointment = Appointment(user_id=user_id, **appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

"""Dashboard service - aggregates shown on the home screen"""

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Patient, Professional, User


def days_ago_label(updated_at: Optional[datetime], now: datetime) -> str:
    """'Hoje', 'Ontem' or 'N dias atrás'"""
    if updated_at is None:
        return "Hoje"
    diff_days = (now - updated_at).days
    if diff_days == 1:
        return "Ontem"
    if diff_days > 1:
        return f"{diff_days} dias atrás"
    return "Hoje"


class DashboardService:

    def __init__(self, db: Session):
        self.db = db

    def _count_appointments(self, user_id: int, *criteria) -> int:
        return (
            self.db.query(func.count(Appointment.id))
            .filter(Appointment.user_id == user_id, *criteria)
            .scalar()
            or 0
        )

    def get_stats(self, user: User, today: Optional[date] = None) -> dict:
        """Today's appointments, active patients, this month's completion rate and growth vs last month"""
        today = today or date.today()
        month_start = today.replace(day=1)
        last_month_start = month_start - relativedelta(months=1)
        last_month_end = month_start - timedelta(days=1)

        appointments_today = self._count_appointments(user.id, Appointment.appointment_date == today)
        active_patients = (
            self.db.query(func.count(Patient.id))
            .filter(Patient.user_id == user.id, Patient.status == "active")
            .scalar()
            or 0
        )
        total_this_month = self._count_appointments(user.id, Appointment.appointment_date >= month_start)
        completed_this_month = self._count_appointments(
            user.id,
            Appointment.appointment_date >= month_start,
            Appointment.status == "completed",
        )
        last_month = self._count_appointments(
            user.id,
            Appointment.appointment_date >= last_month_start,
            Appointment.appointment_date <= last_month_end,
        )

        completion_rate = round(completed_this_month / total_this_month * 100) if total_this_month else 0
        growth_rate = round((total_this_month - last_month) / last_month * 100) if last_month else 0

        return {
            "appointments_today": appointments_today,
            "active_patients": active_patients,
            "completion_rate": completion_rate,
            "growth_rate": growth_rate,
        }

    def get_upcoming_appointments(self, user: User, today: Optional[date] = None, limit: int = 5) -> list[dict]:
        today = today or date.today()
        appointments = (
            self.db.query(Appointment)
            .options(joinedload(Appointment.patient), joinedload(Appointment.professional))
            .filter(Appointment.user_id == user.id, Appointment.appointment_date >= today)
            .order_by(Appointment.appointment_date.asc(), Appointment.appointment_time.asc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": a.id,
                "patient": a.patient.name if a.patient else "Paciente desconhecido",
                "professional": a.professional.name if a.professional else "Profissional desconhecido",
                "time": a.appointment_time.strftime("%H:%M"),
                "date": a.appointment_date,
                "status": a.status,
            }
            for a in appointments
        ]

    def get_recent_patients(self, user: User, now: Optional[datetime] = None, limit: int = 5) -> list[dict]:
        now = now or datetime.utcnow()
        patients = (
            self.db.query(Patient)
            .filter(Patient.user_id == user.id)
            .order_by(Patient.updated_at.desc(), Patient.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": p.id,
                "name": p.name,
                "last_visit": days_ago_label(p.updated_at, now),
                "status": p.status,
            }
            for p in patients
        ]

    def get_today_birthdays(self, user: User, today: Optional[date] = None) -> list[dict]:
        """Patients and professionals whose birthday (month and day) is today"""
        today = today or date.today()
        people = []
        for model, kind in ((Patient, "client"), (Professional, "professional")):
            rows = (
                self.db.query(model)
                .filter(model.user_id == user.id, model.birthday.isnot(None))
                .all()
            )
            people.extend(
                {
                    "id": row.id,
                    "name": row.name,
                    "phone": row.phone,
                    "birthday": row.birthday,
                    "type": kind,
                }
                for row in rows
                if (row.birthday.month, row.birthday.day) == (today.month, today.day)
            )
        return people

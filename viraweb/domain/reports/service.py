"""Report service - saved reports and monthly chart series"""

import logging
from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...error_messages import action_failure, not_found
from ...models import Appointment, Patient, Report, User
from .repository import ReportRepository
from .schemas import ReportCreate, ReportUpdate

logger = logging.getLogger(__name__)

MONTH_LABELS = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]
CHART_MONTHS = 6


def recent_months(today: date, count: int = CHART_MONTHS) -> list[date]:
    """First day of the current month and the `count - 1` months before it, oldest first"""
    current = today.replace(day=1)
    return [current - relativedelta(months=offset) for offset in range(count - 1, -1, -1)]


def month_key(value) -> str:
    return f"{value.year:04d}-{value.month:02d}"


class ReportService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReportRepository()

    # ============================================================================
    # SAVED REPORTS
    # ============================================================================

    def get_reports(self, user: User) -> list[Report]:
        return self.repo.get_reports(self.db, user.id)

    def get_report(self, report_id: int, user: User) -> Report:
        report = self.repo.get_report_by_id(self.db, report_id, user.id)
        if not report:
            raise not_found("report")
        return report

    def create_report(self, data: ReportCreate, user: User) -> Report:
        try:
            return self.repo.create_report(self.db, user.id, **data.model_dump())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creating report for user {user.id}: {e}")
            raise HTTPException(status_code=500, detail=action_failure("reports.create")) from e

    def update_report(self, report_id: int, data: ReportUpdate, user: User) -> Report:
        report = self.get_report(report_id, user)
        return self.repo.update_report(self.db, report, **data.model_dump(exclude_unset=True))

    def delete_report(self, report_id: int, user: User) -> dict:
        self.repo.delete_report(self.db, self.get_report(report_id, user))
        return {"message": "Relatório removido"}

    # ============================================================================
    # AGGREGATES
    # ============================================================================

    def get_stats(self, user: User) -> dict:
        total = (
            self.db.query(func.count(Appointment.id)).filter(Appointment.user_id == user.id).scalar() or 0
        )
        completed = (
            self.db.query(func.count(Appointment.id))
            .filter(Appointment.user_id == user.id, Appointment.status == "completed")
            .scalar()
            or 0
        )
        active_patients = (
            self.db.query(func.count(Patient.id))
            .filter(Patient.user_id == user.id, Patient.status == "active")
            .scalar()
            or 0
        )
        return {
            "total_appointments": total,
            "active_patients": active_patients,
            "completion_rate": round(completed / total * 100) if total else 0,
        }

    def get_appointments_by_month(self, user: User, today: Optional[date] = None) -> list[dict]:
        """Total, completed and cancelled appointments per month over the last six months"""
        months = recent_months(today or date.today())
        series = {
            month_key(m): {
                "month": month_key(m),
                "label": MONTH_LABELS[m.month - 1],
                "appointments": 0,
                "completed": 0,
                "cancelled": 0,
            }
            for m in months
        }
        end = months[-1] + relativedelta(months=1)
        rows = (
            self.db.query(Appointment.appointment_date, Appointment.status)
            .filter(
                Appointment.user_id == user.id,
                Appointment.appointment_date >= months[0],
                Appointment.appointment_date < end,
            )
            .all()
        )
        for appointment_date, status in rows:
            entry = series[month_key(appointment_date)]
            entry["appointments"] += 1
            if status == "completed":
                entry["completed"] += 1
            elif status == "cancelled":
                entry["cancelled"] += 1
        return list(series.values())

    def get_patient_growth(self, user: User, today: Optional[date] = None) -> list[dict]:
        """New patients per month over the last six months, with the running total"""
        months = recent_months(today or date.today())
        window_start = datetime.combine(months[0], datetime.min.time())

        total = (
            self.db.query(func.count(Patient.id))
            .filter(Patient.user_id == user.id, Patient.created_at < window_start)
            .scalar()
            or 0
        )
        new_by_month = {month_key(m): 0 for m in months}
        created = (
            self.db.query(Patient.created_at)
            .filter(Patient.user_id == user.id, Patient.created_at >= window_start)
            .all()
        )
        for (created_at,) in created:
            key = month_key(created_at)
            if key in new_by_month:
                new_by_month[key] += 1

        growth = []
        for m in months:
            key = month_key(m)
            total += new_by_month[key]
            growth.append(
                {
                    "month": key,
                    "label": MONTH_LABELS[m.month - 1],
                    "new_patients": new_by_month[key],
                    "total_patients": total,
                }
            )
        return growth

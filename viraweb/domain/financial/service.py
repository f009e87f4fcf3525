"""Financial service - Business logic for payments and session billing"""

import csv
import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta
from io import StringIO
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...error_messages import action_failure, not_found
from ...models import Appointment, FinancialSession, Payment, User
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from ..appointments.repository import AppointmentRepository
from ..attendance.repository import AttendanceRepository
from ..goals.service import GoalService
from ..notifications.service import NotificationService
from ..patients.repository import PatientRepository
from .repository import FinancialRepository
from .schemas import FinancialSessionUpdate, PaymentCreate, PaymentUpdate

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "paid": "Pago",
    "pending": "Pendente",
    "overdue": "Atrasado",
    "refunded": "Reembolsado",
}

EXPORT_COLUMNS = [
    "data_pagamento",
    "paciente",
    "valor",
    "desconto",
    "status",
    "vencimento",
    "observacoes",
]


def net_amount(amount: Optional[float], discount: Optional[float]) -> float:
    return float(amount or 0) - float(discount or 0)


def format_br_date(value) -> str:
    """dd/mm/yyyy, or '-' when missing"""
    if not value:
        return "-"
    return value.strftime("%d/%m/%Y")


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """Start of a reporting window ending now"""
    now = now or datetime.utcnow()
    starts = {
        "daily": now.replace(hour=0, minute=0, second=0, microsecond=0),
        "weekly": now - timedelta(days=7),
        "monthly": now - relativedelta(months=1),
        "week": now - timedelta(days=7),
        "month": now - relativedelta(months=1),
        "quarter": now - relativedelta(months=3),
        "year": now - relativedelta(years=1),
    }
    if period not in starts:
        raise HTTPException(status_code=400, detail=f"Período inválido: {period}")
    return starts[period]


class FinancialService:
    """Service layer for payments and financial sessions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = FinancialRepository()
        self.notifications = NotificationService(db)

    # ============================================================================
    # PAYMENTS
    # ============================================================================

    def _get_patient(self, patient_id: int, user: User):
        patient = PatientRepository.get_patient_by_id(self.db, patient_id, user.id)
        if not patient:
            raise not_found("patient")
        return patient

    def get_payments(
        self, user: User, patient_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Payment]:
        return self.repo.get_payments(self.db, user.id, patient_id=patient_id, status=status)

    def get_recent_payments(self, user: User, limit: int = 10) -> list[Payment]:
        return self.repo.get_payments(self.db, user.id, limit=limit)

    def get_payment(self, payment_id: int, user: User) -> Payment:
        payment = self.repo.get_payment_by_id(self.db, payment_id, user.id)
        if not payment:
            raise not_found("payment")
        return payment

    def record_payment(self, data: PaymentCreate, user: User) -> Payment:
        """
        Record a payment for a patient.

        Payments start pending; a payment recorded as paid is stamped with
        the current time and goes through the same side effects as mark_paid.
        """
        self._get_patient(data.patient_id, user)
        if data.appointment_id is not None and not AppointmentRepository.get_appointment_by_id(
            self.db, data.appointment_id, user.id
        ):
            raise not_found("appointment")
        if data.attendance_id is not None and not AttendanceRepository.get_by_id(
            self.db, data.attendance_id, user.id
        ):
            raise not_found("attendance")

        values = data.model_dump()
        values["status"] = "pending"
        payment = self.repo.create_payment(self.db, user.id, currency="BRL", **values)
        logger.info(f"💰 Payment {payment.id} recorded for user {user.id} ({payment.amount:.2f})")
        publish_change("payments", user.id, INSERT, payment)

        if data.status == "paid":
            payment = self.mark_paid(payment.id, user)
        return payment

    def mark_paid(self, payment_id: int, user: User) -> Payment:
        """Settle a pending or overdue payment and update the patient's payment state"""
        payment = self.get_payment(payment_id, user)
        if payment.status == "paid":
            raise HTTPException(status_code=400, detail=action_failure("financial.mark_paid"))

        now = datetime.utcnow()
        payment.status = "paid"
        payment.payment_date = now
        patient = payment.patient
        if patient is not None:
            patient.payment_status = "paid"
            patient.last_payment_date = now
        self.db.commit()
        self.db.refresh(payment)

        amount = net_amount(payment.amount, payment.discount)
        if amount > 0:
            GoalService(self.db).record_progress(user.id, "payment", amount)
        self.notifications.notify(
            user.id,
            "Pagamento Recebido",
            f"Pagamento de R$ {amount:.2f} recebido de {patient.name if patient else 'cliente'}.",
            "success",
        )
        publish_change("payments", user.id, UPDATE, payment)
        return payment

    def mark_overdue_payments(self, user: Optional[User] = None, today: Optional[date] = None) -> int:
        """Pending payments past due become overdue (all tenants when no user is given)"""
        today = today or date.today()
        payments = self.repo.mark_overdue(self.db, today, user.id if user else None)
        for payment in payments:
            if payment.patient is not None:
                payment.patient.payment_status = "overdue"
                payment.patient.payment_due_date = payment.due_date
            publish_change("payments", payment.user_id, UPDATE, payment)
        if payments:
            self.db.commit()
            logger.info(f"⏰ Marked {len(payments)} payments as overdue")
        return len(payments)

    def update_payment(self, payment_id: int, data: PaymentUpdate, user: User) -> Payment:
        payment = self.get_payment(payment_id, user)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("status") == "paid" and payment.status != "paid":
            updates.pop("status")
            if updates:
                self.repo.update_payment(self.db, payment, **updates)
            return self.mark_paid(payment_id, user)

        amount = updates.get("amount", payment.amount)
        discount = updates.get("discount", payment.discount)
        if discount is not None and (discount < 0 or discount > amount):
            raise HTTPException(
                status_code=400, detail="Desconto deve estar entre zero e o valor do pagamento"
            )

        payment = self.repo.update_payment(self.db, payment, **updates)
        publish_change("payments", user.id, UPDATE, payment)
        return payment

    def delete_payment(self, payment_id: int, user: User) -> dict:
        payment = self.get_payment(payment_id, user)
        snapshot = {"id": payment.id}
        self.repo.delete_payment(self.db, payment)
        publish_change("payments", user.id, DELETE, snapshot)
        return {"message": "Pagamento removido"}

    # ============================================================================
    # REPORTING
    # ============================================================================

    def get_financial_summary(self, user: User, period: str = "monthly", now: Optional[datetime] = None) -> dict:
        start = period_start(period, now)
        payments = self.repo.get_payments_since(self.db, user.id, start)

        total_received = 0.0
        total_discounts = 0.0
        total_pending = 0.0
        for p in payments:
            if p.status == "paid":
                total_received += float(p.amount or 0)
            if p.discount:
                total_discounts += float(p.discount)
            if p.status in ("pending", "overdue"):
                total_pending += net_amount(p.amount, p.discount)

        return {
            "period": period,
            "start_date": start.date(),
            "total_received": round(total_received, 2),
            "total_discounts": round(total_discounts, 2),
            "total_pending": round(total_pending, 2),
            "payment_count": len(payments),
        }

    def get_financial_series(self, user: User, days: int = 30, today: Optional[date] = None) -> list[dict]:
        """Net amount received per day for the last `days` days, zero-filled"""
        if days < 1 or days > 366:
            raise HTTPException(status_code=400, detail="Intervalo de dias inválido")
        today = today or date.today()
        first_day = today - timedelta(days=days - 1)

        series = OrderedDict((first_day + timedelta(days=i), 0.0) for i in range(days))
        start = datetime.combine(first_day, datetime.min.time())
        end = datetime.combine(today, datetime.max.time())
        for p in self.repo.get_paid_payments_between(self.db, user.id, start, end):
            day = p.payment_date.date()
            if day in series:
                series[day] += net_amount(p.amount, p.discount)

        return [{"date": day, "value": round(value, 2)} for day, value in series.items()]

    def get_financial_metrics(self, user: User, period: str = "month", now: Optional[datetime] = None) -> list[dict]:
        """
        Per-day income and default (overdue amount) for a window ending now.

        Paid payments count on their payment date, overdue ones on their due
        date. Days without activity are omitted.
        """
        now = now or datetime.utcnow()
        start = period_start(period, now)
        metrics: dict[date, dict] = {}

        def bucket(day: date) -> dict:
            return metrics.setdefault(
                day, {"date": day, "income": 0.0, "expenses": 0.0, "default_rate": 0.0}
            )

        for p in self.repo.get_paid_payments_between(self.db, user.id, start, now):
            if p.status == "paid":
                bucket(p.payment_date.date())["income"] += net_amount(p.amount, p.discount)

        for p in self.repo.get_overdue_between(self.db, user.id, start.date(), now.date()):
            bucket(p.due_date)["default_rate"] += net_amount(p.amount, p.discount)

        return [
            {k: (round(v, 2) if isinstance(v, float) else v) for k, v in metrics[day].items()}
            for day in sorted(metrics)
        ]

    def export_rows(self, user: User, period: str = "month", now: Optional[datetime] = None) -> list[dict]:
        now = now or datetime.utcnow()
        start = period_start(period, now)
        rows = []
        for p in self.repo.get_paid_payments_between(self.db, user.id, start, now):
            rows.append(
                {
                    "data_pagamento": format_br_date(p.payment_date),
                    "paciente": p.patient.name if p.patient else "-",
                    "valor": f"{float(p.amount or 0):.2f}",
                    "desconto": f"{float(p.discount or 0):.2f}",
                    "status": STATUS_LABELS.get(p.status, "-"),
                    "vencimento": format_br_date(p.due_date),
                    "observacoes": p.notes or "-",
                }
            )
        return rows

    def export_payments_csv(self, user: User, period: str = "month") -> StreamingResponse:
        """Export payments of the period as CSV"""
        logger.info(f"📊 Financial export requested by user {user.id} ({period})")
        rows = self.export_rows(user, period)

        output = StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)

        filename = f"financeiro_{period}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        logger.info(f"✅ Financial export ready: {filename} ({len(rows)} payments)")
        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )

    # ============================================================================
    # FINANCIAL SESSIONS
    # ============================================================================

    def get_patient_sessions(self, patient_id: int, user: User) -> list[FinancialSession]:
        self._get_patient(patient_id, user)
        return self.repo.get_sessions_for_patient(self.db, user.id, patient_id)

    def update_session(self, session_id: int, data: FinancialSessionUpdate, user: User) -> FinancialSession:
        session = self.repo.get_session_by_id(self.db, session_id, user.id)
        if not session:
            raise not_found("financial_session")

        updates = data.model_dump(exclude_unset=True)
        if updates.get("payment_id") is not None:
            self.get_payment(updates["payment_id"], user)
        session = self.repo.update_session(self.db, session, **updates)
        publish_change("financial_sessions", user.id, UPDATE, session)
        return session

    def create_session_for_appointment(self, appointment: Appointment, unit_price: float) -> Optional[FinancialSession]:
        """Bill a completed appointment once; returns None when it was already billed"""
        if self.repo.get_session_for_appointment(self.db, appointment.id):
            return None
        session = self.repo.create_session(
            self.db,
            appointment.user_id,
            patient_id=appointment.patient_id,
            appointment_id=appointment.id,
            session_date=appointment.appointment_date,
            unit_price=unit_price,
            discount=0.0,
            paid=False,
        )
        publish_change("financial_sessions", appointment.user_id, INSERT, session)
        return session

    def get_patient_financial_summary(self, patient_id: int, user: User) -> dict:
        """Paid, due and discount totals over a patient's payments and sessions"""
        self._get_patient(patient_id, user)
        payments = self.repo.get_payments(self.db, user.id, patient_id=patient_id)
        sessions = self.repo.get_sessions_for_patient(self.db, user.id, patient_id)

        paid = 0.0
        due = 0.0
        discounts = 0.0
        for p in payments:
            if p.status == "paid":
                paid += float(p.amount or 0)
            if p.discount:
                discounts += float(p.discount)
            if p.status in ("pending", "overdue"):
                due += net_amount(p.amount, p.discount)
        for s in sessions:
            value = net_amount(s.unit_price, s.discount)
            if s.paid:
                paid += value
            else:
                due += value
            if s.discount:
                discounts += float(s.discount)

        paid_sessions = sum(1 for s in sessions if s.paid)
        return {
            "patient_id": patient_id,
            "total_sessions": len(sessions),
            "paid_sessions": paid_sessions,
            "unpaid_sessions": len(sessions) - paid_sessions,
            "paid": round(paid, 2),
            "due": round(due, 2),
            "discounts": round(discounts, 2),
        }

    def get_outstanding_patients(self, user: User) -> list[dict]:
        """Unpaid sessions grouped per patient, largest balance first"""
        grouped: dict[int, dict] = {}
        for s in self.repo.get_unpaid_sessions(self.db, user.id):
            if s.patient is None:
                continue
            entry = grouped.setdefault(
                s.patient_id,
                {
                    "id": s.patient_id,
                    "name": s.patient.name,
                    "phone": s.patient.phone,
                    "unpaid_sessions": 0,
                    "outstanding": 0.0,
                },
            )
            entry["unpaid_sessions"] += 1
            entry["outstanding"] += net_amount(s.unit_price, s.discount)

        result = sorted(grouped.values(), key=lambda e: e["outstanding"], reverse=True)
        for entry in result:
            entry["outstanding"] = round(entry["outstanding"], 2)
        return result

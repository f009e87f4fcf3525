"""Financial repository - Database operations for payments and billed sessions"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import FinancialSession, Payment


class FinancialRepository:
    """Repository for payment and financial session database operations"""

    # ============================================================================
    # PAYMENTS
    # ============================================================================

    @staticmethod
    def get_payments(
        db: Session,
        user_id: int,
        patient_id: Optional[int] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Payment]:
        query = (
            db.query(Payment)
            .options(joinedload(Payment.patient))
            .filter(Payment.user_id == user_id)
        )
        if patient_id is not None:
            query = query.filter(Payment.patient_id == patient_id)
        if status:
            query = query.filter(Payment.status == status)
        query = query.order_by(Payment.created_at.desc(), Payment.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_payment_by_id(db: Session, payment_id: int, user_id: int) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.id == payment_id, Payment.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_payments_since(db: Session, user_id: int, start: datetime) -> list[Payment]:
        """Payments dated on/after start (paid date, or creation for unpaid ones)"""
        effective_date = func.coalesce(Payment.payment_date, Payment.created_at)
        return (
            db.query(Payment)
            .filter(Payment.user_id == user_id, effective_date >= start)
            .all()
        )

    @staticmethod
    def get_paid_payments_between(db: Session, user_id: int, start: datetime, end: datetime) -> list[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.patient))
            .filter(
                Payment.user_id == user_id,
                Payment.payment_date >= start,
                Payment.payment_date <= end,
            )
            .order_by(Payment.payment_date.asc())
            .all()
        )

    @staticmethod
    def get_overdue_between(db: Session, user_id: int, start: date, end: date) -> list[Payment]:
        return (
            db.query(Payment)
            .filter(
                Payment.user_id == user_id,
                Payment.status == "overdue",
                Payment.due_date >= start,
                Payment.due_date <= end,
            )
            .all()
        )

    @staticmethod
    def create_payment(db: Session, user_id: int, **payment_data) -> Payment:
        payment = Payment(user_id=user_id, **payment_data)
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    @staticmethod
    def update_payment(db: Session, payment: Payment, **updates) -> Payment:
        for key, value in updates.items():
            if hasattr(payment, key):
                setattr(payment, key, value)
        db.commit()
        db.refresh(payment)
        return payment

    @staticmethod
    def delete_payment(db: Session, payment: Payment) -> None:
        db.delete(payment)
        db.commit()

    @staticmethod
    def mark_overdue(db: Session, today: date, user_id: Optional[int] = None) -> list[Payment]:
        """Flip pending payments past their due date to overdue; returns the flipped rows"""
        query = db.query(Payment).filter(Payment.status == "pending", Payment.due_date < today)
        if user_id is not None:
            query = query.filter(Payment.user_id == user_id)
        payments = query.all()
        for payment in payments:
            payment.status = "overdue"
        if payments:
            db.commit()
        return payments

    # ============================================================================
    # FINANCIAL SESSIONS
    # ============================================================================

    @staticmethod
    def get_sessions_for_patient(db: Session, user_id: int, patient_id: int) -> list[FinancialSession]:
        return (
            db.query(FinancialSession)
            .filter(FinancialSession.user_id == user_id, FinancialSession.patient_id == patient_id)
            .order_by(FinancialSession.session_date.desc(), FinancialSession.id.desc())
            .all()
        )

    @staticmethod
    def get_session_by_id(db: Session, session_id: int, user_id: int) -> Optional[FinancialSession]:
        return (
            db.query(FinancialSession)
            .filter(FinancialSession.id == session_id, FinancialSession.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_session_for_appointment(db: Session, appointment_id: int) -> Optional[FinancialSession]:
        return (
            db.query(FinancialSession)
            .filter(FinancialSession.appointment_id == appointment_id)
            .first()
        )

    @staticmethod
    def get_unpaid_sessions(db: Session, user_id: int) -> list[FinancialSession]:
        return (
            db.query(FinancialSession)
            .options(joinedload(FinancialSession.patient))
            .filter(FinancialSession.user_id == user_id, FinancialSession.paid.is_(False))
            .all()
        )

    @staticmethod
    def create_session(db: Session, user_id: int, **session_data) -> FinancialSession:
        session = FinancialSession(user_id=user_id, **session_data)
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def update_session(db: Session, session: FinancialSession, **updates) -> FinancialSession:
        for key, value in updates.items():
            if hasattr(session, key):
                setattr(session, key, value)
        db.commit()
        db.refresh(session)
        return session

"""Financial router - FastAPI endpoints for payments, sessions and reports"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Payment, User
from .schemas import (
    FinancialSessionResponse,
    FinancialSessionUpdate,
    FinancialSummaryResponse,
    MetricsPeriod,
    MetricsPoint,
    OutstandingPatient,
    PatientFinancialSummary,
    PaymentCreate,
    PaymentResponse,
    PaymentStatus,
    PaymentUpdate,
    SeriesPoint,
    SummaryPeriod,
)
from .service import FinancialService

router = APIRouter(prefix="/api/financial", tags=["Financial"])


def get_financial_service(db: Session = Depends(get_db)) -> FinancialService:
    """Dependency injection for FinancialService"""
    return FinancialService(db)


def to_payment_response(payment: Payment) -> PaymentResponse:
    response = PaymentResponse.model_validate(payment)
    response.patient_name = payment.patient.name if payment.patient else None
    return response


# ============================================================================
# PAYMENTS
# ============================================================================


@router.get("/payments", response_model=list[PaymentResponse])
async def get_payments(
    patient_id: Optional[int] = None,
    status: Optional[PaymentStatus] = None,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return [to_payment_response(p) for p in service.get_payments(current_user, patient_id, status)]


@router.get("/payments/recent", response_model=list[PaymentResponse])
async def get_recent_payments(
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return [to_payment_response(p) for p in service.get_recent_payments(current_user, limit)]


@router.post("/payments", response_model=PaymentResponse, status_code=201)
async def record_payment(
    data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return to_payment_response(service.record_payment(data, current_user))


@router.post("/payments/mark-overdue")
async def mark_overdue_payments(
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return {"updated": service.mark_overdue_payments(current_user)}


@router.post("/payments/{payment_id}/pay", response_model=PaymentResponse)
async def mark_payment_paid(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return to_payment_response(service.mark_paid(payment_id, current_user))


@router.patch("/payments/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return to_payment_response(service.update_payment(payment_id, data, current_user))


@router.delete("/payments/{payment_id}")
async def delete_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.delete_payment(payment_id, current_user)


# ============================================================================
# REPORTS
# ============================================================================


@router.get("/summary", response_model=FinancialSummaryResponse)
async def get_financial_summary(
    period: SummaryPeriod = "monthly",
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.get_financial_summary(current_user, period)


@router.get("/series", response_model=list[SeriesPoint])
async def get_financial_series(
    days: int = Query(30, ge=1, le=366),
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.get_financial_series(current_user, days)


@router.get("/metrics", response_model=list[MetricsPoint])
async def get_financial_metrics(
    period: MetricsPeriod = "month",
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.get_financial_metrics(current_user, period)


@router.get("/export")
async def export_payments(
    period: MetricsPeriod = "month",
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    """Download the period's payments as CSV"""
    return service.export_payments_csv(current_user, period)


@router.get("/outstanding", response_model=list[OutstandingPatient])
async def get_outstanding_patients(
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.get_outstanding_patients(current_user)


# ============================================================================
# SESSIONS
# ============================================================================


@router.get("/patients/{patient_id}/sessions", response_model=list[FinancialSessionResponse])
async def get_patient_sessions(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.get_patient_sessions(patient_id, current_user)


@router.get("/patients/{patient_id}/summary", response_model=PatientFinancialSummary)
async def get_patient_financial_summary(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.get_patient_financial_summary(patient_id, current_user)


@router.patch("/sessions/{session_id}", response_model=FinancialSessionResponse)
async def update_session(
    session_id: int,
    data: FinancialSessionUpdate,
    current_user: User = Depends(get_current_user),
    service: FinancialService = Depends(get_financial_service),
):
    return service.update_session(session_id, data, current_user)

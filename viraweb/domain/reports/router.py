"""Report router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    MonthlyAppointments,
    MonthlyPatientGrowth,
    ReportCreate,
    ReportResponse,
    ReportStats,
    ReportUpdate,
)
from .service import ReportService

router = APIRouter(prefix="/api/reports", tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


# ============================================================================
# AGGREGATES
# ============================================================================


@router.get("/stats", response_model=ReportStats)
async def get_report_stats(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_stats(current_user)


@router.get("/appointments-by-month", response_model=list[MonthlyAppointments])
async def get_appointments_by_month(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_appointments_by_month(current_user)


@router.get("/patient-growth", response_model=list[MonthlyPatientGrowth])
async def get_patient_growth(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_patient_growth(current_user)


# ============================================================================
# SAVED REPORTS
# ============================================================================


@router.get("", response_model=list[ReportResponse])
async def get_reports(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_reports(current_user)


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(
    data: ReportCreate,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.create_report(data, current_user)


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: int,
    data: ReportUpdate,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.update_report(report_id, data, current_user)


@router.delete("/{report_id}")
async def delete_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.delete_report(report_id, current_user)

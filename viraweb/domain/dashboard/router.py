"""Dashboard router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import Birthday, DashboardStats, RecentPatient, UpcomingAppointment
from .service import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_stats(current_user)


@router.get("/upcoming-appointments", response_model=list[UpcomingAppointment])
async def get_upcoming_appointments(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_upcoming_appointments(current_user)


@router.get("/recent-patients", response_model=list[RecentPatient])
async def get_recent_patients(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_recent_patients(current_user)


@router.get("/birthdays", response_model=list[Birthday])
async def get_today_birthdays(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_today_birthdays(current_user)

"""Appointment router - FastAPI endpoints for scheduling"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_service import send_appointment_confirmation, send_quietly
from ...models import Appointment, User
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    CountPeriod,
    ProfessionalCountsResponse,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


def to_response(appointment: Appointment) -> AppointmentResponse:
    response = AppointmentResponse.model_validate(appointment)
    response.patient_name = appointment.patient.name if appointment.patient else None
    response.professional_name = appointment.professional.name if appointment.professional else None
    return response


@router.get("", response_model=list[AppointmentResponse])
async def get_appointments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments ordered by date and time, optionally within a date range"""
    return [to_response(a) for a in service.get_appointments(current_user, start_date, end_date)]


@router.get("/counts-by-professional", response_model=ProfessionalCountsResponse)
async def get_counts_by_professional(
    period: CountPeriod = "day",
    reference_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_counts_by_professional(current_user, period, reference_date)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.get_appointment(appointment_id, current_user))


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.create_appointment(data, current_user)

    patient = appointment.patient
    if patient and patient.email:
        # Confirmation email (background task, failures only logged)
        background_tasks.add_task(
            send_quietly,
            send_appointment_confirmation,
            to=patient.email,
            patient_name=patient.name,
            professional_name=appointment.professional.name if appointment.professional else None,
            appointment_date=appointment.appointment_date.strftime("%d/%m/%Y"),
            appointment_time=appointment.appointment_time.strftime("%H:%M"),
            clinic_name=current_user.clinic_name,
        )
    else:
        logger.debug(f"Appointment {appointment.id} created without patient email, skipping confirmation")

    return to_response(appointment)


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.update_appointment(appointment_id, data, current_user))


@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.update_status(appointment_id, data.status, current_user))


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id, current_user)

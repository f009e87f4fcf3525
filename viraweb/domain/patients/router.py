"""Patient router - FastAPI endpoints for patient operations"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    OverdueCheckResponse,
    PatientCreate,
    PatientNotesUpdate,
    PatientPhotoUpdate,
    PatientResponse,
    PatientStatusUpdate,
    PatientUpdate,
)
from .service import PatientService

router = APIRouter(prefix="/api/patients", tags=["Patients"])


def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    """Dependency injection for PatientService"""
    return PatientService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[PatientResponse])
async def get_patients(
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Get all patients for the current user, newest first"""
    return service.get_patients(current_user)


@router.post("/check-overdue", response_model=OverdueCheckResponse)
async def check_overdue_payments(
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return {"notified": service.check_overdue_payments(current_user)}


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.get_patient(patient_id, current_user)


@router.post("", response_model=PatientResponse, status_code=201)
async def create_patient(
    data: PatientCreate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.create_patient(data, current_user)


@router.patch("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: int,
    data: PatientUpdate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.update_patient(patient_id, data, current_user)


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.delete_patient(patient_id, current_user)


# ============================================================================
# PARTIAL UPDATES
# ============================================================================


@router.put("/{patient_id}/notes", response_model=PatientResponse)
async def update_patient_notes(
    patient_id: int,
    data: PatientNotesUpdate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.update_notes(patient_id, data.notes, current_user)


@router.put("/{patient_id}/photo", response_model=PatientResponse)
async def update_patient_photo(
    patient_id: int,
    data: PatientPhotoUpdate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.update_photo(patient_id, data.profile_photo_url, current_user)


@router.put("/{patient_id}/status", response_model=PatientResponse)
async def update_patient_status(
    patient_id: int,
    data: PatientStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.update_status(patient_id, data.status, current_user)

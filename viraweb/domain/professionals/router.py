"""Professional router - FastAPI endpoints for professionals"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    ProfessionalCreate,
    ProfessionalResponse,
    ProfessionalStatusUpdate,
    ProfessionalUpdate,
)
from .service import ProfessionalService

router = APIRouter(prefix="/api/professionals", tags=["Professionals"])


def get_professional_service(db: Session = Depends(get_db)) -> ProfessionalService:
    """Dependency injection for ProfessionalService"""
    return ProfessionalService(db)


@router.get("", response_model=list[ProfessionalResponse])
async def get_professionals(
    current_user: User = Depends(get_current_user),
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.get_professionals(current_user)


@router.get("/{professional_id}", response_model=ProfessionalResponse)
async def get_professional(
    professional_id: int,
    current_user: User = Depends(get_current_user),
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.get_professional(professional_id, current_user)


@router.post("", response_model=ProfessionalResponse, status_code=201)
async def create_professional(
    data: ProfessionalCreate,
    current_user: User = Depends(get_current_user),
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.create_professional(data, current_user)


@router.patch("/{professional_id}", response_model=ProfessionalResponse)
async def update_professional(
    professional_id: int,
    data: ProfessionalUpdate,
    current_user: User = Depends(get_current_user),
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.update_professional(professional_id, data, current_user)


@router.put("/{professional_id}/status", response_model=ProfessionalResponse)
async def update_professional_status(
    professional_id: int,
    data: ProfessionalStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.update_status(professional_id, data.status, current_user)


@router.delete("/{professional_id}")
async def delete_professional(
    professional_id: int,
    current_user: User = Depends(get_current_user),
    service: ProfessionalService = Depends(get_professional_service),
):
    return service.delete_professional(professional_id, current_user)

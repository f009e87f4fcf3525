"""Settings router"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import ClinicUpdate, EmailUpdate, PasswordUpdate, ProfileUpdate, SettingsResponse
from .service import SettingsService

router = APIRouter(prefix="/api/settings", tags=["Settings"])


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


@router.get("", response_model=SettingsResponse)
async def get_settings(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=SettingsResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return service.update_profile(data, current_user)


@router.put("/clinic", response_model=SettingsResponse)
async def update_clinic(
    data: ClinicUpdate,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return service.update_clinic(data, current_user)


@router.put("/email")
async def update_email(
    data: EmailUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Forwarded to Supabase Auth with the caller's own access token"""
    return await service.update_email(data.email, current_user, request.state.access_token)


@router.put("/password")
async def update_password(
    data: PasswordUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return await service.update_password(data.password, current_user, request.state.access_token)

"""Settings service - profile updates and credential changes through Supabase Auth"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...error_messages import action_failure
from ...models import User
from ...supabase_auth import SupabaseAuthClient, SupabaseAuthError, supabase_auth
from .schemas import ClinicUpdate, ProfileUpdate

logger = logging.getLogger(__name__)


class SettingsService:

    def __init__(self, db: Session, auth_client: SupabaseAuthClient = supabase_auth):
        self.db = db
        self.auth_client = auth_client

    def _save(self, user: User, **updates) -> User:
        for key, value in updates.items():
            setattr(user, key, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_profile(self, data: ProfileUpdate, user: User) -> User:
        return self._save(user, **data.model_dump(exclude_unset=True))

    def update_clinic(self, data: ClinicUpdate, user: User) -> User:
        return self._save(user, clinic_name=data.clinic_name)

    async def _update_credentials(self, access_token: str, failure_key: str, **credentials) -> None:
        if not self.auth_client.is_configured():
            raise HTTPException(status_code=500, detail=action_failure("auth.not_configured"))
        try:
            await self.auth_client.update_user(access_token, **credentials)
        except SupabaseAuthError as e:
            logger.warning(f"⚠️ Credential update rejected: {e.message}")
            raise HTTPException(status_code=400, detail=action_failure(failure_key)) from e

    async def update_email(self, email: str, user: User, access_token: str) -> dict:
        """
        Ask Supabase to change the login email.

        The local copy follows on the next authenticated request, once the
        new address has been confirmed and shows up in the token.
        """
        await self._update_credentials(access_token, "settings.update_email", email=email)
        logger.info(f"📧 Email change requested for user {user.id}")
        return {"message": "Enviamos um link de confirmação para o novo email"}

    async def update_password(self, password: str, user: User, access_token: str) -> dict:
        await self._update_credentials(access_token, "settings.update_password", password=password)
        logger.info(f"🔑 Password updated for user {user.id}")
        return {"message": "Senha atualizada com sucesso"}

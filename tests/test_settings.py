import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

from viraweb.domain.settings.service import SettingsService
from viraweb.supabase_auth import SupabaseAuthError


def fake_auth(configured=True):
    auth = MagicMock()
    auth.is_configured.return_value = configured
    auth.update_user = AsyncMock()
    return auth


def test_get_and_update_profile(client):
    assert client.get("/api/settings").json()["clinic_name"] == "Clínica Vida"

    profile = client.put("/api/settings/profile", json={"full_name": "Dra. Ana Lima", "phone": "(21) 99876-5432"})
    assert profile.status_code == 200
    assert profile.json()["full_name"] == "Dra. Ana Lima"
    assert profile.json()["phone"] == "21998765432"

    clinic = client.put("/api/settings/clinic", json={"clinic_name": "  Clínica Nova "})
    assert clinic.json()["clinic_name"] == "Clínica Nova"


def test_blank_clinic_name_is_rejected(client):
    assert client.put("/api/settings/clinic", json={"clinic_name": " "}).status_code == 422


def test_short_password_is_rejected(client):
    assert client.put("/api/settings/password", json={"password": "123"}).status_code == 422


def test_update_email_goes_through_supabase(db, user):
    auth = fake_auth()
    result = asyncio.run(SettingsService(db, auth).update_email("nova@clinic.com", user, "user-token"))

    auth.update_user.assert_awaited_once_with("user-token", email="nova@clinic.com")
    assert "confirmação" in result["message"]


def test_rejected_password_change_is_400(db, user):
    auth = fake_auth()
    auth.update_user.side_effect = SupabaseAuthError("weak password")

    with pytest.raises(HTTPException) as exc:
        asyncio.run(SettingsService(db, auth).update_password("segredo123", user, "user-token"))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Erro ao atualizar senha"


def test_unconfigured_auth_is_500(db, user):
    with pytest.raises(HTTPException) as exc:
        asyncio.run(SettingsService(db, fake_auth(configured=False)).update_password("segredo123", user, "t"))
    assert exc.value.status_code == 500

import asyncio
import time
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import HTTPException
from jose import jwt

from viraweb import worker
from viraweb.auth import get_or_create_user, verify_supabase_token
from viraweb.config import SUPABASE_JWT_SECRET
from viraweb.models import User
from viraweb.supabase_auth import USER_PAGE_SIZE, SupabaseAuthClient, SupabaseAuthError, supabase_auth


def make_token(sub="uid-new", email="new@clinic.com", expires_in=3600, **claims) -> str:
    payload = {
        "sub": sub,
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
        "user_metadata": {"full_name": "Dr. Novo"},
        **claims,
    }
    return jwt.encode(payload, SUPABASE_JWT_SECRET, algorithm="HS256")


def test_valid_token_returns_claims():
    claims = verify_supabase_token(make_token())
    assert claims["sub"] == "uid-new"
    assert claims["email"] == "new@clinic.com"


def test_expired_token_is_flagged():
    with pytest.raises(HTTPException) as exc:
        verify_supabase_token(make_token(expires_in=-60))
    assert exc.value.status_code == 401
    assert exc.value.headers == {"X-Token-Expired": "true"}


def test_token_signed_with_another_secret_is_rejected():
    token = jwt.encode(
        {"sub": "x", "aud": "authenticated", "exp": int(time.time()) + 60}, "other-secret", algorithm="HS256"
    )
    with pytest.raises(HTTPException) as exc:
        verify_supabase_token(token)
    assert exc.value.status_code == 401


def test_get_or_create_user_reports_creation(db):
    user, created = get_or_create_user(db, "uid-1", "a@clinic.com", "Ana")
    assert created is True
    assert user.full_name == "Ana"

    same, created = get_or_create_user(db, "uid-1", "a@clinic.com")
    assert created is False
    assert same.id == user.id


def test_new_identity_with_known_email_is_migrated(db, user):
    migrated, created = get_or_create_user(db, "uid-google", user.email)

    assert created is False
    assert migrated.id == user.id
    assert migrated.supabase_uid == "uid-google"
    assert db.query(User).count() == 1


def test_first_request_creates_user_and_queues_welcome_email(anonymous_client, db, monkeypatch):
    enqueue = AsyncMock()
    monkeypatch.setattr(worker, "enqueue_welcome_email", enqueue)

    response = anonymous_client.get("/api/patients", headers={"Authorization": f"Bearer {make_token()}"})

    assert response.status_code == 200
    user = db.query(User).filter(User.supabase_uid == "uid-new").one()
    assert user.full_name == "Dr. Novo"
    enqueue.assert_awaited_once_with(user.id)

    anonymous_client.get("/api/patients", headers={"Authorization": f"Bearer {make_token()}"})
    enqueue.assert_awaited_once()


def test_missing_or_malformed_token_is_401(anonymous_client):
    assert anonymous_client.get("/api/patients").status_code == 401
    response = anonymous_client.get("/api/patients", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


# ============================================================================
# PASSWORD RECOVERY
# ============================================================================


@pytest.fixture
def supabase(monkeypatch):
    monkeypatch.setattr(supabase_auth, "is_configured", lambda: True)
    monkeypatch.setattr(supabase_auth, "has_admin_access", lambda: False)
    monkeypatch.setattr(supabase_auth, "send_password_recovery", AsyncMock())
    monkeypatch.setattr(supabase_auth, "update_user", AsyncMock())
    return supabase_auth


def test_forgot_password_requires_email(anonymous_client, supabase):
    response = anonymous_client.post("/api/auth/forgot-password", json={"email": "  "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email é obrigatório"


def test_forgot_password_sends_recovery(anonymous_client, supabase):
    response = anonymous_client.post("/api/auth/forgot-password", json={"email": " Ana@Clinic.com "})

    assert response.status_code == 200
    supabase.send_password_recovery.assert_awaited_once_with("ana@clinic.com")


def test_forgot_password_unknown_user_with_admin_access(anonymous_client, supabase, monkeypatch):
    monkeypatch.setattr(supabase_auth, "has_admin_access", lambda: True)
    monkeypatch.setattr(supabase_auth, "user_exists", AsyncMock(return_value=False))

    response = anonymous_client.post("/api/auth/forgot-password", json={"email": "ghost@clinic.com"})

    assert response.status_code == 404
    supabase.send_password_recovery.assert_not_awaited()


def test_forgot_password_not_configured(anonymous_client, monkeypatch):
    monkeypatch.setattr(supabase_auth, "is_configured", lambda: False)
    response = anonymous_client.post("/api/auth/forgot-password", json={"email": "a@clinic.com"})
    assert response.status_code == 500


def test_reset_password(anonymous_client, supabase):
    missing = anonymous_client.post("/api/auth/reset-password", json={"token": "abc"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Token e senha são obrigatórios"

    response = anonymous_client.post("/api/auth/reset-password", json={"token": "abc", "password": "n0va-senha"})
    assert response.status_code == 200
    supabase.update_user.assert_awaited_once_with("abc", password="n0va-senha")


def test_reset_password_failure(anonymous_client, supabase):
    supabase.update_user.side_effect = SupabaseAuthError("Token has expired", 401)

    response = anonymous_client.post("/api/auth/reset-password", json={"token": "abc", "password": "x"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Erro ao redefinir senha"


def admin_client(monkeypatch, pages):
    """SupabaseAuthClient whose admin user listing serves `pages` in order"""
    client = SupabaseAuthClient(url="https://sb.example.com", anon_key="anon", service_role_key="service")
    calls = []

    async def fake_request(method, path, headers, **kwargs):
        calls.append(kwargs["params"])
        users = pages[kwargs["params"]["page"] - 1] if kwargs["params"]["page"] <= len(pages) else []
        return httpx.Response(200, json={"users": users})

    monkeypatch.setattr(client, "_request", fake_request)
    return client, calls


def test_user_exists_needs_an_exact_email_match(monkeypatch):
    client, calls = admin_client(monkeypatch, [[{"email": "joana@x.com"}, {"email": "Ana@X.com"}]])

    assert asyncio.run(client.user_exists("ana@x.com")) is True
    assert calls[0]["per_page"] == USER_PAGE_SIZE

    client, _ = admin_client(monkeypatch, [[{"email": "joana@x.com"}]])
    assert asyncio.run(client.user_exists("ana@x.com")) is False


def test_user_exists_reads_following_pages(monkeypatch):
    crowded = [{"email": f"ana{i}@x.com"} for i in range(USER_PAGE_SIZE)]
    client, calls = admin_client(monkeypatch, [crowded, [{"email": "ana@x.com"}]])

    assert asyncio.run(client.user_exists("ana@x.com")) is True
    assert [c["page"] for c in calls] == [1, 2]

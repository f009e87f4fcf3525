"""
Pytest configuration and fixtures
"""

import os

# Configuration is read at import time; point everything at in-memory SQLite
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from viraweb import rate_limiter, realtime
from viraweb.auth import get_current_user
from viraweb.database import Base, SessionLocal, engine, get_db
from viraweb.main import app
from viraweb.models import Patient, Professional, User


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Redis stand-in for the rate limiter and the realtime feed"""
    client = MagicMock()
    client.get.return_value = None
    client.ttl.return_value = -2
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: client)
    monkeypatch.setattr(realtime, "_unavailable_until", 0.0)
    rate_limiter.memory_cache.clear()
    yield client
    rate_limiter.memory_cache.clear()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Captures outgoing email instead of talking to SMTP/Resend"""
    sender = AsyncMock(return_value={"id": "test-email"})
    monkeypatch.setattr("viraweb.email_service.send_email", sender)
    return sender


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def make_user(db, uid: str, email: str) -> User:
    user = User(supabase_uid=uid, email=email, full_name="Dra. Ana", clinic_name="Clínica Vida")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db) -> User:
    return make_user(db, "uid-owner", "owner@clinic.com")


@pytest.fixture
def other_user(db) -> User:
    return make_user(db, "uid-other", "other@clinic.com")


@pytest.fixture
def patient(db, user) -> Patient:
    patient = Patient(user_id=user.id, name="Maria Souza", email="maria@example.com", status="active")
    db.add(patient)
    db.commit()
    db.refresh(patient)
    return patient


@pytest.fixture
def professional(db, user) -> Professional:
    professional = Professional(user_id=user.id, name="Dr. João", specialty="Fisioterapia", status="active")
    db.add(professional)
    db.commit()
    db.refresh(professional)
    return professional


@pytest.fixture
def client(db, user):
    """TestClient authenticated as `user` (lifespan is not run)"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

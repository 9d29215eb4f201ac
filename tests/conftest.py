# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from core.config import settings
from core.rate_limiter import reset_rate_limits
from dependencies.auth import SessionUser, get_session_user
from main import create_app
from tests.fakes import ADMIN_EMAIL, ADMIN_ID, FakeSupabase


@pytest.fixture(autouse=True)
def supabase_settings(monkeypatch):
    """Every test runs against a 'configured' deployment unless it says otherwise."""
    monkeypatch.setattr(settings, "SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
    monkeypatch.setattr(settings, "APP_URL", "https://app.vaad.co.il")

@pytest.fixture(autouse=True)
def reset_limits():
    """Reset the in-memory rate limiter before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()

@pytest.fixture
def supabase(monkeypatch) -> FakeSupabase:
    """
    One in-memory Supabase shared by the service-role and anon
    clients, patched wherever a client factory is imported.
    """
    fake = FakeSupabase()
    factory = lambda: fake  # noqa: E731

    monkeypatch.setattr("core.supabase_client.get_supabase_client", factory)
    monkeypatch.setattr("core.supabase_client.get_anon_client", factory)
    monkeypatch.setattr("dependencies.auth.get_supabase_client", factory)
    monkeypatch.setattr("dependencies.auth.get_anon_client", factory)
    monkeypatch.setattr("core.session.get_anon_client", factory)
    monkeypatch.setattr("routers.auth.get_anon_client", factory)
    return fake

@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()

@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def login_as(app):
    """Override the session dependency: login_as("user-id", "email")."""

    def _login(user_id: str, email: str = None) -> SessionUser:
        user = SessionUser(id=user_id, email=email)
        app.dependency_overrides[get_session_user] = lambda: user
        return user

    return _login

@pytest.fixture
def admin(supabase, login_as) -> SessionUser:
    """Logged-in platform admin with a profile row."""
    supabase.auth.admin.add_user(ADMIN_EMAIL, ADMIN_ID)
    supabase.db.seed("profiles", {"id": ADMIN_ID, "full_name": "Admin", "role": "admin"})
    return login_as(ADMIN_ID, ADMIN_EMAIL)

@pytest.fixture
def building(supabase) -> dict:
    return supabase.db.seed(
        "buildings",
        {"id": "building-1", "name": "Herzl 12", "address": "Herzl 12", "city": "Tel Aviv"},
    )[0]

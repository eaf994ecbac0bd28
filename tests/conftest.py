"""Shared test fixtures."""

import os

# Settings are read at import time; the unit suite needs no real services.
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("STRIPE_SECRET_KEY", "")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "")

import uuid  # noqa: E402
from datetime import UTC, date, datetime  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.pt_common.database import get_db_session  # noqa: E402
from src.pt_gateway.auth.dependencies import get_current_user  # noqa: E402
from src.pt_gateway.user.db_models import UserModel  # noqa: E402


def make_user(is_active: bool = True, **overrides: object) -> UserModel:
    user = UserModel()
    user.id = uuid.UUID("11111111-2222-3333-4444-555555555555")
    user.username = "satoshi"
    user.email = "satoshi@example.com"
    user.first_name = "Satoshi"
    user.last_name = "Nakamoto"
    user.date_of_birth = date(1990, 1, 3)
    user.password_hash = "$2b$12$fakehash"
    user.is_active = is_active
    user.failed_login_attempts = 0
    user.account_locked_until = None
    user.last_login = None
    user.created_at = datetime(2026, 1, 1, tzinfo=UTC)
    for key, value in overrides.items():
        setattr(user, key, value)
    return user


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def current_user() -> UserModel:
    return make_user()


@pytest.fixture
def mock_session() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
async def auth_client(
    client: AsyncClient, current_user: UserModel, mock_session: AsyncMock
) -> AsyncClient:
    """Client with auth and DB session dependencies overridden."""

    async def _session():  # type: ignore[no-untyped-def]
        yield mock_session

    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_db_session] = _session
    yield client
    app.dependency_overrides.clear()

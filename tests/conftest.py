"""
Shared fixtures: mocked database session and an API test client.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from camboconnect.core.config import settings
from camboconnect.core.database import get_db
from camboconnect.main import app


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def client(mock_db):
    """Test client with the database session replaced by ``mock_db``."""

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def cron_secret(monkeypatch):
    """Configure the shared cron secret."""
    secret = "test-cron-secret"
    monkeypatch.setattr(settings, "cron_api_secret", secret)
    return secret


@pytest.fixture
def make_token():
    """Build access tokens the way the auth service issues them."""

    def _make(subject, expires_in=timedelta(minutes=60), **claims):
        now = datetime.now(UTC)
        payload = {"sub": subject, "type": "access", "iat": now, "exp": now + expires_in}
        payload.update(claims)
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    return _make


@pytest.fixture
def auth_headers(make_token):
    """Authorization header for a signed-in user with id ``user-1``."""
    token = make_token("user-1")
    return {"Authorization": f"Bearer {token}"}

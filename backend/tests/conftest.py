from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.factories import TEST_ADMIN_PASSWORD, TEST_ADMIN_USERNAME, TEST_JWT_SECRET


# ── Patch settings before any other import ──────────────────────────────────
@pytest.fixture(autouse=True)
def _patch_settings(monkeypatch):
    from catalog.core.config import settings
    monkeypatch.setattr(settings, "jwt_secret_key", TEST_JWT_SECRET)
    monkeypatch.setattr(settings, "jwt_access_token_expire_minutes", 15)
    monkeypatch.setattr(settings, "admin_username", TEST_ADMIN_USERNAME)
    monkeypatch.setattr(settings, "admin_password", TEST_ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "demo-cloud")
    monkeypatch.setattr(settings, "cloudinary_api_key", "key-123")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "secret-456")
    monkeypatch.setattr(settings, "api_base_url", "http://test/api")
    monkeypatch.setattr(settings, "whatsapp_number", "15550001111")


@pytest.fixture
def mock_db():
    """Create a mock async database session."""
    db = AsyncMock()
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.get = AsyncMock(return_value=None)
    db.execute = AsyncMock()
    db.refresh = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db

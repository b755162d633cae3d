"""
Tests for application configuration and settings validation.
"""

import os
import pytest
from unittest.mock import patch


def test_settings_loads_defaults():
    """Settings should load with sensible defaults in development."""
    from iqol.config import get_settings
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "ENVIRONMENT": "development",
        "DATABASE_URL": "postgresql+asyncpg://localhost/test",
        "SECRET_KEY": "change-me-in-production",
    }, clear=False):
        get_settings.cache_clear()
        settings = get_settings()
        assert settings.environment == "development"
        assert settings.is_production is False
        assert settings.dashboard_top_n == 5
        assert settings.persistence_retries == 0
        get_settings.cache_clear()


def test_plain_postgres_url_is_rewritten_for_asyncpg():
    from iqol.config import Settings
    settings = Settings(database_url="postgres://user:pw@db-host/iqol")
    assert settings.database_url == "postgresql+asyncpg://user:pw@db-host/iqol"


def test_settings_cors_origin_list():
    """CORS origins string should be split into a list."""
    from iqol.config import get_settings
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "ENVIRONMENT": "development",
        "CORS_ORIGINS": "http://localhost:3000, https://dashboard.iqol.in",
    }, clear=False):
        get_settings.cache_clear()
        settings = get_settings()
        origins = settings.cors_origin_list
        assert len(origins) == 2
        assert "http://localhost:3000" in origins
        assert "https://dashboard.iqol.in" in origins
        get_settings.cache_clear()


def test_production_rejects_default_secret():
    """Production mode should reject the default secret key."""
    from iqol.config import Settings

    with pytest.raises(ValueError, match="SECRET_KEY must be set"):
        Settings(
            environment="production",
            secret_key="change-me-in-production",
            database_url="postgresql+asyncpg://prod-host/db",
        )


def test_production_accepts_real_secret():
    """Production mode should accept a real secret key."""
    from iqol.config import Settings
    settings = Settings(
        environment="production",
        secret_key="a-real-secret-key-that-is-not-the-default",
        database_url="postgresql+asyncpg://prod-host/db",
    )
    assert settings.is_production is True
    assert settings.secret_key == "a-real-secret-key-that-is-not-the-default"


def test_negative_retries_rejected():
    from iqol.config import Settings
    with pytest.raises(ValueError, match="PERSISTENCE_RETRIES"):
        Settings(persistence_retries=-1)

"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from user_records.config import Settings


def test_development_defaults():
    """Test that development allows the default database and any origin."""
    settings = Settings(environment="development", _env_file=None)
    assert not settings.is_production
    assert settings.cors_origins == ["*"]


def test_production_rejects_localhost_database():
    """Test that production refuses a localhost database URL."""
    with pytest.raises(ValidationError, match="DATABASE_URL"):
        Settings(
            environment="production",
            database_url="postgresql://u:p@localhost/db",
            cors_origins=["https://example.com"],
            _env_file=None,
        )


def test_production_requires_explicit_origins():
    """Test that production refuses a wildcard CORS origin."""
    with pytest.raises(ValidationError, match="CORS_ORIGINS"):
        Settings(
            environment="production",
            database_url="postgresql://u:p@db.internal/db",
            _env_file=None,
        )


def test_production_settings():
    """Test a valid production configuration."""
    settings = Settings(
        environment="production",
        database_url="postgresql://u:p@db.internal/db",
        cors_origins=["https://example.com"],
        _env_file=None,
    )
    assert settings.is_production

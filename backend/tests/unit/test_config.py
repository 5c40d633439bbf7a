"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from celengan.config import Settings


@pytest.mark.unit
class TestSecretKey:
    def test_default_key_allowed_in_development(self):
        settings = Settings(ENVIRONMENT="development")
        assert settings.SECRET_KEY == "dev-secret-key-change-in-production"

    def test_default_key_rejected_in_production(self):
        with pytest.raises(ValidationError, match="Insecure SECRET_KEY"):
            Settings(ENVIRONMENT="production")

    def test_short_key_rejected_in_production(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="production", SECRET_KEY="x" * 16)

    def test_long_key_accepted_in_production(self):
        settings = Settings(ENVIRONMENT="production", SECRET_KEY="a" * 64)
        assert settings.ENVIRONMENT == "production"

"""Unit tests for configuration management."""

import pytest
import os
from unittest.mock import patch


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        from app.config import Settings

        with patch.dict(os.environ, {"BRIA_API_TOKEN": "test_token"}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.bria_api_token == "test_token"
            assert settings.bria_base_url == "https://engine.prod.bria-api.com/v2"
            assert settings.request_delay == 6.0
            assert settings.poll_interval == 2.0
            assert settings.max_poll_attempts == 60
            assert settings.request_timeout == 60.0
            assert settings.max_variations == 100
            assert settings.log_level == "INFO"
            assert settings.run_integration_tests is False

    def test_custom_values(self):
        """Test that custom values can be set via environment variables."""
        from app.config import Settings

        env_vars = {
            "BRIA_API_TOKEN": "custom_token",
            "BRIA_BASE_URL": "https://staging.example.com/v2",
            "REQUEST_DELAY": "1.5",
            "POLL_INTERVAL": "0.5",
            "MAX_POLL_ATTEMPTS": "10",
            "MAX_VARIATIONS": "20",
            "LOG_LEVEL": "DEBUG",
            "RUN_INTEGRATION_TESTS": "true"
        }

        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

            assert settings.bria_api_token == "custom_token"
            assert settings.bria_base_url == "https://staging.example.com/v2"
            assert settings.request_delay == 1.5
            assert settings.poll_interval == 0.5
            assert settings.max_poll_attempts == 10
            assert settings.max_variations == 20
            assert settings.log_level == "DEBUG"
            assert settings.run_integration_tests is True

    def test_validate_required_keys_success(self):
        """Test validation succeeds when the API token is present."""
        from app.config import Settings

        with patch.dict(os.environ, {"BRIA_API_TOKEN": "valid_token"}, clear=True):
            settings = Settings(_env_file=None)
            settings.validate_required_keys()  # Should not raise

    def test_validate_required_keys_missing_token(self):
        """Test validation fails when the API token is missing."""
        from app.config import Settings

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

            with pytest.raises(ValueError, match="BRIA_API_TOKEN is required"):
                settings.validate_required_keys()

    def test_case_insensitive(self):
        """Test that environment variable names are case insensitive."""
        from app.config import Settings

        with patch.dict(os.environ, {"bria_api_token": "lower_token"}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.bria_api_token == "lower_token"

    def test_invalid_integer(self):
        """Test that invalid numbers are rejected."""
        from app.config import Settings
        from pydantic import ValidationError

        with patch.dict(os.environ, {"MAX_POLL_ATTEMPTS": "many"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

"""
Unit tests for settings.
"""

import pytest
from pydantic import ValidationError

from submission_relay.config import Settings, get_settings
from tests.fixtures.aws_resources import TEST_AUDIT_TABLE, TEST_BUCKET


class TestSettings:
    """Tests for Settings."""

    def test_reads_prefixed_environment(self, settings):
        assert settings.storage_bucket_name == TEST_BUCKET
        assert settings.audit_table_name == TEST_AUDIT_TABLE
        assert settings.storage_credentials

    def test_sender_defaults(self, settings):
        assert settings.ses_from_address == "noreply@gecoding.me"
        assert settings.ses_from_name == "No Reply"
        assert settings.email_credentials is None

    def test_sender_outside_domain_rejected(self, monkeypatch):
        monkeypatch.setenv("RELAY_SES_FROM_ADDRESS", "noreply@example.org")

        with pytest.raises(ValidationError, match="is not in ses_domain"):
            Settings()

    def test_sender_domain_override(self, monkeypatch):
        monkeypatch.setenv("RELAY_SES_DOMAIN", "Example.org")
        monkeypatch.setenv("RELAY_SES_FROM_ADDRESS", "noreply@example.org")

        assert Settings().ses_from_address == "noreply@example.org"

    def test_http_timeout_tuple(self, settings):
        assert settings.http_timeout == (5.0, 30.0)

    def test_botocore_config_is_bounded(self, settings):
        config = settings.botocore_config

        assert config.connect_timeout == 5
        assert config.read_timeout == 60
        assert config.retries["max_attempts"] == 1

    def test_endpoint_overrides(self, monkeypatch):
        monkeypatch.setenv("RELAY_STORAGE_ENDPOINT_URL", "http://localhost:4566")
        monkeypatch.setenv("RELAY_DYNAMODB_ENDPOINT_URL", "http://localhost:8000")

        settings = Settings()

        assert settings.s3_config["endpoint_url"] == "http://localhost:4566"
        assert settings.dynamodb_config["endpoint_url"] == "http://localhost:8000"
        assert "endpoint_url" not in settings.ses_config

    def test_chunk_size_below_multipart_minimum_rejected(self, monkeypatch):
        monkeypatch.setenv("RELAY_TRANSFER_CHUNK_SIZE", str(1024 * 1024))

        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("RELAY_LOG_LEVEL", "VERBOSE")

        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_is_cached(self, settings):
        assert get_settings() is get_settings()

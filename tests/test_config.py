"""Unit tests for environment-sourced settings."""

import pytest
from pydantic import ValidationError

from src.cache.retry import ReconnectionPolicy
from src.config import DEFAULT_PORT, Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Test suite for Settings.from_env()."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        for name in ("PORT", "REDIS_HOST", "REDIS_READER_HOST", "REDIS_PORT", "REDIS_DEBUG_MODE",
                     "REDIS_CLOSE_AFTER_OPERATION"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.port == DEFAULT_PORT
        assert settings.redis_host == "localhost"
        assert settings.redis_port == 6379
        assert settings.reader_host == "localhost"
        assert settings.redis_debug_mode is False
        assert settings.redis_close_after_operation is False

    def test_reads_environment(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("REDIS_HOST", "cache.internal")
        monkeypatch.setenv("REDIS_READER_HOST", "replica.internal")
        monkeypatch.setenv("REDIS_PORT", "6380")
        monkeypatch.setenv("REDIS_DEBUG_MODE", "true")
        monkeypatch.setenv("REDIS_PASSWORD", "s3cret")

        settings = get_settings()

        assert settings.port == 9000
        assert settings.redis_host == "cache.internal"
        assert settings.reader_host == "replica.internal"
        assert settings.redis_port == 6380
        assert settings.redis_debug_mode is True
        assert settings.redis_password.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(settings)

    def test_invalid_port_falls_back(self, monkeypatch):
        """Test a non-numeric PORT falls back to the default."""
        monkeypatch.setenv("PORT", "not-a-port")

        assert Settings.from_env().port == DEFAULT_PORT

    def test_invalid_redis_port_rejected(self, monkeypatch):
        """Test a non-numeric REDIS_PORT is a validation error."""
        monkeypatch.setenv("REDIS_PORT", "abc")

        with pytest.raises(ValidationError):
            Settings.from_env()

    def test_invalid_transport_rejected(self):
        """Test unknown transports are rejected."""
        with pytest.raises(ValidationError):
            Settings(transport="carrier-pigeon")

    def test_reconnect_limits(self, monkeypatch):
        """Test reconnect limits flow into the policy."""
        monkeypatch.setenv("REDIS_RECONNECT_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("REDIS_RECONNECT_MAX_TIME_MS", "2000")

        policy = ReconnectionPolicy.from_settings(Settings.from_env())

        assert policy.max_attempts == 3
        assert policy.max_retry_time_ms == 2000
        assert policy.ceiling_ms == 3000

    def test_non_positive_limit_rejected(self):
        """Test reconnect limits must be positive."""
        with pytest.raises(ValidationError):
            Settings(redis_reconnect_max_attempts=0)

    def test_settings_cached(self):
        """Test get_settings() returns the same instance."""
        assert get_settings() is get_settings()

    def test_transport_read_from_mcp_transport(self, monkeypatch):
        """Test the transport comes from MCP_TRANSPORT."""
        monkeypatch.setenv("MCP_TRANSPORT", "streamable-http")

        assert Settings.from_env().transport == "streamable-http"

    def test_unknown_transport_in_environment_rejected(self, monkeypatch):
        """Test an unknown MCP_TRANSPORT is a validation error."""
        monkeypatch.setenv("MCP_TRANSPORT", "carrier-pigeon")

        with pytest.raises(ValidationError):
            Settings.from_env()

    def test_empty_variables_count_as_unset(self, monkeypatch):
        """Test empty reader host and password fall back to their defaults."""
        monkeypatch.setenv("REDIS_HOST", "cache.internal")
        monkeypatch.setenv("REDIS_READER_HOST", "")
        monkeypatch.setenv("REDIS_PASSWORD", "")
        monkeypatch.setenv("REDIS_RECONNECT_MAX_ATTEMPTS", "")

        settings = Settings.from_env()

        assert settings.reader_host == "cache.internal"
        assert settings.redis_password is None
        assert settings.redis_reconnect_max_attempts == 10

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("off", False), ("0", False)])
    def test_boolean_flags(self, monkeypatch, value, expected):
        """Test boolean flags accept the usual spellings."""
        monkeypatch.setenv("REDIS_CLOSE_AFTER_OPERATION", value)

        assert Settings.from_env().redis_close_after_operation is expected

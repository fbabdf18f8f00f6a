"""
Environment-sourced configuration for the cache service.

Settings are loaded from environment variables with pydantic-settings and
validated once per process. Use get_settings() instead of reading os.environ
directly so tests can override values with get_settings.cache_clear().
"""
from functools import lru_cache
from typing import Any, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 8021
TRANSPORTS = ("sse", "streamable-http", "stdio")


class Settings(BaseSettings):
    """
    Process configuration.

    Field names map to upper-case environment variables (REDIS_HOST,
    REDIS_PORT, ...); the transport is read from MCP_TRANSPORT. Empty
    variables count as unset.

    Attributes:
        app_name: Service name used in logs
        exec_env: Execution environment label (dev, staging, prod)
        environment: "development" switches logging to console output
        host: Bind address for the HTTP transport
        port: Bind port for the HTTP transport
        log_level: Root log level
        transport: MCP transport (sse, streamable-http, stdio)
        redis_host: Primary backend host
        redis_port: Backend port (shared by all roles)
        redis_reader_host: Reader backend host (defaults to redis_host)
        redis_db: Backend database index
        redis_password: Optional backend password
        redis_debug_mode: Enable redis client debug logging
        redis_close_after_operation: Close connections after every operation
        redis_reconnect_max_attempts: Give up connecting after this many failures
        redis_reconnect_max_time_ms: Give up connecting after this much retry time
    """

    app_name: str = "sample-app"
    exec_env: str = "dev"
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    log_level: str = "INFO"
    transport: str = Field("sse", validation_alias=AliasChoices("mcp_transport", "transport"))

    # Redis
    redis_host: str = "localhost"
    redis_port: int = Field(6379, ge=1, le=65535)
    redis_reader_host: Optional[str] = None
    redis_db: int = Field(0, ge=0)
    redis_password: Optional[SecretStr] = None
    redis_debug_mode: bool = False
    redis_close_after_operation: bool = False
    redis_reconnect_max_attempts: Optional[int] = Field(10, gt=0)
    redis_reconnect_max_time_ms: Optional[int] = Field(15000, gt=0)

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    @field_validator("port", mode="before")
    @classmethod
    def _port_or_default(cls, value: Any) -> Any:
        # A non-numeric PORT falls back to the default
        try:
            return int(value)
        except (TypeError, ValueError):
            return DEFAULT_PORT

    @field_validator("transport")
    @classmethod
    def _check_transport(cls, value: str) -> str:
        if value not in TRANSPORTS:
            raise ValueError(f"transport must be one of {TRANSPORTS}, got {value!r}")
        return value

    @property
    def reader_host(self) -> str:
        return self.redis_reader_host or self.redis_host

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls()


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (read from the environment once)."""
    return Settings.from_env()

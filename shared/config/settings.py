"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RateLimitBackend(str, Enum):
    """Where rate limit windows are kept."""

    MEMORY = "memory"
    REDIS = "redis"


class WorldIDSettings(BaseSettings):
    """World ID verification authority configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WORLDID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_id: str = Field(
        default="app_staging_your_app_id_here",
        alias="WORLDCOIN_APP_ID",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        alias="WORLDCOIN_API_KEY",
    )
    api_url: str = "https://developer.worldcoin.org/api/v1/verify"
    timeout_seconds: float = 10.0
    enforce_hash_format: bool = True

    @property
    def has_api_key(self) -> bool:
        """Check whether an API credential was supplied."""
        return bool(self.api_key.get_secret_value())


class RedisSettings(BaseSettings):
    """Redis configuration (shared rate limit windows)."""

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr = SecretStr("")
    db: int = 0

    @property
    def url(self) -> str:
        """Generate Redis connection URL."""
        pwd = self.password.get_secret_value()
        auth = f":{pwd}@" if pwd else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = True
    requests: int = Field(default=10, ge=1)
    window_ms: int = Field(default=60_000, ge=1)
    backend: RateLimitBackend = RateLimitBackend.MEMORY
    max_keys: int = Field(default=10_000, ge=1)
    trust_forwarded_for: bool = False
    redis_key_prefix: str = "ratelimit:verify"


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    origins: str = "http://localhost:3000"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = Field(default=8004, alias="VERIFICATION_PORT")

    # Verification authority
    worldid: WorldIDSettings = Field(default_factory=WorldIDSettings)

    # Shared state
    redis: RedisSettings = Field(default_factory=RedisSettings)

    # Security
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def expose_error_details(self) -> bool:
        """Whether internal error text may be returned to callers."""
        return not self.is_production


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()

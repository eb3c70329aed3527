"""
Configuration management for sourceauth.

This module handles all library configuration using Pydantic Settings
for environment variable management and validation.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VaultConfig(BaseSettings):
    """Credential vault configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="CREDENTIAL_",
        case_sensitive=False,
        extra="ignore"
    )

    encryption_key: Optional[SecretStr] = Field(
        default=None,
        description="Process-wide secret the vault master key is derived from"
    )
    kdf_salt: str = Field(
        default="sourceauth-credential-vault",
        description="Salt used when deriving the master key",
        min_length=1
    )
    kdf_iterations: int = Field(
        default=600_000,
        description="PBKDF2 iteration count for master key derivation",
        ge=1
    )


class SessionConfig(BaseSettings):
    """Session lifecycle configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        case_sensitive=False,
        extra="ignore"
    )

    ttl: int = Field(
        default=3600,
        description="Session time-to-live in seconds",
        ge=1
    )
    cleanup_interval: int = Field(
        default=300,
        description="Seconds between expired-session sweeps",
        ge=1
    )


class HTTPConfig(BaseSettings):
    """Outbound HTTP configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="HTTP_",
        case_sensitive=False,
        extra="ignore"
    )

    timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for every authenticate/refresh/test call",
        gt=0,
        le=300
    )
    max_retries: int = Field(
        default=2,
        description="Retries for timeouts, connection errors and 502/503/504",
        ge=0,
        le=10
    )
    retry_delay: float = Field(
        default=0.5,
        description="Base delay for exponential retry backoff in seconds",
        ge=0
    )
    user_agent: Optional[str] = Field(
        default=None,
        description="User-Agent header override"
    )


class LoggingConfig(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Logging level"
    )
    format: str = Field(
        default="json",
        description="Log format (json or text)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = {"json", "text"}
        if v.lower() not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v.lower()


class Settings(BaseSettings):
    """Main library settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = Field(
        default="sourceauth",
        description="Library name, used in the outbound User-Agent"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Library version"
    )
    environment: str = Field(
        default="development",
        description="Deployment environment"
    )

    vault: VaultConfig = Field(default_factory=VaultConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment."""
        valid_envs = {"development", "staging", "production", "testing"}
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v.lower()

    @property
    def user_agent(self) -> str:
        return self.http.user_agent or f"{self.app_name}/{self.app_version}"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get library settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global _settings
    _settings = Settings()
    return _settings

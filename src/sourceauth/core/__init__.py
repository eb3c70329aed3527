"""
Core modules for sourceauth.

This package contains the core infrastructure components including
configuration, exceptions, logging, and security utilities.
"""

from __future__ import annotations

from .config import (
    HTTPConfig,
    LoggingConfig,
    SessionConfig,
    Settings,
    VaultConfig,
    get_settings,
    reload_settings,
)
from .exceptions import (
    SourceAuthError,
    ConfigurationError,
    MissingConfigurationError,
    UnsupportedAuthTypeError,
    CredentialError,
    NoCredentialsFoundError,
    DecryptionFailedError,
    MissingCredentialsError,
    AuthenticationError,
    NonSuccessStatusError,
    NoTokenInResponseError,
    NoCookiesReceivedError,
    NetworkError,
    SessionError,
    SessionNotFoundError,
    SessionSourceMismatchError,
    AuthNotRequiredError,
    get_error_message,
)
from .logging import (
    get_logger,
    setup_logging,
    log_auth_event,
    log_api_call,
    log_error,
    LoggerMixin,
)
from .security import (
    basic_auth_token,
    generate_session_id,
    is_token_expired,
    mask_sensitive_data,
    utcnow,
)

__all__ = [
    # Configuration
    "HTTPConfig",
    "LoggingConfig",
    "SessionConfig",
    "Settings",
    "VaultConfig",
    "get_settings",
    "reload_settings",
    # Exceptions
    "SourceAuthError",
    "ConfigurationError",
    "MissingConfigurationError",
    "UnsupportedAuthTypeError",
    "CredentialError",
    "NoCredentialsFoundError",
    "DecryptionFailedError",
    "MissingCredentialsError",
    "AuthenticationError",
    "NonSuccessStatusError",
    "NoTokenInResponseError",
    "NoCookiesReceivedError",
    "NetworkError",
    "SessionError",
    "SessionNotFoundError",
    "SessionSourceMismatchError",
    "AuthNotRequiredError",
    "get_error_message",
    # Logging
    "get_logger",
    "setup_logging",
    "log_auth_event",
    "log_api_call",
    "log_error",
    "LoggerMixin",
    # Security
    "basic_auth_token",
    "generate_session_id",
    "is_token_expired",
    "mask_sensitive_data",
    "utcnow",
]

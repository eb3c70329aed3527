"""
Custom exceptions for sourceauth.

Strategies and the vault raise these; the session manager catches them at
its public boundary and reports them as tagged failure results carrying the
``error_code``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SourceAuthError(Exception):
    """Base exception for all sourceauth errors."""

    def __init__(
        self,
        message: str,
        error_type: str = "source_auth_error",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        error_dict = {
            "message": self.message,
            "type": self.error_type,
        }

        if self.error_code:
            error_dict["code"] = self.error_code

        if self.details:
            error_dict.update(self.details)

        return {"error": error_dict}


class ConfigurationError(SourceAuthError):
    """Missing master key, invalid settings or missing source metadata."""

    def __init__(
        self,
        message: str = "Configuration error",
        error_code: Optional[str] = "configuration_error",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="configuration_error",
            error_code=error_code,
            details=details
        )


class MissingConfigurationError(ConfigurationError):
    """A metadata key the strategy needs is not set on the source."""

    def __init__(
        self,
        message: str = "Required source configuration is missing",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="missing_configuration",
            details=details
        )


class UnsupportedAuthTypeError(ConfigurationError):
    """The source names an auth type no strategy handles."""

    def __init__(
        self,
        auth_type: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Unsupported authentication type '{auth_type}'",
            error_code="unsupported_auth_type",
            details=details
        )
        self.auth_type = auth_type


class CredentialError(SourceAuthError):
    """Missing or undecryptable credentials."""

    def __init__(
        self,
        message: str = "Credential error",
        error_code: Optional[str] = "credential_error",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="credential_error",
            error_code=error_code,
            details=details
        )


class NoCredentialsFoundError(CredentialError):
    """The source has no encrypted blob/IV pair stored."""

    def __init__(
        self,
        message: str = "No credentials found for source",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="no_credentials_found",
            details=details
        )


class DecryptionFailedError(CredentialError):
    """The stored credential blob could not be decrypted."""

    def __init__(
        self,
        message: str = "Failed to decrypt credentials",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="decryption_failed",
            details=details
        )


class MissingCredentialsError(CredentialError):
    """Decrypted credentials lack the fields a strategy requires."""

    def __init__(
        self,
        message: str = "Required credentials are missing",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="missing_credentials",
            details=details
        )


class AuthenticationError(SourceAuthError):
    """The remote side rejected the credentials or answered unexpectedly."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: Optional[str] = "authentication_error",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="authentication_error",
            error_code=error_code,
            details=details
        )


class NonSuccessStatusError(AuthenticationError):
    """Upstream answered with a status code of 400 or above."""

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message or f"Authentication failed with status {status_code}",
            error_code="non_success_status",
            details={"status_code": status_code, **(details or {})}
        )
        self.status_code = status_code


class NoTokenInResponseError(AuthenticationError):
    """Token endpoint reply carried no ``access_token``."""

    def __init__(
        self,
        message: str = "No access token in response",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="no_token_in_response",
            details=details
        )


class NoCookiesReceivedError(AuthenticationError):
    """Login reply set no cookies."""

    def __init__(
        self,
        message: str = "No cookies received from login",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="no_cookies_received",
            details=details
        )


class NetworkError(SourceAuthError):
    """Timeout or connection failure talking to a source."""

    def __init__(
        self,
        message: str = "Network failure",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="network_error",
            error_code="network_failure",
            details=details
        )


class SessionError(SourceAuthError):
    """Session lookup or ownership errors."""

    def __init__(
        self,
        message: str = "Session error",
        error_code: Optional[str] = "session_error",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="session_error",
            error_code=error_code,
            details=details
        )


class SessionNotFoundError(SessionError):
    """Session id is unknown or the session has expired."""

    def __init__(
        self,
        message: str = "Session not found or expired",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="session_not_found",
            details=details
        )


class SessionSourceMismatchError(SessionError):
    """Session belongs to a different source than the one supplied."""

    def __init__(
        self,
        message: str = "Session source mismatch",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="session_source_mismatch",
            details=details
        )


class AuthNotRequiredError(SessionError):
    """A session was requested for a source that needs no authentication."""

    def __init__(
        self,
        message: str = "Source does not require authentication",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="auth_not_required",
            details=details
        )


# Error code mappings for common scenarios
ERROR_CODES = {
    # Configuration errors
    "configuration_error": "The library is not configured correctly",
    "missing_master_key": "CREDENTIAL_ENCRYPTION_KEY is not set",
    "missing_http_client": "No HTTP client was supplied to the session manager",
    "missing_configuration": "A required source metadata key is missing",
    "unsupported_auth_type": "The source uses an unsupported authentication type",

    # Credential errors
    "no_credentials_found": "No credentials are stored for the source",
    "decryption_failed": "Stored credentials could not be decrypted",
    "missing_credentials": "Credentials lack a field the authentication type needs",

    # Authentication errors
    "non_success_status": "The source rejected the authentication attempt",
    "no_token_in_response": "The token endpoint returned no access token",
    "no_cookies_received": "The login page set no cookies",

    # Network errors
    "network_failure": "The source could not be reached",

    # Session errors
    "session_not_found": "The session does not exist or has expired",
    "session_source_mismatch": "The session belongs to a different source",
    "auth_not_required": "The source does not require authentication",

    # Anything else
    "internal_error": "An unexpected error occurred while authenticating",
}


def get_error_message(error_code: str) -> str:
    """Get human-readable error message for error code."""
    return ERROR_CODES.get(error_code, "An unknown error occurred")

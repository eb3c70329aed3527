"""
sourceauth - authentication sessions for protected content sources.

This package turns encrypted, at-rest source credentials into live
authentication context (headers) for outbound requests, and manages that
context's lifecycle across basic, bearer, API key, cookie and OAuth sources.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "Authentication session manager for protected content sources"

# Core exports
from .core import get_settings, get_logger
from .auth import (
    CredentialVault,
    SessionStore,
    SourceAuthManager,
    create_session_manager,
    to_headers,
)
from .models import AuthType, Credentials, Session, SessionResult, Source

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "get_settings",
    "get_logger",
    "CredentialVault",
    "SessionStore",
    "SourceAuthManager",
    "create_session_manager",
    "to_headers",
    "AuthType",
    "Credentials",
    "Session",
    "SessionResult",
    "Source",
]

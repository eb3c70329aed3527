"""
sourceauth data models.

This module provides the Pydantic models for sources, credentials, session
data and the tagged results returned by the session manager.
"""

from __future__ import annotations

# Authentication models
from .auth import (
    AuthType,
    Credentials,
    BasicSessionData,
    TokenSessionData,
    BearerSessionData,
    OAuthSessionData,
    ApiKeySessionData,
    CookieSessionData,
    SessionData,
)

# Source models
from .source import (
    AUTH_METADATA_KEYS,
    MetadataKey,
    Source,
    SourceType,
    StoredCredentials,
    update_auth_metadata,
)

# Session models
from .session import (
    AuthTestResult,
    Session,
    SessionResult,
)

__all__ = [
    # Authentication models
    "AuthType",
    "Credentials",
    "BasicSessionData",
    "TokenSessionData",
    "BearerSessionData",
    "OAuthSessionData",
    "ApiKeySessionData",
    "CookieSessionData",
    "SessionData",
    # Source models
    "AUTH_METADATA_KEYS",
    "MetadataKey",
    "Source",
    "SourceType",
    "StoredCredentials",
    "update_auth_metadata",
    # Session models
    "AuthTestResult",
    "Session",
    "SessionResult",
]

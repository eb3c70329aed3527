"""
Authentication modules for sourceauth.

This package contains the credential vault, the authentication strategies,
the session store, the header translator and the session manager façade.
"""

from __future__ import annotations

from .headers import to_headers
from .session_manager import SourceAuthManager, create_session_manager
from .session_store import CleanupHandle, SessionStore
from .strategies import (
    AuthStrategy,
    StrategyContext,
    build_strategies,
    resolve_auth_type,
)
from .vault import (
    CredentialVault,
    derive_master_key,
    generate_master_key,
    seal_source_credentials,
)

__all__ = [
    # Session management
    "SourceAuthManager",
    "create_session_manager",
    "SessionStore",
    "CleanupHandle",
    "to_headers",
    # Strategies
    "AuthStrategy",
    "StrategyContext",
    "build_strategies",
    "resolve_auth_type",
    # Vault
    "CredentialVault",
    "derive_master_key",
    "generate_master_key",
    "seal_source_credentials",
]

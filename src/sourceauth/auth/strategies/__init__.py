"""Authentication strategies and their dispatch table.

Each supported :class:`~sourceauth.models.AuthType` maps to exactly one
strategy class in :data:`STRATEGY_TYPES`; :func:`build_strategies`
instantiates the full set around a shared :class:`StrategyContext`.
"""

from __future__ import annotations

from typing import Dict, Mapping, Type

from ...core import UnsupportedAuthTypeError
from ...models import AuthType, MetadataKey, Source, SourceType
from .api_key import ApiKeyAuthStrategy
from .base import AuthStrategy, StrategyContext
from .basic import BasicAuthStrategy
from .bearer import BearerAuthStrategy
from .cookie import CookieAuthStrategy, extract_cookies
from .oauth import OAuthStrategy

STRATEGY_TYPES: Mapping[AuthType, Type[AuthStrategy]] = {
    AuthType.BASIC: BasicAuthStrategy,
    AuthType.BEARER: BearerAuthStrategy,
    AuthType.API_KEY: ApiKeyAuthStrategy,
    AuthType.COOKIE: CookieAuthStrategy,
    AuthType.OAUTH: OAuthStrategy,
}

# Used when a source's metadata names no authType
DEFAULT_AUTH_TYPES: Mapping[str, AuthType] = {
    SourceType.ACADEMIC.value: AuthType.COOKIE,
    SourceType.BLOG.value: AuthType.BASIC,
    SourceType.PODCAST.value: AuthType.API_KEY,
    SourceType.SOCIAL.value: AuthType.OAUTH,
    SourceType.WEBSITE.value: AuthType.BASIC,
}


def resolve_auth_type(source: Source) -> AuthType:
    """
    Determine the authentication type for a source.

    Args:
        source: Source record

    Returns:
        The metadata ``authType`` if set, else the default for the source category

    Raises:
        UnsupportedAuthTypeError: If the metadata names an unknown type
    """
    configured = source.meta(MetadataKey.AUTH_TYPE)
    if configured is None:
        return DEFAULT_AUTH_TYPES.get(source.type, AuthType.BASIC)
    try:
        return AuthType(configured.strip().lower())
    except ValueError:
        raise UnsupportedAuthTypeError(configured, details={"source_id": source.id}) from None


def build_strategies(context: StrategyContext) -> Dict[AuthType, AuthStrategy]:
    """Instantiate one strategy per supported auth type."""
    return {auth_type: cls(context) for auth_type, cls in STRATEGY_TYPES.items()}


__all__ = [
    "AuthStrategy",
    "StrategyContext",
    "ApiKeyAuthStrategy",
    "BasicAuthStrategy",
    "BearerAuthStrategy",
    "CookieAuthStrategy",
    "OAuthStrategy",
    "STRATEGY_TYPES",
    "DEFAULT_AUTH_TYPES",
    "build_strategies",
    "extract_cookies",
    "resolve_auth_type",
]

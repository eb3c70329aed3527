"""Abstract base class for authentication strategies.

This module defines the shared contract of the strategy set:

- :class:`StrategyContext` -- the collaborators every strategy is built with
  (HTTP client, credential loader, clock).
- :class:`AuthStrategy` -- the abstract base every protocol extends.

A strategy turns a source plus decrypted credentials into self-sufficient
session data via :meth:`~AuthStrategy.authenticate`, and may bring that data
back to life via :meth:`~AuthStrategy.refresh`. Failures are raised as
:class:`~sourceauth.core.exceptions.SourceAuthError` subclasses; the session
manager turns them into tagged results.

See Also:
    :mod:`sourceauth.auth.strategies` for the dispatch table.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional

import httpx

from ...core import (
    LoggerMixin,
    MissingConfigurationError,
    NonSuccessStatusError,
    NoTokenInResponseError,
)
from ...models import AuthType, Credentials, SessionData, Source
from ...utils import HTTPClient

DEFAULT_TOKEN_LIFETIME = 3600


@dataclass(frozen=True)
class StrategyContext:
    """Collaborators shared by all strategies.

    Attributes:
        http: Client for every outbound login, token and validation call.
        load_credentials: Decrypts a source's stored credentials; raises a
            ``CredentialError`` when there are none or they are unreadable.
        clock: Returns the current timezone-aware time.
    """

    http: HTTPClient
    load_credentials: Callable[[Source], Credentials]
    clock: Callable[[], datetime]


class AuthStrategy(LoggerMixin, ABC):
    """Abstract base class for authentication strategies.

    Subclasses set :attr:`auth_type` and implement :meth:`authenticate`.
    Protocols whose session material can go stale override :meth:`refresh`.
    """

    auth_type: ClassVar[AuthType]

    def __init__(self, context: StrategyContext) -> None:
        self.context = context

    @property
    def http(self) -> HTTPClient:
        return self.context.http

    def now(self) -> datetime:
        return self.context.clock()

    @abstractmethod
    async def authenticate(self, source: Source, credentials: Credentials) -> SessionData:
        """Turn credentials into session data for ``source``.

        Args:
            source: The source being authenticated against.
            credentials: Decrypted or caller-supplied credentials.

        Returns:
            Session data the header translator can use without further calls.

        Raises:
            SourceAuthError: On missing input, rejection or network failure.
        """
        ...

    async def refresh(self, source: Source, data: SessionData) -> Optional[SessionData]:
        """Bring session data up to date.

        The default implementation treats the data as permanently valid.

        Returns:
            New session data, or ``None`` when the current data is still good.
        """
        return None

    def _require_meta(self, source: Source, key: str) -> str:
        value = source.meta(key)
        if value is None:
            raise MissingConfigurationError(
                f"Source metadata '{key}' is required for {self.auth_type.value} authentication",
                details={"key": key},
            )
        return value

    async def _probe(self, url: str, headers: Mapping[str, str], purpose: str) -> httpx.Response:
        """GET ``url`` with auth headers; status 400 and above is a rejection."""
        response = await self.http.get(url, headers=headers)
        if response.status_code >= 400:
            raise NonSuccessStatusError(
                response.status_code,
                message=f"{purpose} failed with status {response.status_code}",
            )
        return response

    async def _token_request(self, token_url: str, form: Dict[str, str]) -> Dict[str, Any]:
        """POST a form-encoded token grant and return the parsed reply.

        Grants are not idempotent, so the call is made exactly once.

        Raises:
            NetworkError: If the endpoint cannot be reached.
            NonSuccessStatusError: If the endpoint answers 400 or above.
            NoTokenInResponseError: If the reply has no ``access_token``.
        """
        response = await self.http.post(
            token_url,
            data=form,
            headers={"Accept": "application/json"},
            retries=0,
        )
        if response.status_code >= 400:
            raise NonSuccessStatusError(
                response.status_code,
                message=f"Token request failed with status {response.status_code}",
            )
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or not isinstance(payload.get("access_token"), str) \
                or not payload["access_token"]:
            raise NoTokenInResponseError()
        return payload

    def _token_expiry(self, payload: Mapping[str, Any]) -> datetime:
        """Absolute expiry from a token reply's ``expires_in``."""
        try:
            expires_in = float(payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        except (TypeError, ValueError):
            expires_in = DEFAULT_TOKEN_LIFETIME
        return self.now() + timedelta(seconds=expires_in)

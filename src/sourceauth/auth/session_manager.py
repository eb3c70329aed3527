"""
Session management for sourceauth.

:class:`SourceAuthManager` is the public façade of the library. It turns a
source record (plus its encrypted credentials) into a live session, refreshes
and tears sessions down, and translates them into request headers. Expected
failures never escape as exceptions: they come back as tagged
:class:`~sourceauth.models.SessionResult` values carrying an ``error_code``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..core import (
    AuthNotRequiredError,
    ConfigurationError,
    SessionNotFoundError,
    SessionSourceMismatchError,
    Settings,
    SourceAuthError,
    generate_session_id,
    get_logger,
    get_settings,
    log_auth_event,
    log_error,
    mask_sensitive_data,
    utcnow,
)
from ..models import (
    AuthTestResult,
    AuthType,
    Credentials,
    MetadataKey,
    Session,
    SessionResult,
    Source,
)
from ..utils import HTTPClient
from .headers import to_headers
from .session_store import CleanupHandle, SessionStore
from .strategies import AuthStrategy, StrategyContext, build_strategies, resolve_auth_type
from .vault import CredentialVault


class SourceAuthManager:
    """Creates, refreshes and tears down authentication sessions for sources.

    Args:
        http_client: Client for every outbound auth call. Required.
        vault: Decrypts credentials stored on source records.
        store: Session store; a fresh one is created when omitted.
        settings: Library settings; defaults to :func:`get_settings`.
        clock: Returns the current timezone-aware time.

    Raises:
        ConfigurationError: If no HTTP client is supplied.
    """

    def __init__(
        self,
        http_client: Optional[HTTPClient],
        vault: CredentialVault,
        store: Optional[SessionStore] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if http_client is None:
            raise ConfigurationError(
                "An HTTP client must be configured for source authentication",
                error_code="missing_http_client",
            )

        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)
        self.http = http_client
        self.vault = vault
        self.clock = clock or utcnow
        self.store = store if store is not None else SessionStore(clock=self.clock)
        self.session_ttl = timedelta(seconds=self.settings.session.ttl)

        self._strategies = build_strategies(StrategyContext(
            http=http_client,
            load_credentials=self.vault.decrypt_source,
            clock=self.clock,
        ))
        self._cleanup: Optional[CleanupHandle] = None

    async def __aenter__(self) -> SourceAuthManager:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def create_session(
        self,
        source: Source,
        credentials: Optional[Credentials] = None,
    ) -> SessionResult:
        """
        Create authentication session for a source.

        Args:
            source: Source record
            credentials: Credentials to use instead of the stored ones

        Returns:
            Session id, expiry and auth type, or a tagged failure
        """
        try:
            if not source.requires_authentication:
                self.logger.warning(
                    "Attempted to create session for non-authenticated source",
                    source_id=source.id,
                    source_name=source.name,
                )
                raise AuthNotRequiredError()

            if credentials is None:
                credentials = self.vault.decrypt_source(source)

            auth_type = resolve_auth_type(source)
            data = await self._strategy(auth_type).authenticate(source, credentials)

            now = self.clock()
            session = Session(
                session_id=generate_session_id(),
                source_id=source.id,
                auth_type=auth_type,
                data=data,
                created_at=now,
                expires_at=now + self.session_ttl,
            )
            self.store.put(session)
        except SourceAuthError as e:
            log_auth_event(
                self.logger,
                "session_create_failed",
                source_id=source.id,
                success=False,
                details={"error_code": e.error_code, "reason": e.message},
            )
            return SessionResult.fail(e)
        except Exception as e:
            log_error(self.logger, e, context={"operation": "create_session"}, source_id=source.id)
            return SessionResult.fail(_internal_error(e))

        log_auth_event(
            self.logger,
            "session_created",
            source_id=source.id,
            details={
                "session_id": mask_sensitive_data(session.session_id),
                "auth_type": auth_type.value,
                "expires_at": session.expires_at.isoformat(),
            },
        )
        return SessionResult.ok(session)

    def get_session(self, session_id: str) -> Optional[Session]:
        """
        Get authentication session.

        Args:
            session_id: Session identifier

        Returns:
            Session if found and unexpired, None otherwise
        """
        return self.store.get(session_id)

    async def refresh_session(self, session_id: str, source: Source) -> SessionResult:
        """
        Refresh authentication session.

        Only a live session can be refreshed. The strategy decides whether
        the session's data needs renewing. A successful refresh opens a new
        TTL window: ``expires_at`` becomes now plus the session TTL, which is
        a hard ceiling for that window. A session not refreshed before its
        ``expires_at`` is gone for good, as is one deleted or swept while the
        refresh was in flight. On failure the stored session is left exactly
        as it was.

        Args:
            session_id: Session identifier
            source: Source the session belongs to

        Returns:
            Updated session information, or a tagged failure
        """
        try:
            session = self.store.get(session_id)
            if session is None:
                raise SessionNotFoundError()

            if session.source_id != source.id:
                raise SessionSourceMismatchError(
                    details={"session_source_id": session.source_id, "source_id": source.id},
                )

            new_data = await self._strategy(session.auth_type).refresh(source, session.data)

            updated = session.model_copy(update={
                "data": new_data if new_data is not None else session.data,
                "expires_at": self.clock() + self.session_ttl,
            })
            if not self.store.replace_if_present(updated):
                # Deleted or expired while the strategy was refreshing
                raise SessionNotFoundError()
        except SourceAuthError as e:
            log_auth_event(
                self.logger,
                "session_refresh_failed",
                source_id=source.id,
                success=False,
                details={
                    "session_id": mask_sensitive_data(session_id),
                    "error_code": e.error_code,
                    "reason": e.message,
                },
            )
            return SessionResult.fail(e)
        except Exception as e:
            log_error(self.logger, e, context={"operation": "refresh_session"}, source_id=source.id)
            return SessionResult.fail(_internal_error(e))

        log_auth_event(
            self.logger,
            "session_refreshed",
            source_id=source.id,
            details={
                "session_id": mask_sensitive_data(session_id),
                "data_renewed": new_data is not None,
                "expires_at": updated.expires_at.isoformat(),
            },
        )
        return SessionResult.ok(updated)

    def delete_session(self, session_id: str) -> bool:
        """
        Delete authentication session.

        Args:
            session_id: Session identifier

        Returns:
            True if the session was deleted, False if it was already gone
        """
        deleted = self.store.delete(session_id)
        if deleted:
            log_auth_event(
                self.logger,
                "session_deleted",
                details={"session_id": mask_sensitive_data(session_id)},
            )
        return deleted

    def delete_source_sessions(self, source_id: str) -> int:
        """Delete every session belonging to a source."""
        count = self.store.delete_for_source(source_id)
        if count:
            log_auth_event(
                self.logger,
                "source_sessions_deleted",
                source_id=source_id,
                details={"sessions_deleted": count},
            )
        return count

    def get_auth_headers(self, session_id: str) -> Optional[Dict[str, str]]:
        """
        Get authentication headers for a session.

        Args:
            session_id: Session identifier

        Returns:
            Headers to add to requests, or None if the session is not found
        """
        session = self.store.get(session_id)
        if session is None:
            return None
        return to_headers(session.auth_type, session.data)

    def cleanup_expired_sessions(self) -> int:
        """Remove expired sessions, returning how many were removed."""
        return self.store.sweep()

    def get_session_stats(self) -> Dict[str, Any]:
        """Session counts for monitoring."""
        return self.store.stats()

    def start_cleanup(self, interval: Optional[float] = None) -> CleanupHandle:
        """
        Start the periodic expired-session sweep.

        Args:
            interval: Seconds between sweeps; defaults to the configured interval

        Returns:
            Handle that must be stopped on shutdown (``close`` does this)
        """
        if self._cleanup is not None and self._cleanup.running:
            return self._cleanup
        self._cleanup = self.store.start_cleanup(
            interval if interval is not None else self.settings.session.cleanup_interval
        )
        return self._cleanup

    async def test_authentication(
        self,
        source: Source,
        credentials: Optional[Credentials] = None,
    ) -> AuthTestResult:
        """
        Check that a source accepts its credentials.

        A temporary session is created, used for one GET against the source's
        ``authTestUrl`` (or its ``url``), and deleted again.

        Args:
            source: Source record
            credentials: Credentials to test instead of the stored ones

        Returns:
            Whether the source accepted the request, and its status code
        """
        created = await self.create_session(source, credentials)
        if not created.success or created.session_id is None:
            return AuthTestResult(
                success=False,
                error=created.error,
                error_code=created.error_code,
            )

        try:
            test_url = source.meta(MetadataKey.AUTH_TEST_URL) or source.url
            if not test_url:
                return AuthTestResult(
                    success=False,
                    auth_type=created.auth_type,
                    error="Source has no URL to test against",
                    error_code="missing_configuration",
                )

            headers = self.get_auth_headers(created.session_id) or {}
            try:
                response = await self.http.get(test_url, headers=headers)
            except SourceAuthError as e:
                return AuthTestResult(
                    success=False,
                    auth_type=created.auth_type,
                    error=e.message,
                    error_code=e.error_code,
                )

            success = response.status_code < 400
            log_auth_event(
                self.logger,
                "authentication_tested",
                source_id=source.id,
                success=success,
                details={"status_code": response.status_code},
            )
            return AuthTestResult(
                success=success,
                status_code=response.status_code,
                auth_type=created.auth_type,
                error=None if success else f"Authentication test failed with status {response.status_code}",
                error_code=None if success else "non_success_status",
            )
        finally:
            self.delete_session(created.session_id)

    async def close(self) -> None:
        """Stop the cleanup task and close the HTTP client."""
        if self._cleanup is not None:
            await self._cleanup.stop()
            self._cleanup = None
        await self.http.close()

    def _strategy(self, auth_type: AuthType) -> AuthStrategy:
        return self._strategies[auth_type]


def _internal_error(error: Exception) -> SourceAuthError:
    return SourceAuthError(
        f"Unexpected error: {error}",
        error_code="internal_error",
        details={"error_type": type(error).__name__},
    )


def create_session_manager(
    settings: Optional[Settings] = None,
    http_client: Optional[HTTPClient] = None,
) -> SourceAuthManager:
    """
    Build a manager wired from settings.

    Args:
        settings: Library settings; defaults to :func:`get_settings`
        http_client: Client to use instead of one built from ``settings.http``

    Returns:
        A ready :class:`SourceAuthManager`

    Raises:
        ConfigurationError: If ``CREDENTIAL_ENCRYPTION_KEY`` is not set
    """
    settings = settings or get_settings()
    vault = CredentialVault.from_settings(settings)
    return SourceAuthManager(
        http_client=http_client or HTTPClient(settings=settings),
        vault=vault,
        settings=settings,
    )

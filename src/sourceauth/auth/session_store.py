"""
In-memory session storage for sourceauth.

Sessions are process-local and ephemeral: they live in a lock-guarded map,
expire lazily on lookup, and are reaped in bulk by a periodic sweep that
runs as a cancellable asyncio task.
"""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..core import get_logger, log_error, mask_sensitive_data, utcnow
from ..models import Session


class SessionStore:
    """Map from session id to session record with lazy expiry."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.logger = get_logger(__name__)
        self.clock = clock or utcnow
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def put(self, session: Session) -> None:
        """Insert or replace a session record."""
        with self._lock:
            self._sessions[session.session_id] = session

    def replace_if_present(self, session: Session) -> bool:
        """
        Overwrite a session record only if it is still stored and unexpired.

        Deleted, swept and expired sessions stay gone even when a slow
        refresh finishes after their removal.

        Returns:
            True if the record was replaced
        """
        with self._lock:
            current = self._sessions.get(session.session_id)
            if current is None:
                return False
            if current.is_expired(self.clock()):
                del self._sessions[session.session_id]
                return False
            self._sessions[session.session_id] = session
            return True

    def get(self, session_id: str) -> Optional[Session]:
        """
        Get session by ID.

        Args:
            session_id: Session identifier

        Returns:
            Session if found and unexpired; expired sessions are deleted
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(self.clock()):
                del self._sessions[session_id]
                expired = True
            else:
                expired = False

        if expired:
            self.logger.info(
                "Session expired on lookup",
                session_id=mask_sensitive_data(session_id),
                source_id=session.source_id,
            )
            return None
        return session

    def delete(self, session_id: str) -> bool:
        """Remove a session; False when it was already gone."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def sessions_for_source(self, source_id: str) -> List[Session]:
        """All unexpired sessions for a source."""
        now = self.clock()
        with self._lock:
            return [
                session for session in self._sessions.values()
                if session.source_id == source_id and not session.is_expired(now)
            ]

    def delete_for_source(self, source_id: str) -> int:
        """Remove every session of a source, returning how many were removed."""
        with self._lock:
            doomed = [
                session_id for session_id, session in self._sessions.items()
                if session.source_id == source_id
            ]
            for session_id in doomed:
                del self._sessions[session_id]
        return len(doomed)

    def sweep(self) -> int:
        """
        Remove expired sessions.

        Returns:
            Number of expired sessions removed
        """
        now = self.clock()
        with self._lock:
            expired = [
                session_id for session_id, session in self._sessions.items()
                if session.is_expired(now)
            ]
            for session_id in expired:
                del self._sessions[session_id]

        if expired:
            self.logger.info("Cleaned up expired sessions", expired_count=len(expired))

        return len(expired)

    def stats(self) -> Dict[str, Any]:
        """
        Get session statistics.

        Returns:
            Dictionary with session statistics
        """
        now = self.clock()
        with self._lock:
            sessions = list(self._sessions.values())
        active = [s for s in sessions if not s.is_expired(now)]

        by_auth_type: Dict[str, int] = {}
        for session in active:
            by_auth_type[session.auth_type.value] = by_auth_type.get(session.auth_type.value, 0) + 1

        return {
            "total_sessions": len(sessions),
            "active_sessions": len(active),
            "expired_sessions": len(sessions) - len(active),
            "unique_sources": len({s.source_id for s in active}),
            "by_auth_type": by_auth_type,
        }

    def start_cleanup(self, interval: float) -> CleanupHandle:
        """
        Start sweeping expired sessions every ``interval`` seconds.

        Must be called from a running event loop. The returned handle has to
        be stopped on shutdown.
        """
        if interval <= 0:
            raise ValueError("Cleanup interval must be positive")
        task = asyncio.get_running_loop().create_task(
            self._cleanup_loop(interval),
            name="sourceauth-session-cleanup",
        )
        self.logger.info("Session cleanup started", interval=interval)
        return CleanupHandle(task)

    async def _cleanup_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep()
            except Exception as e:
                log_error(self.logger, e, context={"operation": "session_cleanup"})


class CleanupHandle:
    """Cancellable handle for the periodic sweep task."""

    def __init__(self, task: asyncio.Task):
        self._task = task

    @property
    def running(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        """Request cancellation without waiting for it."""
        self._task.cancel()

    async def stop(self) -> None:
        """Cancel the sweep task and wait until it has finished."""
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> CleanupHandle:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

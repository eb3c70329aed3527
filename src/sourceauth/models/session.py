"""
Session and result models for sourceauth.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import SourceAuthError
from .auth import AuthType, SessionData


class Session(BaseModel):
    """A time-bounded, in-memory record granting authenticated access to a source."""

    model_config = ConfigDict(validate_assignment=True)

    session_id: str = Field(..., description="Unguessable session identifier", min_length=1)
    source_id: str = Field(..., description="Source the session authenticates against")
    auth_type: AuthType = Field(..., description="Protocol that produced the data")
    data: SessionData = Field(..., description="Self-sufficient header material")
    created_at: datetime = Field(..., description="Session creation time")
    expires_at: datetime = Field(..., description="Session expiration time")

    def is_expired(self, now: datetime) -> bool:
        """Check if session is expired at ``now``."""
        return now >= self.expires_at


class SessionResult(BaseModel):
    """Tagged result of creating or refreshing a session."""

    success: bool
    session_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    auth_type: Optional[AuthType] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, session: Session) -> SessionResult:
        return cls(
            success=True,
            session_id=session.session_id,
            expires_at=session.expires_at,
            auth_type=session.auth_type,
        )

    @classmethod
    def fail(cls, error: SourceAuthError) -> SessionResult:
        return cls(success=False, error=error.message, error_code=error.error_code)


class AuthTestResult(BaseModel):
    """Outcome of probing a source with a temporary session."""

    success: bool
    status_code: Optional[int] = None
    auth_type: Optional[AuthType] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

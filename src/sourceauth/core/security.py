"""
Security utilities for sourceauth.

Session id generation, secret masking and expiry checks shared by the
store and the strategies.
"""

from __future__ import annotations

import base64
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Timezone-aware current time; the default clock everywhere."""
    return datetime.now(timezone.utc)


def generate_session_id() -> str:
    """
    Generate a secure session ID.

    Returns:
        URL-safe string carrying 256 bits of randomness
    """
    return secrets.token_urlsafe(32)


def basic_auth_token(username: str, password: str) -> str:
    """Base64 of ``username:password`` as used by HTTP Basic."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def is_token_expired(
    expires_at: Optional[datetime],
    now: datetime,
    buffer_seconds: int = 0
) -> bool:
    """
    Check if a token is expired or will expire within the buffer.

    Args:
        expires_at: Token expiration time, None for tokens without expiry
        now: Current time
        buffer_seconds: Buffer time before expiration

    Returns:
        True if token is expired or will expire within buffer
    """
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return now >= expires_at - timedelta(seconds=buffer_seconds)


def mask_sensitive_data(data: str, visible_chars: int = 4) -> str:
    """
    Mask sensitive data for logging.

    Args:
        data: Sensitive data to mask
        visible_chars: Number of characters to show at the end

    Returns:
        Masked string
    """
    if len(data) <= visible_chars:
        return "*" * len(data)

    return "*" * (len(data) - visible_chars) + data[-visible_chars:]

"""
Utility modules for sourceauth.

This package contains the async HTTP client used for every outbound
authentication call.
"""

from __future__ import annotations

from .http_client import HTTPClient

__all__ = [
    "HTTPClient",
]

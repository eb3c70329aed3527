"""Translate session data into outbound request headers."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Union

from ..models import AuthType

HeaderBuilder = Callable[[Any], Dict[str, str]]


def _authorization(scheme: str) -> HeaderBuilder:
    def build(data: Any) -> Dict[str, str]:
        return {"Authorization": f"{scheme} {data.token}"}
    return build


_HEADER_BUILDERS: Mapping[AuthType, HeaderBuilder] = {
    AuthType.BASIC: _authorization("Basic"),
    AuthType.BEARER: _authorization("Bearer"),
    AuthType.OAUTH: _authorization("Bearer"),
    AuthType.API_KEY: lambda data: {data.header_name: data.api_key},
    AuthType.COOKIE: lambda data: {"Cookie": data.cookies},
}


def to_headers(auth_type: Union[AuthType, str], data: Any) -> Dict[str, str]:
    """
    Build the headers that authenticate a request for a session.

    Pure: neither argument is modified and equal inputs give equal output.

    Args:
        auth_type: Session auth type
        data: The session's data

    Returns:
        Header mapping; empty for unknown auth types
    """
    try:
        builder = _HEADER_BUILDERS[AuthType(auth_type)]
    except ValueError:
        return {}
    return builder(data)

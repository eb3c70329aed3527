"""
HTTP client utilities for sourceauth.

This module provides the async HTTP client the strategies use for login,
token and validation calls: bounded timeouts, retry logic for transient
failures, and request logging. Transport failures surface as
:class:`~sourceauth.core.exceptions.NetworkError`.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Mapping, Optional

import httpx
from httpx import Response

from ..core import (
    get_logger,
    get_settings,
    NetworkError,
    Settings,
    log_api_call,
)


class HTTPClient:
    """Async HTTP client with bounded timeout, retry logic and logging."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

        http_config = self.settings.http
        self.timeout = timeout if timeout is not None else http_config.timeout
        self.max_retries = max_retries if max_retries is not None else http_config.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else http_config.retry_delay

        default_headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json, text/html;q=0.9, */*;q=0.8",
        }
        if headers:
            default_headers.update(headers)

        client_kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(self.timeout),
            "headers": default_headers,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport

        self.client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> HTTPClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Mapping[str, str]] = None,
        retry_on_status: Optional[set[int]] = None,
        retries: Optional[int] = None,
    ) -> Response:
        """
        Make HTTP request with retry logic.

        Any status code is returned to the caller; only transport failures
        raise. Cookies set by one source are never replayed to another.

        Args:
            method: HTTP method
            url: Request URL
            headers: Additional headers
            params: Query parameters
            json: JSON body
            data: Form fields, sent form-encoded
            retry_on_status: Status codes to retry on
            retries: Retry budget for this call; 0 for non-idempotent requests

        Returns:
            HTTP response

        Raises:
            NetworkError: If the request times out or cannot connect after retries
        """
        retry_on_status = retry_on_status or {502, 503, 504}
        max_retries = self.max_retries if retries is None else retries
        start_time = time.monotonic()

        for attempt in range(max_retries + 1):
            try:
                response = await self.client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=params,
                    json=json,
                    data=data,
                )
            except httpx.TimeoutException as e:
                if attempt < max_retries:
                    self.logger.warning("Request timeout, retrying", attempt=attempt + 1, url=url)
                    await asyncio.sleep(self.retry_delay * (2**attempt))
                    continue
                raise NetworkError(
                    f"Request to {url} timed out after {self.timeout}s",
                    details={"url": url, "timeout": self.timeout, "error": type(e).__name__},
                ) from e
            except httpx.RequestError as e:
                if attempt < max_retries:
                    self.logger.warning(
                        "Request error, retrying", attempt=attempt + 1, error=str(e), url=url
                    )
                    await asyncio.sleep(self.retry_delay * (2**attempt))
                    continue
                raise NetworkError(
                    f"Request to {url} failed: {e}",
                    details={"url": url, "error": type(e).__name__},
                ) from e
            finally:
                self.client.cookies.clear()

            log_api_call(
                self.logger,
                endpoint=url,
                method=method,
                status_code=response.status_code,
                duration_ms=(time.monotonic() - start_time) * 1000,
                attempt=attempt + 1,
            )

            if attempt < max_retries and response.status_code in retry_on_status:
                self.logger.warning(
                    "Request failed, retrying",
                    attempt=attempt + 1,
                    status_code=response.status_code,
                    url=url,
                )
                await asyncio.sleep(self.retry_delay * (2**attempt))
                continue

            return response

        raise NetworkError(f"Request to {url} failed", details={"url": url})

    async def get(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Response:
        """Make GET request."""
        return await self.request("GET", url, headers=headers, params=params)

    async def post(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Mapping[str, str]] = None,
        retries: Optional[int] = None,
    ) -> Response:
        """Make POST request."""
        return await self.request(
            "POST", url, headers=headers, json=json, data=data, retries=retries
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

"""API key authentication strategy.

The key is sent in a header whose name comes from the source's
``apiKeyHeader`` metadata (default ``X-API-Key``). An optional ``apiTestUrl``
is probed with the key before the session is created.
"""

from __future__ import annotations

from ...core import MissingCredentialsError
from ...models import ApiKeySessionData, AuthType, Credentials, MetadataKey, Source
from .base import AuthStrategy

DEFAULT_API_KEY_HEADER = "X-API-Key"


class ApiKeyAuthStrategy(AuthStrategy):
    """Authenticate with a static API key header."""

    auth_type = AuthType.API_KEY

    async def authenticate(self, source: Source, credentials: Credentials) -> ApiKeySessionData:
        if not credentials.api_key:
            raise MissingCredentialsError("API key required")

        header_name = source.meta(MetadataKey.API_KEY_HEADER, DEFAULT_API_KEY_HEADER)

        test_url = source.meta(MetadataKey.API_TEST_URL)
        if test_url:
            await self._probe(
                test_url,
                {header_name: credentials.api_key},
                purpose="API key test",
            )
            self.logger.info("API key validated", source_id=source.id, header_name=header_name)

        return ApiKeySessionData(api_key=credentials.api_key, header_name=header_name)

"""HTTP Basic authentication strategy.

The username and password are joined as ``username:password``,
Base64-encoded and later sent as ``Authorization: Basic <token>``. When the
source names a test URL (``authTestUrl``, else ``loginUrl``) the token is
validated against it before a session is handed out.
"""

from __future__ import annotations

from ...core import MissingCredentialsError, basic_auth_token
from ...models import AuthType, BasicSessionData, Credentials, MetadataKey, Source
from .base import AuthStrategy


class BasicAuthStrategy(AuthStrategy):
    """Authenticate via HTTP Basic authentication."""

    auth_type = AuthType.BASIC

    async def authenticate(self, source: Source, credentials: Credentials) -> BasicSessionData:
        if not credentials.username or not credentials.password:
            raise MissingCredentialsError("Username and password required")

        token = basic_auth_token(credentials.username, credentials.password)

        test_url = source.meta(MetadataKey.AUTH_TEST_URL) or source.meta(MetadataKey.LOGIN_URL)
        if test_url:
            await self._probe(
                test_url,
                {"Authorization": f"Basic {token}"},
                purpose="Basic authentication test",
            )
            self.logger.info("Basic credentials validated", source_id=source.id)

        return BasicSessionData(token=token)

"""Simplified OAuth strategy.

There is no interactive authorization step: the access token (and
optionally a refresh token and expiry) must already have been obtained and
stored as credentials. Once the token expires it is renewed with the
refresh-token grant against ``tokenUrl``.
"""

from __future__ import annotations

from typing import Dict, Optional

from ...core import (
    CredentialError,
    MissingCredentialsError,
    is_token_expired,
    log_auth_event,
)
from ...models import AuthType, Credentials, MetadataKey, OAuthSessionData, Source
from .base import AuthStrategy


class OAuthStrategy(AuthStrategy):
    """Use a pre-obtained OAuth access token."""

    auth_type = AuthType.OAUTH

    async def authenticate(self, source: Source, credentials: Credentials) -> OAuthSessionData:
        if not credentials.access_token:
            raise MissingCredentialsError("Access token required")

        return OAuthSessionData(
            token=credentials.access_token,
            refresh_token=credentials.refresh_token,
            expires_at=credentials.expires_at,
        )

    async def refresh(self, source: Source, data: OAuthSessionData) -> Optional[OAuthSessionData]:
        if not is_token_expired(data.expires_at, self.now()):
            return None

        if not data.refresh_token:
            raise MissingCredentialsError("No refresh token available")

        token_url = self._require_meta(source, MetadataKey.TOKEN_URL)

        form: Dict[str, str] = {
            "grant_type": "refresh_token",
            "refresh_token": data.refresh_token,
        }
        client = self._client_credentials(source)
        if client.client_id:
            form["client_id"] = client.client_id
        if client.client_secret:
            form["client_secret"] = client.client_secret

        payload = await self._token_request(token_url, form)
        log_auth_event(self.logger, "oauth_token_refreshed", source_id=source.id)

        return OAuthSessionData(
            token=payload["access_token"],
            expires_at=self._token_expiry(payload),
            refresh_token=payload.get("refresh_token") or data.refresh_token,
        )

    def _client_credentials(self, source: Source) -> Credentials:
        """Client id/secret are optional for public OAuth clients."""
        try:
            return self.context.load_credentials(source)
        except CredentialError as e:
            self.logger.info(
                "Refreshing without client credentials",
                source_id=source.id,
                reason=e.error_code,
            )
            return Credentials()

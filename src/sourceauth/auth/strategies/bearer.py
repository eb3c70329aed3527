"""Bearer token authentication strategy.

A caller-supplied token that has not expired is used verbatim. Otherwise
the strategy performs the OAuth2 Client Credentials grant (:rfc:`6749`
section 4.4) against the source's ``tokenUrl``.

Refresh keeps the session alive without operator help: an expired token is
exchanged with its refresh token when one was issued, and any failure of
that exchange falls back to a full client-credentials grant with freshly
decrypted credentials.
"""

from __future__ import annotations

from typing import Dict, Optional

from ...core import (
    AuthenticationError,
    MissingCredentialsError,
    NetworkError,
    is_token_expired,
    log_auth_event,
)
from ...models import AuthType, BearerSessionData, Credentials, MetadataKey, Source
from .base import AuthStrategy


class BearerAuthStrategy(AuthStrategy):
    """Authenticate with a bearer token, fetching one when needed."""

    auth_type = AuthType.BEARER

    async def authenticate(self, source: Source, credentials: Credentials) -> BearerSessionData:
        if credentials.token and not is_token_expired(credentials.expires_at, self.now()):
            return BearerSessionData(
                token=credentials.token,
                expires_at=credentials.expires_at,
                refresh_token=credentials.refresh_token,
            )

        if not credentials.client_id or not credentials.client_secret:
            raise MissingCredentialsError("Client ID and secret required")

        token_url = self._require_meta(source, MetadataKey.TOKEN_URL)

        form: Dict[str, str] = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }
        if credentials.scope:
            form["scope"] = credentials.scope

        payload = await self._token_request(token_url, form)
        log_auth_event(self.logger, "bearer_token_issued", source_id=source.id)

        return BearerSessionData(
            token=payload["access_token"],
            expires_at=self._token_expiry(payload),
            refresh_token=payload.get("refresh_token"),
        )

    async def refresh(self, source: Source, data: BearerSessionData) -> Optional[BearerSessionData]:
        if not is_token_expired(data.expires_at, self.now()):
            return None

        credentials = self.context.load_credentials(source)

        if data.refresh_token:
            try:
                return await self._exchange_refresh_token(source, data, credentials)
            except (AuthenticationError, NetworkError) as e:
                log_auth_event(
                    self.logger,
                    "bearer_refresh_failed",
                    source_id=source.id,
                    success=False,
                    details={"error_code": e.error_code, "fallback": "reauthenticate"},
                )

        self.logger.info("Re-authenticating bearer source", source_id=source.id)
        return await self.authenticate(source, credentials)

    async def _exchange_refresh_token(
        self,
        source: Source,
        data: BearerSessionData,
        credentials: Credentials,
    ) -> BearerSessionData:
        token_url = self._require_meta(source, MetadataKey.TOKEN_URL)

        form: Dict[str, str] = {
            "grant_type": "refresh_token",
            "refresh_token": data.refresh_token or "",
        }
        if credentials.client_id:
            form["client_id"] = credentials.client_id
        if credentials.client_secret:
            form["client_secret"] = credentials.client_secret

        payload = await self._token_request(token_url, form)
        log_auth_event(self.logger, "bearer_token_refreshed", source_id=source.id)

        return BearerSessionData(
            token=payload["access_token"],
            expires_at=self._token_expiry(payload),
            refresh_token=payload.get("refresh_token") or data.refresh_token,
        )

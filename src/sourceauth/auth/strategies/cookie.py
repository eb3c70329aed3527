"""Cookie session authentication strategy.

Logs in by posting a form to the source's ``loginUrl`` and keeps the
cookies the site sets. Field names default to ``username``/``password`` and
can be overridden through ``usernameField``/``passwordField``; extra hidden
fields come from the JSON object in ``additionalFormFields``.

Refresh probes ``sessionCheckUrl`` with the stored cookies and logs in again
when the site no longer accepts them. A supplied cookie with no username and
password behind it cannot be renewed, so its rejection fails the refresh.
"""

from __future__ import annotations

import json
from typing import Dict, List, Optional

import httpx

from ...core import (
    MissingCredentialsError,
    NetworkError,
    NoCookiesReceivedError,
    NonSuccessStatusError,
    SourceAuthError,
    log_auth_event,
)
from ...models import AuthType, CookieSessionData, Credentials, MetadataKey, Source
from .base import AuthStrategy


def extract_cookies(response: httpx.Response) -> List[str]:
    """Collect ``name=value`` pairs from every Set-Cookie in the redirect chain."""
    pairs: Dict[str, str] = {}
    for hop in [*response.history, response]:
        for header in hop.headers.get_list("set-cookie"):
            pair = header.split(";", 1)[0].strip()
            if "=" not in pair:
                continue
            name = pair.split("=", 1)[0].strip()
            if name:
                # Later hops overwrite earlier values for the same cookie
                pairs[name] = pair
    return list(pairs.values())


class CookieAuthStrategy(AuthStrategy):
    """Authenticate through a login form and carry the resulting cookies."""

    auth_type = AuthType.COOKIE

    async def authenticate(self, source: Source, credentials: Credentials) -> CookieSessionData:
        if credentials.username and credentials.password:
            return await self._login(source, credentials)
        if credentials.cookie:
            return CookieSessionData(cookies=credentials.cookie)
        raise MissingCredentialsError("Username and password required")

    async def refresh(self, source: Source, data: CookieSessionData) -> Optional[CookieSessionData]:
        check_url = source.meta(MetadataKey.SESSION_CHECK_URL)
        if check_url is None:
            # No way to check, assume it's still valid
            return None

        try:
            response = await self.http.get(check_url, headers={"Cookie": data.cookies})
        except NetworkError as e:
            self.logger.warning(
                "Cookie session check failed, logging in again",
                source_id=source.id,
                error=e.message,
            )
            failure: SourceAuthError = e
        else:
            if response.status_code < 400:
                return None
            log_auth_event(
                self.logger,
                "cookie_session_rejected",
                source_id=source.id,
                success=False,
                details={"status_code": response.status_code},
            )
            failure = NonSuccessStatusError(
                response.status_code,
                message=f"Session check failed with status {response.status_code}",
            )

        credentials = self.context.load_credentials(source)
        if not credentials.username or not credentials.password:
            # A supplied cookie cannot be renewed without a login
            raise failure
        return await self._login(source, credentials)

    async def _login(self, source: Source, credentials: Credentials) -> CookieSessionData:
        login_url = self._require_meta(source, MetadataKey.LOGIN_URL)
        form = self._build_form(source, credentials)

        response = await self.http.post(login_url, data=form, retries=0)
        if response.status_code >= 400:
            raise NonSuccessStatusError(
                response.status_code,
                message=f"Login failed with status {response.status_code}",
            )

        cookies = extract_cookies(response)
        if not cookies:
            raise NoCookiesReceivedError()

        log_auth_event(
            self.logger,
            "cookie_login_succeeded",
            source_id=source.id,
            details={"cookie_count": len(cookies)},
        )
        return CookieSessionData(cookies="; ".join(cookies))

    def _build_form(self, source: Source, credentials: Credentials) -> Dict[str, str]:
        username_field = source.meta(MetadataKey.USERNAME_FIELD, "username")
        password_field = source.meta(MetadataKey.PASSWORD_FIELD, "password")

        form: Dict[str, str] = {}

        raw_extra = source.meta(MetadataKey.ADDITIONAL_FORM_FIELDS)
        if raw_extra:
            try:
                extra = json.loads(raw_extra)
                if not isinstance(extra, dict):
                    raise ValueError("additionalFormFields must be a JSON object")
            except ValueError as e:
                self.logger.warning(
                    "Failed to parse additional form fields",
                    source_id=source.id,
                    error=str(e),
                )
            else:
                form.update({str(key): str(value) for key, value in extra.items()})

        form[username_field] = credentials.username or ""
        form[password_field] = credentials.password or ""
        return form

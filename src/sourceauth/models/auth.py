"""
Authentication related Pydantic models for sourceauth.

Decrypted credential payloads and the per-protocol session data that the
header translator turns into outbound request headers.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthType(str, Enum):
    """Supported authentication protocols."""

    BASIC = "basic"
    BEARER = "bearer"
    API_KEY = "api_key"
    COOKIE = "cookie"
    OAUTH = "oauth"


class Credentials(BaseModel):
    """
    Decrypted credential payload.

    Stored payloads use camelCase keys (``apiKey``, ``clientSecret``); both
    spellings are accepted. Unknown keys are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    scope: Optional[str] = None
    token: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    cookie: Optional[str] = None

    def to_payload(self) -> dict:
        """Serialise for encryption, camelCase and without empty fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class _SessionDataBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BasicSessionData(_SessionDataBase):
    auth_type: Literal["basic"] = "basic"
    token: str = Field(..., description="base64 of username:password", min_length=1)


class TokenSessionData(_SessionDataBase):
    """Shared shape of bearer and OAuth token data."""

    token: str = Field(..., description="Access token", min_length=1)
    expires_at: Optional[datetime] = Field(None, description="Upstream token expiry")
    refresh_token: Optional[str] = Field(None, description="Refresh token, if issued")


class BearerSessionData(TokenSessionData):
    auth_type: Literal["bearer"] = "bearer"


class OAuthSessionData(TokenSessionData):
    auth_type: Literal["oauth"] = "oauth"


class ApiKeySessionData(_SessionDataBase):
    auth_type: Literal["api_key"] = "api_key"
    api_key: str = Field(..., min_length=1)
    header_name: str = Field("X-API-Key", min_length=1)


class CookieSessionData(_SessionDataBase):
    auth_type: Literal["cookie"] = "cookie"
    cookies: str = Field(..., description="Value for the Cookie header", min_length=1)


SessionData = Annotated[
    Union[
        BasicSessionData,
        BearerSessionData,
        ApiKeySessionData,
        CookieSessionData,
        OAuthSessionData,
    ],
    Field(discriminator="auth_type"),
]

"""
Source record models for sourceauth.

The source record store owns these records; this library only reads them
(and hands back updated copies from the helpers below).
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SourceType(str, Enum):
    """Source categories; used to pick a default auth type."""

    WEBSITE = "website"
    BLOG = "blog"
    ACADEMIC = "academic"
    PODCAST = "podcast"
    SOCIAL = "social"


class MetadataKey:
    """Metadata keys read by the authentication strategies."""

    AUTH_TYPE = "authType"
    LOGIN_URL = "loginUrl"
    TOKEN_URL = "tokenUrl"
    API_KEY_HEADER = "apiKeyHeader"
    API_TEST_URL = "apiTestUrl"
    SESSION_CHECK_URL = "sessionCheckUrl"
    USERNAME_FIELD = "usernameField"
    PASSWORD_FIELD = "passwordField"
    ADDITIONAL_FORM_FIELDS = "additionalFormFields"
    AUTH_TEST_URL = "authTestUrl"


AUTH_METADATA_KEYS = frozenset(
    value for key, value in vars(MetadataKey).items() if key.isupper()
)


class StoredCredentials(BaseModel):
    """Encrypted credential blob and the IV it was sealed with (both hex)."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    encrypted: str = Field("", description="Hex-encoded ciphertext")
    iv: str = Field("", description="Hex-encoded initialization vector")

    @property
    def is_complete(self) -> bool:
        """Blob and IV are only meaningful together."""
        return bool(self.encrypted) and bool(self.iv)


class Source(BaseModel):
    """An external content origin that may require authentication."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., description="Source identifier", min_length=1)
    name: str = Field("", description="Human-readable source name")
    url: Optional[str] = Field(None, description="Source base URL")
    type: str = Field(SourceType.WEBSITE.value, description="Source category")
    requires_authentication: bool = Field(
        False, description="Whether fetching this source needs a session"
    )
    credentials: Optional[StoredCredentials] = Field(
        None, description="Encrypted credentials at rest"
    )
    metadata: Dict[str, str] = Field(
        default_factory=dict, description="Protocol configuration"
    )

    @property
    def has_stored_credentials(self) -> bool:
        return self.credentials is not None and self.credentials.is_complete

    def meta(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a metadata value, treating empty strings as unset."""
        value = self.metadata.get(key)
        return value if value else default


def update_auth_metadata(source: Source, updates: Mapping[str, Optional[str]]) -> Source:
    """
    Apply authentication-related metadata updates to a copy of a source.

    Keys outside :data:`AUTH_METADATA_KEYS` are ignored. A ``None`` or empty
    value removes the key.

    Args:
        source: Source to update
        updates: Metadata key/value pairs

    Returns:
        Updated copy of the source
    """
    metadata = dict(source.metadata)
    for key, value in updates.items():
        if key not in AUTH_METADATA_KEYS:
            continue
        if value:
            metadata[key] = str(value)
        else:
            metadata.pop(key, None)
    return source.model_copy(update={"metadata": metadata})

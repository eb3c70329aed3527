"""Credential vault: symmetric encryption of credential payloads at rest.

The master key is derived once per vault from the process-wide secret
(``CREDENTIAL_ENCRYPTION_KEY``) with PBKDF2-HMAC-SHA256. Each payload is
serialised to JSON and sealed with AES-256-GCM under a fresh random IV, so
tampered or foreign blobs fail loudly instead of decrypting to garbage.
"""

from __future__ import annotations

import json
import os
import secrets
from typing import Mapping, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import ValidationError

from ..core import (
    ConfigurationError,
    DecryptionFailedError,
    NoCredentialsFoundError,
    Settings,
    get_logger,
    get_settings,
)
from ..models import Credentials, Source, StoredCredentials

NONCE_SIZE = 12  # 96 bits, standard for AES-GCM
KEY_SIZE = 32  # 256 bits for AES-256


def derive_master_key(secret: str, salt: bytes, iterations: int) -> bytes:
    """Derive a 256-bit master key from a passphrase using PBKDF2-HMAC-SHA256."""
    kdf = PBKDF2HMAC(
        algorithm=SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(secret.encode("utf-8"))


def generate_master_key() -> str:
    """Generate a random hex secret suitable for ``CREDENTIAL_ENCRYPTION_KEY``."""
    return secrets.token_hex(KEY_SIZE)


class CredentialVault:
    """Encrypt and decrypt credential payloads with a process-wide key.

    Args:
        secret: The process-wide secret. Empty or ``None`` fails fast.
        salt: KDF salt.
        iterations: PBKDF2 iteration count.

    Raises:
        ConfigurationError: If no secret is configured.
    """

    def __init__(
        self,
        secret: Optional[str],
        salt: str = "sourceauth-credential-vault",
        iterations: int = 600_000,
    ) -> None:
        self.logger = get_logger(__name__)
        if not secret:
            self.logger.error("CREDENTIAL_ENCRYPTION_KEY environment variable not set")
            raise ConfigurationError(
                "Encryption key not configured",
                error_code="missing_master_key",
            )
        self._aesgcm = AESGCM(derive_master_key(secret, salt.encode("utf-8"), iterations))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> CredentialVault:
        """Build a vault from the ``CREDENTIAL_*`` settings."""
        vault_config = (settings or get_settings()).vault
        secret = vault_config.encryption_key
        return cls(
            secret.get_secret_value() if secret is not None else None,
            salt=vault_config.kdf_salt,
            iterations=vault_config.kdf_iterations,
        )

    def encrypt(self, credentials: Union[Credentials, Mapping[str, object]]) -> StoredCredentials:
        """
        Seal a credential payload under a fresh IV.

        Args:
            credentials: Structured credentials or a plain mapping

        Returns:
            Hex-encoded ciphertext and IV
        """
        if not isinstance(credentials, Credentials):
            credentials = Credentials.model_validate(credentials)
        plaintext = json.dumps(credentials.to_payload()).encode("utf-8")

        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext, None)
        return StoredCredentials(encrypted=ciphertext.hex(), iv=nonce.hex())

    def decrypt(self, stored: Optional[StoredCredentials]) -> Credentials:
        """
        Open a stored credential blob.

        Args:
            stored: The blob/IV pair, or None

        Returns:
            The decrypted credentials

        Raises:
            NoCredentialsFoundError: If the blob or the IV is missing
            DecryptionFailedError: If the pair cannot be decrypted and parsed
        """
        if stored is None or not stored.is_complete:
            raise NoCredentialsFoundError()

        try:
            nonce = bytes.fromhex(stored.iv)
            ciphertext = bytes.fromhex(stored.encrypted)
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, None)
            payload = json.loads(plaintext.decode("utf-8"))
            return Credentials.model_validate(payload)
        except (InvalidTag, ValueError, ValidationError) as e:
            # ValueError covers bad hex, bad nonce length, bad UTF-8 and bad JSON
            self.logger.error("Credential decryption failed", error_type=type(e).__name__)
            raise DecryptionFailedError() from e

    def decrypt_source(self, source: Source) -> Credentials:
        """Decrypt the credentials stored on a source record."""
        return self.decrypt(source.credentials)


def seal_source_credentials(
    vault: CredentialVault,
    source: Source,
    credentials: Union[Credentials, Mapping[str, object]],
) -> Source:
    """
    Encrypt credentials onto a copy of a source.

    The copy is flagged as requiring authentication; persisting it is the
    record store's job.
    """
    return source.model_copy(update={
        "credentials": vault.encrypt(credentials),
        "requires_authentication": True,
    })

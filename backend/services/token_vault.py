"""AES-256-GCM encryption of Up personal access tokens at rest.

A token is stored as three hex strings: a random IV, the ciphertext, and the
GCM authentication tag.  Encryption failures are configuration bugs and are
raised; decryption failures (wrong key, tampered or corrupt columns) are
expected and reported as ``None`` so callers can ask the user to re-enter
their token.
"""

import binascii
import logging
import os
import secrets
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

KEY_BYTE_LENGTH = 32  # AES-256
IV_LENGTH = 16
AUTH_TAG_LENGTH = 16


class ConfigurationError(Exception):
    """The encryption key is missing or malformed.

    Raised at startup; the application must not serve requests.
    """


class EncryptionError(Exception):
    """Encrypting a token failed."""


@dataclass(frozen=True)
class EncryptedSecret:
    """An encrypted token as stored in the database (all fields hex)."""

    iv: str
    ciphertext: str
    auth_tag: str

    @classmethod
    def from_columns(
        cls, iv: str | None, ciphertext: str | None, auth_tag: str | None
    ) -> "EncryptedSecret | None":
        """Build from nullable storage columns.

        Returns ``None`` unless all three columns are non-empty.
        """
        if not (iv and ciphertext and auth_tag):
            return None
        return cls(iv=iv, ciphertext=ciphertext, auth_tag=auth_tag)


class TokenVault:
    """Encrypts and decrypts single secret strings with a process-wide key.

    The key is read once at construction and never changes afterwards.
    """

    def __init__(self, key_hex: str | None):
        if not key_hex:
            raise ConfigurationError(
                "UP_TOKEN_ENCRYPTION_KEY is not set. Generate one with "
                "'python -m scripts.setup_secrets'."
            )
        try:
            key = bytes.fromhex(key_hex)
        except ValueError as exc:
            raise ConfigurationError(
                "UP_TOKEN_ENCRYPTION_KEY is not valid hex"
            ) from exc
        if len(key) != KEY_BYTE_LENGTH:
            raise ConfigurationError(
                f"Invalid UP_TOKEN_ENCRYPTION_KEY length. Expected "
                f"{KEY_BYTE_LENGTH * 2} hex characters ({KEY_BYTE_LENGTH} bytes), "
                f"but got {len(key_hex)} characters ({len(key)} bytes)."
            )
        self._aesgcm = AESGCM(key)

    @staticmethod
    def generate_key() -> str:
        """Return a new random key as 64 hex characters."""
        return secrets.token_hex(KEY_BYTE_LENGTH)

    def encrypt(self, plaintext: str) -> EncryptedSecret:
        """Encrypt ``plaintext`` under a fresh random IV.

        Raises:
            EncryptionError: If the cipher fails.
        """
        iv = os.urandom(IV_LENGTH)
        try:
            sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        except Exception as exc:
            logger.error("Token encryption failed: %s", type(exc).__name__)
            raise EncryptionError("Failed to encrypt token.") from exc

        # AESGCM appends the tag to the ciphertext
        ciphertext, tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]
        return EncryptedSecret(
            iv=iv.hex(),
            ciphertext=ciphertext.hex(),
            auth_tag=tag.hex(),
        )

    def decrypt(self, secret: EncryptedSecret) -> str | None:
        """Verify and decrypt ``secret``.

        Returns:
            The plaintext, or ``None`` if the tag does not verify or any
            component is malformed.
        """
        try:
            iv = bytes.fromhex(secret.iv)
            ciphertext = bytes.fromhex(secret.ciphertext)
            tag = bytes.fromhex(secret.auth_tag)
        except (ValueError, TypeError, binascii.Error):
            logger.warning("Token decryption failed: malformed hex")
            return None

        if len(iv) != IV_LENGTH or len(tag) != AUTH_TAG_LENGTH:
            logger.warning("Token decryption failed: bad IV or tag length")
            return None

        try:
            plaintext = self._aesgcm.decrypt(iv, ciphertext + tag, None)
        except InvalidTag:
            logger.warning("Token decryption failed: authentication tag mismatch")
            return None

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Token decryption failed: plaintext is not UTF-8")
            return None

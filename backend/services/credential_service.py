"""Lifecycle of a user's Up personal access token.

Looks up the encrypted token through a :class:`UserRepository`, decrypts it
with the :class:`TokenVault`, and handles saving and removing it.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from services.token_vault import TokenVault
from services.user_repository import UserRepository

logger = logging.getLogger(__name__)

UP_TOKEN_PREFIX = "up:yeah:"


class CredentialState(str, Enum):
    NOT_CONFIGURED = "not_configured"
    DECRYPTION_FAILED = "decryption_failed"
    READY = "ready"


@dataclass(frozen=True)
class CredentialResult:
    """Outcome of loading a user's token.  ``token`` is set only when READY."""

    state: CredentialState
    token: str | None = None

    def __repr__(self) -> str:
        # Keep the plaintext token out of logs and tracebacks
        return f"CredentialResult(state={self.state.value})"


class InvalidTokenFormatError(ValueError):
    """The submitted token is empty or lacks the ``up:yeah:`` prefix."""


class CredentialService:
    """Save, load, and remove a user's encrypted Up token."""

    def __init__(self, repository: UserRepository, vault: TokenVault):
        self._repository = repository
        self._vault = vault

    def get_decrypted_credential(self, user_id: str) -> CredentialResult:
        """Load and decrypt the user's token.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        secret = self._repository.find_encrypted_token(user_id)
        if secret is None:
            return CredentialResult(CredentialState.NOT_CONFIGURED)

        token = self._vault.decrypt(secret)
        if token is None:
            logger.warning("Stored Up token for user %s could not be decrypted", user_id)
            return CredentialResult(CredentialState.DECRYPTION_FAILED)
        return CredentialResult(CredentialState.READY, token)

    def has_credential(self, user_id: str) -> bool:
        return self._repository.find_encrypted_token(user_id) is not None

    def save_credential(self, user_id: str, plaintext: str | None) -> None:
        """Validate, encrypt, and store a token, replacing any previous one.

        Raises:
            InvalidTokenFormatError: Empty input or missing prefix.
            UserNotFoundError: If the user does not exist.
            EncryptionError: If encryption fails.
        """
        token = validate_token_format(plaintext)
        secret = self._vault.encrypt(token)
        self._repository.update_encrypted_token(user_id, secret)
        logger.info("Saved encrypted Up token for user %s", user_id)

    def remove_credential(self, user_id: str) -> None:
        """Clear the stored token.  Removing an absent token is a no-op success."""
        self._repository.update_encrypted_token(user_id, None)
        logger.info("Removed Up token for user %s", user_id)


def validate_token_format(plaintext: str | None) -> str:
    """Return the trimmed token or raise :class:`InvalidTokenFormatError`."""
    if not isinstance(plaintext, str) or not plaintext.strip():
        raise InvalidTokenFormatError("Token is missing or invalid.")
    token = plaintext.strip()
    if not token.startswith(UP_TOKEN_PREFIX) or len(token) == len(UP_TOKEN_PREFIX):
        raise InvalidTokenFormatError(
            f"Invalid token format. Expected '{UP_TOKEN_PREFIX}...'"
        )
    return token

"""Persistence port for a user's stored token triple."""

import logging
from typing import Protocol

from sqlalchemy.orm import Session

from models import User
from services.token_vault import EncryptedSecret

logger = logging.getLogger(__name__)


class UserNotFoundError(Exception):
    """No user row exists for the given id."""


class UserRepository(Protocol):
    """What the credential lifecycle needs from storage."""

    def find_encrypted_token(self, user_id: str) -> EncryptedSecret | None:
        """Return the stored triple, or None if absent or partial.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        ...

    def update_encrypted_token(self, user_id: str, secret: EncryptedSecret | None) -> None:
        """Replace the stored triple; ``None`` clears all three columns.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        ...


class SqlAlchemyUserRepository:
    """:class:`UserRepository` backed by the ``users`` table.

    Flushes but does not commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self._db = db

    def _get_user(self, user_id: str) -> User:
        user = self._db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return user

    def find_encrypted_token(self, user_id: str) -> EncryptedSecret | None:
        user = self._get_user(user_id)
        return EncryptedSecret.from_columns(
            iv=user.up_token_iv,
            ciphertext=user.encrypted_up_token,
            auth_tag=user.up_token_auth_tag,
        )

    def update_encrypted_token(self, user_id: str, secret: EncryptedSecret | None) -> None:
        user = self._get_user(user_id)
        if secret is None:
            user.encrypted_up_token = None
            user.up_token_iv = None
            user.up_token_auth_tag = None
        else:
            user.encrypted_up_token = secret.ciphertext
            user.up_token_iv = secret.iv
            user.up_token_auth_tag = secret.auth_tag
        self._db.flush()

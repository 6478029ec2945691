"""OS keychain access for the dashboard's startup secrets.

The AES key for stored Up tokens and the session signing secret can be
kept in the keychain under the ``up-dashboard`` service instead of
``.env``.  Settings read them through :class:`config.KeychainSettingsSource`
and ``scripts/setup_secrets.py`` writes them.

Per-user Up tokens never go here; they are encrypted into the ``users``
table by :class:`services.token_vault.TokenVault`.
"""

import logging
from types import ModuleType

logger = logging.getLogger(__name__)

SERVICE_NAME = "up-dashboard"

# Settings fields that may be sourced from the keychain
CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "UP_TOKEN_ENCRYPTION_KEY",
        "SESSION_SECRET",
        "OAUTH_CLIENT_ID",
        "OAUTH_CLIENT_SECRET",
    }
)


def _keyring() -> ModuleType | None:
    # None when keyring is not installed
    try:
        import keyring
    except ImportError:
        return None
    return keyring


def get_credential(key: str) -> str | None:
    """Look up ``key`` in the keychain.

    A missing entry, a missing ``keyring`` package and a locked or broken
    backend all read as ``None``, so settings fall through to the
    environment.
    """
    keyring = _keyring()
    if keyring is None:
        return None
    try:
        return keyring.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("Keychain read failed for %s", key, exc_info=True)
        return None


def set_credential(key: str, value: str) -> bool:
    """Save a startup secret to the keychain.

    Returns:
        ``True`` once stored.  ``False`` for a name outside
        :data:`CREDENTIAL_KEYS`, a blank value, or a keychain that refused
        the write.
    """
    if key not in CREDENTIAL_KEYS:
        logger.warning("Refusing to store %s: not a keychain-backed setting", key)
        return False
    if not value or not value.strip():
        logger.warning("Refusing to store a blank %s", key)
        return False

    keyring = _keyring()
    if keyring is None:
        logger.warning("keyring is not installed; %s was not stored", key)
        return False
    try:
        keyring.set_password(SERVICE_NAME, key, value)
    except Exception:
        logger.warning("Keychain write failed for %s", key, exc_info=True)
        return False
    logger.info("Saved %s to the keychain", key)
    return True

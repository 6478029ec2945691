"""Test fixtures and sample data."""
import pytest
from sqlalchemy.orm import Session

from models import User
from services.token_vault import TokenVault
from tests.fixtures.mocks import TEST_TOKEN

TEST_ENCRYPTION_KEY = "0123456789abcdef" * 4
TEST_SESSION_SECRET = "test-session-secret"


def store_token(db: Session, user: User, token: str = TEST_TOKEN) -> User:
    """Encrypt ``token`` with the test key and store it on ``user``."""
    secret = TokenVault(TEST_ENCRYPTION_KEY).encrypt(token)
    user.encrypted_up_token = secret.ciphertext
    user.up_token_iv = secret.iv
    user.up_token_auth_tag = secret.auth_tag
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db: Session) -> User:
    """A signed-up user with no Up token stored."""
    user = User(id="user-1", email="jess@example.com", name="Jess")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user_with_token(db: Session, user: User) -> User:
    """A user whose Up token is stored and decryptable."""
    return store_token(db, user)

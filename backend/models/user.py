"""User model - a signed-in dashboard user and their stored Up token."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String

from database import Base
from models.utils import generate_uuid


class User(Base):
    """A dashboard user, created by the identity layer on first sign-in.

    The Up personal access token is stored as an AES-256-GCM triple.
    The three token columns are written together and cleared together;
    a row with only some of them set is treated as "not configured".
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, index=True, nullable=True)
    name = Column(String, nullable=True)

    encrypted_up_token = Column(String, nullable=True)  # hex ciphertext
    up_token_iv = Column(String(32), nullable=True)  # hex, 16 bytes
    up_token_auth_tag = Column(String(32), nullable=True)  # hex, 16 bytes

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

"""SQLAlchemy ORM models."""

from .user import User
from .utils import generate_uuid

__all__ = ["User", "generate_uuid"]

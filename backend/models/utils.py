"""Shared helpers for ORM models."""

import uuid


def generate_uuid() -> str:
    """New random primary key as a 36-character string."""
    return str(uuid.uuid4())

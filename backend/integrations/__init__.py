"""External API integrations.

This package contains:
- Up client: Authenticated async client for the Up Banking API
- Up types: Parsed views over Up JSON:API resources
- Exceptions: Typed errors raised by the client
"""

from integrations.exceptions import (
    UpAPIError,
    UpAuthError,
    UpConnectionError,
    UpDataError,
    UpError,
)
from integrations.up_client import UpClient

__all__ = [
    "UpAPIError",
    "UpAuthError",
    "UpClient",
    "UpConnectionError",
    "UpDataError",
    "UpError",
]

"""Typed exception hierarchy for Up API errors.

Provides structured exceptions for differentiated error handling
(a revoked token vs transient network errors vs server errors).
Messages are safe to show to users: they never contain the token.
"""


class UpError(Exception):
    """Base exception for all Up API errors."""

    retriable: bool = False


class UpAuthError(UpError):
    """The token was rejected by the Up API (HTTP 401).

    The token decrypted fine but is stale, revoked, or mistyped.
    """


class UpConnectionError(UpError):
    """Network failures: timeouts, DNS resolution, connection refused.

    Retriable by default.
    """

    def __init__(self, message: str, retriable: bool = True):
        self.retriable = retriable
        super().__init__(message)


class UpAPIError(UpError):
    """HTTP 4xx/5xx responses other than 401."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def retriable(self) -> bool:
        """429 (rate limit) and 5xx errors are generally retriable."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class UpDataError(UpError):
    """Malformed or unparseable success response."""

    pass

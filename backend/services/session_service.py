"""Session token verification.

Sign-in happens in the external identity layer (OAuth), which issues an
HS256 JWT signed with ``SESSION_SECRET`` whose ``sub`` is our user id.
This module verifies those tokens; ``create_token`` exists for the identity
layer and for tests.
"""

from datetime import datetime, timedelta, timezone

import jwt


class InvalidSessionError(Exception):
    """The session token is missing, expired, or malformed."""


class SessionService:
    """Creates and verifies session JWTs."""

    ALGORITHM = "HS256"
    DEFAULT_EXPIRE = timedelta(hours=24)

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ValueError("SESSION_SECRET cannot be empty")
        self._secret_key = secret_key

    def create_token(self, user_id: str, expires_delta: timedelta | None = None) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + (expires_delta or self.DEFAULT_EXPIRE),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by a valid token.

        Raises:
            InvalidSessionError: If the token is invalid, expired, or has no subject.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidSessionError("Session has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidSessionError("Invalid session token") from e

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidSessionError("Session token has no subject")
        return user_id

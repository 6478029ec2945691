"""Shared dependencies and error mapping for route handlers.

Every dependency here is a plain function so tests can replace it through
``app.dependency_overrides``.
"""

import logging
from typing import Callable

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from integrations.exceptions import UpAPIError, UpAuthError, UpConnectionError, UpError
from integrations.up_client import UpClient
from services.aggregation_service import AggregationError
from services.credential_service import CredentialService, CredentialState
from services.session_service import InvalidSessionError, SessionService
from services.token_vault import TokenVault
from services.user_repository import SqlAlchemyUserRepository, UserNotFoundError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], UpClient]


def get_vault(request: Request) -> TokenVault:
    """The process-wide vault built at startup."""
    return request.app.state.vault


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_current_user_id(
    authorization: str | None = Header(default=None),
    sessions: SessionService = Depends(get_session_service),
) -> str:
    """Resolve the signed-in user from an ``Authorization: Bearer`` session token.

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized: User not authenticated.")
    try:
        return sessions.verify_token(authorization[7:].strip())
    except InvalidSessionError as e:
        logger.info("Rejected session token: %s", e)
        raise HTTPException(status_code=401, detail="Unauthorized: User not authenticated.")


def get_credential_service(
    db: Session = Depends(get_db),
    vault: TokenVault = Depends(get_vault),
) -> CredentialService:
    return CredentialService(SqlAlchemyUserRepository(db), vault)


def get_client_factory() -> ClientFactory:
    """Build Up clients from the configured base URL and timeout."""
    settings = get_settings()

    def factory(token: str) -> UpClient:
        return UpClient(
            token,
            base_url=settings.UP_API_BASE_URL,
            timeout=settings.UP_API_TIMEOUT_SECONDS,
        )

    return factory


def require_up_token(
    user_id: str = Depends(get_current_user_id),
    credentials: CredentialService = Depends(get_credential_service),
) -> str:
    """Return the signed-in user's decrypted Up token.

    Raises:
        HTTPException: 401 for an unknown user, 400 if no token is stored,
            500 if the stored token cannot be decrypted.
    """
    try:
        result = credentials.get_decrypted_credential(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=401, detail="Unauthorized: User not found.")

    if result.state == CredentialState.NOT_CONFIGURED:
        raise HTTPException(
            status_code=400,
            detail="API token not configured. Please add your Up token in Settings.",
        )
    if result.state == CredentialState.DECRYPTION_FAILED:
        raise HTTPException(
            status_code=500,
            detail="Failed to decrypt your API token. Please re-enter it in Settings.",
        )
    return result.token


def up_error_to_http(exc: Exception, action: str) -> HTTPException:
    """Map an Up API failure to the HTTP error returned to the browser.

    Args:
        exc: An :class:`UpError` or :class:`AggregationError`.
        action: What was being done, e.g. ``"fetch transactions"``.
    """
    cause = exc.cause if isinstance(exc, AggregationError) else exc
    if isinstance(cause, UpAuthError):
        return HTTPException(
            status_code=401,
            detail="Up API Authorization Failed. Your token appears to be invalid.",
        )
    if isinstance(cause, UpConnectionError):
        return HTTPException(status_code=500, detail=f"Could not reach the Up API to {action}.")
    if isinstance(cause, UpAPIError):
        return HTTPException(status_code=500, detail=str(cause))
    if isinstance(cause, UpError):
        return HTTPException(status_code=500, detail=f"Failed to {action}.")
    raise TypeError(f"Not an Up API error: {type(exc).__name__}")

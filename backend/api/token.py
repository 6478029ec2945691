"""Up token settings endpoints: save, inspect, and remove the stored token."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.helpers import get_credential_service, get_current_user_id
from database import get_db
from schemas.user import MessageResponse, TokenSaveRequest, TokenStatusResponse
from services.credential_service import CredentialService, InvalidTokenFormatError
from services.user_repository import UserNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user/token", tags=["token"])


@router.get("", response_model=TokenStatusResponse)
def get_token_status(
    user_id: str = Depends(get_current_user_id),
    credentials: CredentialService = Depends(get_credential_service),
):
    """Report whether a complete encrypted token is stored (never the token itself)."""
    try:
        return TokenStatusResponse(configured=credentials.has_credential(user_id))
    except UserNotFoundError:
        raise HTTPException(status_code=401, detail="Unauthorized: User not found.")


@router.post("", response_model=MessageResponse)
def save_token(
    body: TokenSaveRequest,
    user_id: str = Depends(get_current_user_id),
    credentials: CredentialService = Depends(get_credential_service),
    db: Session = Depends(get_db),
):
    """Validate, encrypt, and store the user's Up personal access token."""
    try:
        credentials.save_credential(user_id, body.token)
    except InvalidTokenFormatError as e:
        raise HTTPException(status_code=400, detail=f"Bad Request: {e}")
    except UserNotFoundError:
        raise HTTPException(status_code=401, detail="Unauthorized: User not found.")
    except Exception:
        db.rollback()
        logger.exception("Error saving token for user %s", user_id)
        raise HTTPException(status_code=500, detail="Internal Server Error: Failed to save token.")

    db.commit()
    return MessageResponse(message="Token saved successfully.")


@router.delete("", response_model=MessageResponse)
def remove_token(
    user_id: str = Depends(get_current_user_id),
    credentials: CredentialService = Depends(get_credential_service),
    db: Session = Depends(get_db),
):
    """Clear the stored token.  Succeeds even if none was stored."""
    try:
        credentials.remove_credential(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=401, detail="Unauthorized: User not found.")
    except Exception:
        db.rollback()
        logger.exception("Error removing token for user %s", user_id)
        raise HTTPException(status_code=500, detail="Internal Server Error: Failed to remove token.")

    db.commit()
    return MessageResponse(message="Token removed successfully.")

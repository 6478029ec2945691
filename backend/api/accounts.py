"""Up account listing endpoint."""

import logging

from fastapi import APIRouter, Depends

from api.helpers import ClientFactory, get_client_factory, require_up_token, up_error_to_http
from config import get_settings
from schemas.user import AccountsResponse
from services.aggregation_service import AggregationError, collect_accounts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user/accounts", tags=["accounts"])


@router.get("", response_model=AccountsResponse)
async def list_accounts(
    token: str = Depends(require_up_token),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Return every account, following pagination up to the page cap.

    ``complete`` is False when the cap stopped the walk early.
    """
    try:
        async with client_factory(token) as client:
            run = await collect_accounts(client, get_settings().MAX_PAGES)
    except AggregationError as e:
        logger.warning("Error fetching accounts: %s", e)
        raise up_error_to_http(e, "fetch accounts")

    return AccountsResponse(data=run.items, complete=run.exhausted)

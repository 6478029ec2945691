"""Paged transaction listing endpoint.

Returns one page at a time; the browser follows ``links`` by passing the
cursor back as ``cursorType``/``cursorValue``.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.helpers import ClientFactory, get_client_factory, require_up_token, up_error_to_http
from config import get_settings
from integrations.exceptions import UpError
from integrations.parsing_utils import CURSOR_TYPES, parse_iso_datetime
from schemas.user import PageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user/transactions", tags=["transactions"])


@router.get("", response_model=PageResponse)
async def list_transactions(
    cursor_type: Optional[str] = Query(default=None, alias="cursorType"),
    cursor_value: Optional[str] = Query(default=None, alias="cursorValue"),
    since: Optional[datetime] = Query(default=None),
    until: Optional[datetime] = Query(default=None),
    token: str = Depends(require_up_token),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Fetch one page of transactions, optionally within ``[since, until)``.

    Without a cursor the first (newest) page is returned.
    """
    if (cursor_type is None) != (cursor_value is None) or (
        cursor_type is not None and (cursor_type not in CURSOR_TYPES or not cursor_value)
    ):
        raise HTTPException(
            status_code=400,
            detail="Missing or invalid cursorType/cursorValue query parameters",
        )
    # Naive bounds are taken as UTC
    since = parse_iso_datetime(since)
    until = parse_iso_datetime(until)
    if since is not None and until is not None and since >= until:
        raise HTTPException(status_code=400, detail="'since' must be before 'until'")

    page_size = get_settings().RECENT_TRANSACTIONS_PAGE_SIZE
    try:
        async with client_factory(token) as client:
            page = await client.get_transactions_page(
                page_size=page_size,
                since=since,
                until=until,
                cursor_type=cursor_type,
                cursor_value=cursor_value,
            )
    except UpError as e:
        logger.warning("Error fetching transaction page: %s", e)
        raise up_error_to_http(e, "fetch transactions")

    return page.to_payload()

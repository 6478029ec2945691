"""State machine for a paginated transaction listing view.

A listing is ``IDLE`` until its first load, then ``LOADING`` and finally
``LOADED`` or ``ERROR``.  Changing the date filter starts a new run with a
fresh request id; "load more" continues the current run from its ``next``
cursor.  A response is applied only if its request id is still current, so
a slow response for an old filter cannot overwrite a newer one.
"""

import itertools
import logging
from enum import Enum
from typing import Awaitable, Callable

from integrations.exceptions import UpError
from integrations.up_client import UpClient
from integrations.up_types import Page
from services.aggregation_service import DateFilter

logger = logging.getLogger(__name__)

PageFetcher = Callable[[DateFilter, str | None], Awaitable[Page]]


class ListingStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class TransactionListing:
    """One listing view's items, cursor, and load status."""

    def __init__(self, fetch_page: PageFetcher):
        self._fetch_page = fetch_page
        self._ids = itertools.count(1)
        self.request_id = 0
        self.status = ListingStatus.IDLE
        self.date_filter = DateFilter()
        self.items: list[dict] = []
        self.next_cursor: str | None = None
        self.error: str | None = None

    @classmethod
    def for_client(cls, client: UpClient, page_size: int = 25) -> "TransactionListing":
        """Listing backed by ``/transactions``, following ``page[after]`` cursors."""

        async def fetch(date_filter: DateFilter, cursor: str | None) -> Page:
            return await client.get_transactions_page(
                page_size=page_size,
                since=date_filter.since,
                until=date_filter.until,
                cursor_type="after" if cursor else None,
                cursor_value=cursor,
            )

        return cls(fetch)

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    def is_current(self, request_id: int) -> bool:
        return request_id == self.request_id

    async def change_filter(self, date_filter: DateFilter) -> bool:
        """Start a new run for ``date_filter`` and load its first page.

        Returns:
            True if this run's result was applied, False if a newer run
            superseded it while the page was in flight.
        """
        request_id = next(self._ids)
        self.request_id = request_id
        self.date_filter = date_filter
        self.items = []
        self.next_cursor = None
        self.error = None
        self.status = ListingStatus.LOADING
        return await self._run(request_id, date_filter, None)

    async def load_more(self) -> bool:
        """Append the next page of the current run.

        Returns:
            False if there is nothing more to load, a load is already in
            flight, or the result arrived after a filter change.
        """
        if self.status == ListingStatus.LOADING or not self.has_more:
            return False
        self.status = ListingStatus.LOADING
        return await self._run(self.request_id, self.date_filter, self.next_cursor)

    async def _run(self, request_id: int, date_filter: DateFilter, cursor: str | None) -> bool:
        try:
            page = await self._fetch_page(date_filter, cursor)
        except UpError as exc:
            if not self.is_current(request_id):
                logger.debug("Discarding stale listing error (request %d)", request_id)
                return False
            self.status = ListingStatus.ERROR
            self.error = str(exc)
            return True

        if not self.is_current(request_id):
            logger.debug("Discarding stale listing page (request %d)", request_id)
            return False

        self.items.extend(page.items)
        self.next_cursor = page.next_cursor
        self.status = ListingStatus.LOADED
        return True

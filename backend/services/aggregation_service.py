"""Cursor-following aggregation over Up list endpoints.

Walks ``links.next`` from the first page until the collection is
exhausted or a page cap is hit, concatenating items in server order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from integrations.exceptions import UpError
from integrations.up_client import MAX_PAGE_SIZE, UpClient, build_list_params

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 10


@dataclass(frozen=True)
class DateFilter:
    """A ``[since, until)`` window; either bound may be open."""

    since: datetime | None = None
    until: datetime | None = None

    @classmethod
    def for_month(cls, year: int, month: int, tz: tzinfo) -> "DateFilter":
        """Calendar month in ``tz``: first instant of the month up to the
        first instant of the next month (exclusive)."""
        since = datetime(year, month, 1, tzinfo=tz)
        if month == 12:
            until = datetime(year + 1, 1, 1, tzinfo=tz)
        else:
            until = datetime(year, month + 1, 1, tzinfo=tz)
        return cls(since=since, until=until)


@dataclass
class AggregationRun:
    """Result of walking one paginated collection.

    ``exhausted`` is True when the last fetched page had no ``next`` link.
    When False the walk stopped at ``max_pages`` and ``items`` may be
    incomplete.
    """

    items: list[dict] = field(default_factory=list)
    pages_fetched: int = 0
    exhausted: bool = False
    max_pages: int = DEFAULT_MAX_PAGES

    @property
    def cap_reached(self) -> bool:
        return not self.exhausted


class AggregationError(Exception):
    """A page fetch failed part-way through a walk.

    The items gathered before the failure are kept for diagnostics only;
    they are never a usable result.
    """

    def __init__(self, cause: UpError, pages_fetched: int, partial_items: list[dict]):
        self.cause = cause
        self.pages_fetched = pages_fetched
        self.partial_items = partial_items
        super().__init__(str(cause))


async def collect_all(
    client: UpClient,
    path: str,
    date_filter: DateFilter | None = None,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> AggregationRun:
    """Fetch and concatenate every page of ``path`` up to ``max_pages``.

    Pages are fetched strictly in sequence since each request target is the
    previous page's ``next`` link.

    Raises:
        AggregationError: On the first page that fails.
        ValueError: If ``max_pages`` is less than 1.
    """
    if max_pages < 1:
        raise ValueError(f"max_pages must be at least 1, got {max_pages}")

    date_filter = date_filter or DateFilter()
    run = AggregationRun(max_pages=max_pages)
    target: str = path
    params: dict | None = build_list_params(
        MAX_PAGE_SIZE, since=date_filter.since, until=date_filter.until
    )

    while run.pages_fetched < max_pages:
        try:
            page = await client.get_page(target, params=params)
        except UpError as exc:
            logger.warning(
                "Aggregation of %s failed after %d page(s): %s",
                path, run.pages_fetched, type(exc).__name__,
            )
            raise AggregationError(exc, run.pages_fetched, run.items) from exc

        run.items.extend(page.items)
        run.pages_fetched += 1

        if not page.next_url:
            run.exhausted = True
            break
        # The next link already carries every query parameter
        target, params = page.next_url, None

    if run.cap_reached:
        logger.warning(
            "Stopped %s after %d pages (%d items); results may be incomplete",
            path, run.pages_fetched, len(run.items),
        )
    else:
        logger.debug("Collected %d items from %s in %d page(s)", len(run.items), path, run.pages_fetched)
    return run


async def collect_transactions(
    client: UpClient,
    date_filter: DateFilter | None = None,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> AggregationRun:
    return await collect_all(client, "/transactions", date_filter, max_pages)


async def collect_accounts(client: UpClient, max_pages: int = DEFAULT_MAX_PAGES) -> AggregationRun:
    return await collect_all(client, "/accounts", None, max_pages)

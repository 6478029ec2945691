"""Up Banking API client.

Thin async wrapper around the Up REST API (https://developer.up.com.au/).
Every call is one authenticated GET; errors are raised as the typed
exceptions in :mod:`integrations.exceptions`.
"""

import json
import logging
from datetime import datetime
from urllib.parse import urlsplit

import httpx

from integrations.exceptions import (
    UpAPIError,
    UpAuthError,
    UpConnectionError,
    UpDataError,
)
from integrations.parsing_utils import CURSOR_TYPES, to_wire_timestamp
from integrations.up_types import Category, Page

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.up.com.au/api/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Largest page[size] the Up API accepts
MAX_PAGE_SIZE = 100


def _empty_collection() -> dict:
    return {"data": [], "links": {"prev": None, "next": None}}


def build_list_params(
    page_size: int = MAX_PAGE_SIZE,
    since: datetime | None = None,
    until: datetime | None = None,
    cursor_type: str | None = None,
    cursor_value: str | None = None,
) -> dict[str, str]:
    """Build query parameters for a list endpoint.

    ``since`` is inclusive and ``until`` exclusive, both sent as UTC
    timestamps in whole seconds.  A fractional ``since`` is truncated and a
    fractional ``until`` rounded up, so the window never shrinks.  At most
    one cursor direction is sent.
    """
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")

    params = {"page[size]": str(page_size)}
    if since is not None:
        params["filter[since]"] = to_wire_timestamp(since)
    if until is not None:
        params["filter[until]"] = to_wire_timestamp(until, round_up=True)
    if cursor_type is not None or cursor_value is not None:
        if cursor_type not in CURSOR_TYPES or not cursor_value:
            raise ValueError("cursor_type must be 'after' or 'before' with a non-empty cursor_value")
        params[f"page[{cursor_type}]"] = cursor_value
    return params


def _error_message(response: httpx.Response, resource: str) -> str:
    """Build a readable message from an Up error response.

    Up returns ``{"errors": [{"status", "title", "detail"}]}``.  Anything
    else (HTML from a proxy, an empty body) falls back to a generic message.
    """
    status = response.status_code
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
        body = None

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            first = errors[0]
            title = first.get("title") or "Error"
            detail = first.get("detail")
            if detail:
                return f"Up API Error ({status}): {title} - {detail}"
            return f"Up API Error ({status}): {title}"
        message = body.get("message")
        if isinstance(message, str) and message:
            return f"Up API Error ({status}): {message}"

    return f"Up API Error ({status}): Failed to fetch {resource}."


class UpClient:
    """Authenticated client for one user's Up token.

    Usage::

        async with UpClient(token) as client:
            page = await client.get_page("/accounts")

    Args:
        token: Plaintext personal access token (``up:yeah:...``).
        base_url: API root; relative paths are joined to it.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Cache-Control": "no-cache",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "UpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _resolve(self, path_or_url: str) -> str:
        """Return the request target, rejecting links to foreign hosts.

        Pagination links are absolute URLs taken from response bodies; the
        bearer token must only ever be sent to the configured API root.
        """
        if path_or_url.startswith(("http://", "https://")):
            if not path_or_url.startswith(self._base_url + "/"):
                raise UpDataError("Pagination link points outside the Up API")
            return path_or_url
        if not path_or_url.startswith("/"):
            path_or_url = "/" + path_or_url
        return path_or_url

    async def fetch_resource(self, path_or_url: str, params: dict | None = None) -> dict:
        """GET a path (joined to the base URL) or an absolute URL.

        Returns:
            The decoded JSON body.  An empty body yields an empty collection.

        Raises:
            UpAuthError: HTTP 401.
            UpAPIError: Any other non-success status.
            UpConnectionError: Timeout or transport failure.
            UpDataError: A success body that is not JSON.
        """
        target = self._resolve(path_or_url)
        resource = urlsplit(target).path or target

        try:
            response = await self._client.get(target, params=params)
        except httpx.TimeoutException as exc:
            raise UpConnectionError(f"Up API request timed out: {resource}") from exc
        except httpx.TransportError as exc:
            raise UpConnectionError(
                f"Up API connection failed: {type(exc).__name__}"
            ) from exc

        if not response.is_success:
            message = _error_message(response, resource)
            logger.warning("Up API request failed: %s (%s)", resource, response.status_code)
            if response.status_code == 401:
                raise UpAuthError(message)
            raise UpAPIError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content.strip():
            return _empty_collection()

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
            raise UpDataError(f"Up API returned invalid JSON for {resource}") from exc

    async def get_page(self, path_or_url: str, params: dict | None = None) -> Page:
        """Fetch one page of a list endpoint."""
        payload = await self.fetch_resource(path_or_url, params=params)
        if not isinstance(payload, dict):
            raise UpDataError("Expected a JSON object from a list endpoint")
        return Page.from_payload(payload)

    async def get_accounts_page(self, page_size: int = MAX_PAGE_SIZE) -> Page:
        return await self.get_page("/accounts", params=build_list_params(page_size))

    async def get_transactions_page(
        self,
        page_size: int = MAX_PAGE_SIZE,
        since: datetime | None = None,
        until: datetime | None = None,
        cursor_type: str | None = None,
        cursor_value: str | None = None,
    ) -> Page:
        """Fetch one page of transactions across all accounts, newest first."""
        params = build_list_params(page_size, since, until, cursor_type, cursor_value)
        return await self.get_page("/transactions", params=params)

    async def ping(self) -> dict:
        """Check the token against ``/util/ping``.

        Returns:
            The ``meta`` object, e.g. ``{"id": "...", "statusEmoji": "⚡️"}``.

        Raises:
            UpAuthError: If the token is rejected.
        """
        payload = await self.fetch_resource("/util/ping")
        return payload.get("meta") or {}

    async def get_categories(self) -> list[Category]:
        """Fetch all categories.  Up does not paginate this endpoint."""
        page = await self.get_page("/categories")
        return [Category.from_resource(r) for r in page.items]

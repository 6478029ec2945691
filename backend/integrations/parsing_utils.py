"""Shared parsing utilities for the Up API client.

Centralises datetime conversion to and from the Up wire format and
cursor extraction from pagination links.
"""

from datetime import date, datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

CURSOR_TYPES = ("after", "before")


def parse_iso_datetime(value) -> datetime | None:
    """Parse an ISO 8601 string (or date/datetime object) to an aware datetime.

    Up returns RFC 3339 timestamps with a local offset
    (``"2024-01-15T10:30:00+11:00"``); a trailing ``Z`` is accepted as well.

    Args:
        value: A string, date, datetime, or None.

    Returns:
        A timezone-aware datetime (naive input is taken as UTC), or None if
        the value cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    value_str = str(value)
    if value_str.endswith("Z"):
        value_str = value_str[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(value_str)
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_wire_timestamp(value: datetime, round_up: bool = False) -> str:
    """Format a datetime for ``filter[since]`` / ``filter[until]``.

    The result is UTC with a ``Z`` suffix, e.g. ``"2024-03-01T00:00:00Z"``.
    Naive datetimes are taken as UTC.  Up only accepts whole seconds, so
    fractional seconds are truncated, or rounded up to the next second when
    ``round_up`` is set.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    if round_up and utc.microsecond:
        utc += timedelta(seconds=1)
    utc = utc.replace(microsecond=0)
    return utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def extract_cursor(link: str | None) -> tuple[str, str] | None:
    """Pull the cursor out of a pagination link.

    ``https://api.up.com.au/api/v1/transactions?page[size]=25&page[after]=WyIy``
    yields ``("after", "WyIy")``.

    Returns:
        ``(cursor_type, cursor_value)``, or None if the link is empty or
        carries no ``page[after]``/``page[before]`` parameter.
    """
    if not link:
        return None
    query = parse_qs(urlsplit(link).query)
    for cursor_type in CURSOR_TYPES:
        values = query.get(f"page[{cursor_type}]")
        if values and values[0]:
            return cursor_type, values[0]
    return None

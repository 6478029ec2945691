"""Normalized views over Up API JSON:API resources.

The client returns raw resource dicts so route handlers can pass pages
through unchanged; analytics code works on these parsed dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime

from integrations.parsing_utils import extract_cursor, parse_iso_datetime
from integrations.exceptions import UpDataError

UNCATEGORIZED = "uncategorized"


@dataclass(frozen=True)
class Money:
    """An amount in integer minor units (cents) with its currency."""

    currency_code: str
    value_in_base_units: int

    @classmethod
    def from_api(cls, data: dict) -> "Money":
        if not isinstance(data, dict):
            raise UpDataError(f"Malformed money object: {data!r}")
        try:
            return cls(
                currency_code=data.get("currencyCode") or "AUD",
                value_in_base_units=int(data["valueInBaseUnits"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise UpDataError(f"Malformed money object: {data!r}") from exc


@dataclass
class Page:
    """One page of a list endpoint."""

    items: list[dict]
    next_url: str | None = None
    prev_url: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "Page":
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise UpDataError("Expected 'data' to be a list of resources")
        links = payload.get("links") or {}
        if not isinstance(links, dict):
            raise UpDataError("Expected 'links' to be an object")
        return cls(items=data, next_url=links.get("next"), prev_url=links.get("prev"))

    @property
    def next_cursor(self) -> str | None:
        cursor = extract_cursor(self.next_url)
        return cursor[1] if cursor else None

    @property
    def prev_cursor(self) -> str | None:
        cursor = extract_cursor(self.prev_url)
        return cursor[1] if cursor else None

    def to_payload(self) -> dict:
        """Rebuild the ``{data, links}`` response shape."""
        return {"data": self.items, "links": {"prev": self.prev_url, "next": self.next_url}}


@dataclass
class Account:
    id: str
    display_name: str
    account_type: str  # "TRANSACTIONAL", "SAVER", "HOME_LOAN"
    balance: Money
    ownership_type: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_resource(cls, resource: dict) -> "Account":
        attrs = _section(resource, "attributes")
        return cls(
            id=resource.get("id", ""),
            display_name=attrs.get("displayName") or "Unnamed Account",
            account_type=attrs.get("accountType") or "",
            balance=Money.from_api(attrs.get("balance") or {}),
            ownership_type=attrs.get("ownershipType"),
            created_at=parse_iso_datetime(attrs.get("createdAt")),
        )


@dataclass
class Transaction:
    id: str
    description: str
    amount: Money
    status: str | None = None
    category_id: str | None = None
    parent_category_id: str | None = None
    message: str | None = None
    created_at: datetime | None = None
    settled_at: datetime | None = None
    tag_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_resource(cls, resource: dict) -> "Transaction":
        attrs = _section(resource, "attributes")
        rels = _section(resource, "relationships")
        return cls(
            id=resource.get("id", ""),
            description=attrs.get("description") or "",
            amount=Money.from_api(attrs.get("amount") or {}),
            status=attrs.get("status"),
            category_id=_related_id(rels, "category"),
            parent_category_id=_related_id(rels, "parentCategory"),
            message=attrs.get("message"),
            created_at=parse_iso_datetime(attrs.get("createdAt")),
            settled_at=parse_iso_datetime(attrs.get("settledAt")),
            tag_ids=_related_ids(rels, "tags"),
        )


@dataclass
class Category:
    id: str
    name: str
    parent_id: str | None = None

    @classmethod
    def from_resource(cls, resource: dict) -> "Category":
        attrs = _section(resource, "attributes")
        rels = _section(resource, "relationships")
        return cls(
            id=resource.get("id", ""),
            name=attrs.get("name") or resource.get("id", ""),
            parent_id=_related_id(rels, "parent"),
        )


def _related_id(relationships: dict, name: str) -> str | None:
    """Return ``relationships[name].data.id``, tolerating any missing level."""
    rel = relationships.get(name) or {}
    data = rel.get("data") if isinstance(rel, dict) else None
    if isinstance(data, dict):
        return data.get("id")
    return None


def _related_ids(relationships: dict, name: str) -> list[str]:
    """Return the ids of a to-many relationship, skipping malformed entries."""
    rel = relationships.get(name) or {}
    data = rel.get("data") if isinstance(rel, dict) else None
    if not isinstance(data, list):
        return []
    return [item["id"] for item in data if isinstance(item, dict) and item.get("id")]


def _section(resource: dict, name: str) -> dict:
    """Return ``resource[name]`` as a dict; a missing section is empty."""
    if not isinstance(resource, dict):
        raise UpDataError(f"Expected a resource object, got {type(resource).__name__}")
    value = resource.get(name) or {}
    if not isinstance(value, dict):
        raise UpDataError(f"Expected '{name}' to be an object in resource {resource.get('id')!r}")
    return value

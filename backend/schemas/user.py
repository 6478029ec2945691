"""Pydantic schemas for the user-facing API."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel

from services.analytics_service import CategorySpending, IncomeSpending


class TokenSaveRequest(BaseModel):
    """Request body for saving an Up token."""

    token: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class TokenStatusResponse(BaseModel):
    configured: bool


class PageLinks(BaseModel):
    prev: Optional[str] = None
    next: Optional[str] = None


class PageResponse(BaseModel):
    """One page of raw Up resources, passed through unchanged."""

    data: list[dict[str, Any]]
    links: PageLinks


class AccountsResponse(BaseModel):
    data: list[dict[str, Any]]
    complete: bool


class IncomeSpendingResponse(BaseModel):
    """Income and spending in minor units.

    ``spending`` is signed (<= 0); ``spending_abs`` is its display form.
    """

    income: int
    spending: int
    spending_abs: int
    net: int

    @classmethod
    def from_totals(cls, totals: IncomeSpending) -> "IncomeSpendingResponse":
        return cls(
            income=totals.income,
            spending=totals.spending,
            spending_abs=abs(totals.spending),
            net=totals.net,
        )


class AccountSummary(BaseModel):
    id: str
    display_name: str
    account_type: str
    balance: int
    currency_code: str


class DashboardResponse(BaseModel):
    total_balance: Optional[int] = None
    accounts: list[AccountSummary] = []
    recent_transactions: Optional[PageResponse] = None
    monthly: Optional[IncomeSpendingResponse] = None
    monthly_complete: bool = True
    errors: dict[str, str] = {}


class CategorySpendingResponse(BaseModel):
    category_id: str
    category_name: str
    spending: int  # absolute, minor units
    color: str

    @classmethod
    def from_bucket(cls, bucket: CategorySpending) -> "CategorySpendingResponse":
        return cls(
            category_id=bucket.category_id,
            category_name=bucket.category_name,
            spending=bucket.total,
            color=bucket.color,
        )


class TrendPoint(BaseModel):
    month: str  # "Mar"
    income: int
    spending: int  # absolute, minor units


class AnalyticsResponse(BaseModel):
    period_start: date
    categories: list[CategorySpendingResponse] = []
    total_spending: int = 0
    trend: list[TrendPoint] = []
    complete: bool = True
    errors: dict[str, str] = {}

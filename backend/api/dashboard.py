"""Dashboard and analytics endpoints."""

import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query

from api.helpers import ClientFactory, get_client_factory, require_up_token
from config import get_settings
from schemas.user import (
    AccountSummary,
    AnalyticsResponse,
    CategorySpendingResponse,
    DashboardResponse,
    IncomeSpendingResponse,
    PageResponse,
    TrendPoint,
)
from services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["dashboard"])


def _build_service(client, settings) -> DashboardService:
    return DashboardService(
        client,
        tz=ZoneInfo(settings.DASHBOARD_TIMEZONE),
        max_pages=settings.MAX_PAGES,
        recent_page_size=settings.RECENT_TRANSACTIONS_PAGE_SIZE,
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    token: str = Depends(require_up_token),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Total balance, this month's income and spending, and recent transactions.

    Each section loads independently; failed sections are reported in
    ``errors`` while the rest still render.  A rejected token fails the whole
    request with 401 so the UI can prompt for a new one.
    """
    settings = get_settings()
    today = datetime.now(ZoneInfo(settings.DASHBOARD_TIMEZONE)).date()
    async with client_factory(token) as client:
        summary = await _build_service(client, settings).load_dashboard(today)

    if summary.auth_failed:
        raise HTTPException(
            status_code=401,
            detail="Up API Authorization Failed. Your token appears to be invalid.",
        )

    return DashboardResponse(
        total_balance=summary.total_balance,
        accounts=[
            AccountSummary(
                id=a.id,
                display_name=a.display_name,
                account_type=a.account_type,
                balance=a.balance.value_in_base_units,
                currency_code=a.balance.currency_code,
            )
            for a in summary.accounts
        ],
        recent_transactions=(
            PageResponse(**summary.recent_transactions.to_payload())
            if summary.recent_transactions is not None
            else None
        ),
        monthly=(
            IncomeSpendingResponse.from_totals(summary.monthly)
            if summary.monthly is not None
            else None
        ),
        monthly_complete=summary.monthly_complete,
        errors=summary.errors,
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    token: str = Depends(require_up_token),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Spending by category and the income/spending trend for one month.

    Defaults to the current month.
    """
    settings = get_settings()
    now = datetime.now(ZoneInfo(settings.DASHBOARD_TIMEZONE))
    year = year or now.year
    month = month or now.month

    async with client_factory(token) as client:
        report = await _build_service(client, settings).load_analytics(year, month)

    if report.auth_failed:
        raise HTTPException(
            status_code=401,
            detail="Up API Authorization Failed. Your token appears to be invalid.",
        )

    trend = []
    if report.trend is not None:
        trend.append(
            TrendPoint(
                month=report.period_start.strftime("%b"),
                income=report.trend.income,
                spending=abs(report.trend.spending),
            )
        )

    return AnalyticsResponse(
        period_start=report.period_start,
        categories=[CategorySpendingResponse.from_bucket(b) for b in report.categories],
        total_spending=sum(b.total for b in report.categories),
        trend=trend,
        complete=report.complete,
        errors=report.errors,
    )

"""Dashboard and analytics page data.

Independent resources (accounts, transactions, categories) are fetched
concurrently and joined with :func:`settle_all`, so one failing section
never blanks the others.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Any, Awaitable

from integrations.exceptions import UpAuthError, UpError
from integrations.up_client import UpClient
from integrations.up_types import Account, Category, Page, Transaction
from services.aggregation_service import (
    DEFAULT_MAX_PAGES,
    AggregationError,
    DateFilter,
    collect_accounts,
    collect_transactions,
)
from services.analytics_service import (
    CategorySpending,
    IncomeSpending,
    spending_by_category,
    split_income_spending,
    total_balance,
)

logger = logging.getLogger(__name__)


@dataclass
class Settled:
    """Outcome of one task in a settle-all join."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(*aws: Awaitable) -> list[Settled]:
    """Run awaitables concurrently and capture each outcome independently.

    Unlike a plain ``gather``, a failure in one task neither cancels the
    others nor hides their results.  Cancellation of the caller still
    propagates.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    settled = []
    for result in results:
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            settled.append(Settled(error=result))
        else:
            settled.append(Settled(value=result))
    return settled


def describe_error(error: BaseException) -> str:
    """Map a failure to a message that is safe to show users."""
    if isinstance(error, AggregationError):
        error = error.cause
    if isinstance(error, UpAuthError):
        return "Your Up API token appears to be invalid. Please update it in Settings."
    if isinstance(error, UpError):
        return str(error)
    return "Unexpected error while loading data."


def is_auth_failure(error: BaseException | None) -> bool:
    if isinstance(error, AggregationError):
        error = error.cause
    return isinstance(error, UpAuthError)


@dataclass
class DashboardSummary:
    total_balance: int | None = None
    accounts: list[Account] = field(default_factory=list)
    recent_transactions: Page | None = None
    monthly: IncomeSpending | None = None
    monthly_complete: bool = True
    errors: dict[str, str] = field(default_factory=dict)
    auth_failed: bool = False


@dataclass
class AnalyticsReport:
    period_start: date
    categories: list[CategorySpending] = field(default_factory=list)
    trend: IncomeSpending | None = None
    complete: bool = True
    errors: dict[str, str] = field(default_factory=dict)
    auth_failed: bool = False


class DashboardService:
    """Builds dashboard and analytics data for one user's client."""

    def __init__(
        self,
        client: UpClient,
        tz: tzinfo,
        max_pages: int = DEFAULT_MAX_PAGES,
        recent_page_size: int = 25,
    ):
        self._client = client
        self._tz = tz
        self._max_pages = max_pages
        self._recent_page_size = recent_page_size

    async def _accounts(self) -> list[Account]:
        run = await collect_accounts(self._client, self._max_pages)
        return [Account.from_resource(r) for r in run.items]

    async def _transactions(self, window: DateFilter) -> tuple[list[Transaction], bool]:
        run = await collect_transactions(self._client, window, self._max_pages)
        return [Transaction.from_resource(r) for r in run.items], run.exhausted

    async def load_dashboard(self, today: date) -> DashboardSummary:
        month = DateFilter.for_month(today.year, today.month, self._tz)
        accounts_res, recent_res, monthly_res = await settle_all(
            self._accounts(),
            self._client.get_transactions_page(page_size=self._recent_page_size),
            self._transactions(month),
        )

        summary = DashboardSummary()
        if accounts_res.ok:
            summary.accounts = accounts_res.value
            summary.total_balance = total_balance(summary.accounts)
        else:
            self._record_error(summary, "accounts", accounts_res.error)

        if recent_res.ok:
            summary.recent_transactions = recent_res.value
        else:
            self._record_error(summary, "recent_transactions", recent_res.error)

        if monthly_res.ok:
            transactions, exhausted = monthly_res.value
            summary.monthly = split_income_spending(transactions)
            summary.monthly_complete = exhausted
        else:
            self._record_error(summary, "monthly", monthly_res.error)

        return summary

    async def load_analytics(self, year: int, month: int) -> AnalyticsReport:
        window = DateFilter.for_month(year, month, self._tz)
        tx_res, cat_res = await settle_all(
            self._transactions(window),
            self._client.get_categories(),
        )

        report = AnalyticsReport(period_start=date(year, month, 1))
        category_names: dict[str, str] = {}
        if cat_res.ok:
            categories: list[Category] = cat_res.value
            category_names = {c.id: c.name for c in categories}
        else:
            # Breakdown still renders with raw category ids as labels
            self._record_error(report, "categories", cat_res.error)

        if tx_res.ok:
            transactions, exhausted = tx_res.value
            report.categories = spending_by_category(transactions, category_names)
            report.trend = split_income_spending(transactions)
            report.complete = exhausted
        else:
            self._record_error(report, "transactions", tx_res.error)

        return report

    @staticmethod
    def _record_error(target, section: str, error: BaseException) -> None:
        if isinstance(error, (UpError, AggregationError)):
            logger.warning("Failed to load %s: %s", section, error)
        else:
            logger.error("Failed to load %s", section, exc_info=error)
        target.errors[section] = describe_error(error)
        target.auth_failed = target.auth_failed or is_auth_failure(error)

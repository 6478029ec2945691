"""Tests for dashboard and analytics loading."""

import asyncio
from datetime import date, timezone

import pytest

from integrations.exceptions import UpAPIError, UpAuthError
from services.aggregation_service import AggregationError
from services.dashboard_service import (
    DashboardService,
    describe_error,
    is_auth_failure,
    settle_all,
)
from tests.fixtures.mocks import MockUpApi, make_account, make_category, make_transaction


def _api_with_data() -> MockUpApi:
    api = MockUpApi()
    api.add_collection(
        "/accounts",
        [[make_account("acc-1", "Spending", 12345)], [make_account("acc-2", "Savings", 100000, "SAVER")]],
    )
    api.add_collection(
        "/transactions",
        [
            [
                make_transaction("tx-1", 50000, description="Salary"),
                make_transaction("tx-2", -2000, category="groceries"),
            ],
            [
                make_transaction("tx-3", -3000, category="restaurants-and-cafes"),
                make_transaction("tx-4", -500),
            ],
        ],
    )
    api.categories = [
        make_category("groceries", "Groceries"),
        make_category("restaurants-and-cafes", "Restaurants & Cafes"),
    ]
    return api


class TestSettleAll:
    @pytest.mark.asyncio
    async def test_failure_does_not_hide_other_results(self):
        async def ok(value):
            await asyncio.sleep(0)
            return value

        async def boom():
            raise UpAPIError("down", status_code=503)

        results = await settle_all(ok(1), boom(), ok(3))

        assert [r.ok for r in results] == [True, False, True]
        assert results[0].value == 1
        assert results[2].value == 3
        assert isinstance(results[1].error, UpAPIError)

    @pytest.mark.asyncio
    async def test_siblings_run_to_completion(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.01)
            finished.append("slow")
            return "slow"

        async def fast_fail():
            raise UpAuthError("nope")

        await settle_all(slow(), fast_fail())
        assert finished == ["slow"]

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await settle_all() == []


class TestErrorHelpers:
    def test_auth_error_message(self):
        assert "token appears to be invalid" in describe_error(UpAuthError("401"))

    def test_aggregation_error_unwrapped(self):
        error = AggregationError(UpAuthError("401"), pages_fetched=0, partial_items=[])
        assert is_auth_failure(error)
        assert "token appears to be invalid" in describe_error(error)

    def test_api_error_message_passed_through(self):
        assert describe_error(UpAPIError("Up API Error (500): Oops")) == "Up API Error (500): Oops"

    def test_unexpected_error_is_generic(self):
        assert describe_error(KeyError("secret")) == "Unexpected error while loading data."
        assert not is_auth_failure(KeyError("secret"))
        assert not is_auth_failure(None)


class TestLoadDashboard:
    @pytest.mark.asyncio
    async def test_all_sections_loaded(self):
        api = _api_with_data()
        async with api.client() as client:
            summary = await DashboardService(client, timezone.utc).load_dashboard(date(2024, 3, 15))

        assert summary.errors == {}
        assert summary.auth_failed is False
        assert summary.total_balance == 112345
        assert [a.display_name for a in summary.accounts] == ["Spending", "Savings"]
        assert [t["id"] for t in summary.recent_transactions.items] == ["tx-1", "tx-2"]
        assert summary.recent_transactions.next_cursor == "cursor-1"
        assert summary.monthly.income == 50000
        assert summary.monthly.spending == -5500
        assert summary.monthly_complete is True

    @pytest.mark.asyncio
    async def test_recent_page_uses_configured_size(self):
        api = _api_with_data()
        async with api.client() as client:
            await DashboardService(client, timezone.utc, recent_page_size=25).load_dashboard(date(2024, 3, 15))

        sizes = sorted(r.url.params.get("page[size]") for r in api.requests_for("/transactions"))
        assert "25" in sizes
        assert "100" in sizes

    @pytest.mark.asyncio
    async def test_month_window_sent(self):
        api = _api_with_data()
        async with api.client() as client:
            await DashboardService(client, timezone.utc).load_dashboard(date(2024, 12, 31))

        filtered = [r for r in api.requests_for("/transactions") if "filter[since]" in r.url.params]
        assert filtered[0].url.params["filter[since]"] == "2024-12-01T00:00:00Z"
        assert filtered[0].url.params["filter[until]"] == "2025-01-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_accounts_failure_isolated(self):
        api = _api_with_data()
        api.fail("/accounts", page_index=1, status=500)
        async with api.client() as client:
            summary = await DashboardService(client, timezone.utc).load_dashboard(date(2024, 3, 15))

        assert set(summary.errors) == {"accounts"}
        assert summary.total_balance is None
        assert summary.accounts == []
        assert summary.monthly is not None
        assert summary.recent_transactions is not None
        assert summary.auth_failed is False

    @pytest.mark.asyncio
    async def test_auth_failure_flagged(self):
        api = _api_with_data()
        api.fail("/accounts", status=401)
        async with api.client() as client:
            summary = await DashboardService(client, timezone.utc).load_dashboard(date(2024, 3, 15))

        assert summary.auth_failed is True
        assert "token appears to be invalid" in summary.errors["accounts"]

    @pytest.mark.asyncio
    async def test_monthly_incomplete_when_capped(self):
        api = _api_with_data()
        async with api.client() as client:
            summary = await DashboardService(client, timezone.utc, max_pages=1).load_dashboard(date(2024, 3, 15))

        assert summary.monthly_complete is False
        assert summary.monthly.spending == -2000


class TestLoadAnalytics:
    @pytest.mark.asyncio
    async def test_categories_named_and_sorted(self):
        api = _api_with_data()
        async with api.client() as client:
            report = await DashboardService(client, timezone.utc).load_analytics(2024, 3)

        assert report.period_start == date(2024, 3, 1)
        assert [(c.category_name, c.total) for c in report.categories] == [
            ("Restaurants & Cafes", 3000),
            ("Groceries", 2000),
            ("Uncategorized", 500),
        ]
        assert report.trend.income == 50000
        assert report.complete is True
        assert report.errors == {}

    @pytest.mark.asyncio
    async def test_category_failure_falls_back_to_ids(self):
        api = _api_with_data()
        api.add_collection("/categories", [[]])
        api.fail("/categories", status=500)
        async with api.client() as client:
            report = await DashboardService(client, timezone.utc).load_analytics(2024, 3)

        assert set(report.errors) == {"categories"}
        assert report.categories[0].category_name == "restaurants-and-cafes"

    @pytest.mark.asyncio
    async def test_transaction_failure_reported(self):
        api = _api_with_data()
        api.fail("/transactions", page_index=1, status=503)
        async with api.client() as client:
            report = await DashboardService(client, timezone.utc).load_analytics(2024, 3)

        assert set(report.errors) == {"transactions"}
        assert report.categories == []
        assert report.trend is None

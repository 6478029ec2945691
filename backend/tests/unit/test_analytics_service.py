"""Tests for income/spending and category analytics."""

import pytest

from integrations.up_types import UNCATEGORIZED, Account, Money, Transaction
from services.analytics_service import (
    CHART_COLORS,
    IncomeSpending,
    color_for_index,
    format_currency,
    spending_by_category,
    split_income_spending,
    total_balance,
)


def _tx(tx_id: str, amount: int, category_id: str | None = None) -> Transaction:
    return Transaction(
        id=tx_id,
        description=tx_id,
        amount=Money("AUD", amount),
        category_id=category_id,
    )


class TestSplitIncomeSpending:
    def test_partitions_by_sign(self):
        result = split_income_spending([_tx("a", 500), _tx("b", -200), _tx("c", -300), _tx("d", 0)])
        assert result == IncomeSpending(income=500, spending=-500)
        assert result.net == 0

    def test_zero_counts_toward_neither(self):
        assert split_income_spending([_tx("a", 0)]) == IncomeSpending(income=0, spending=0)

    def test_empty(self):
        assert split_income_spending([]) == IncomeSpending(income=0, spending=0)

    def test_spending_is_never_positive(self):
        result = split_income_spending([_tx("a", -1), _tx("b", 10_000)])
        assert result.spending <= 0
        assert result.income >= 0


class TestSpendingByCategory:
    def test_groups_and_sorts_descending(self):
        result = spending_by_category(
            [
                _tx("a", -1000, "groceries"),
                _tx("b", -3000, "restaurants"),
                _tx("c", -500, "groceries"),
                _tx("d", 2000, "groceries"),
            ]
        )
        assert [(b.category_id, b.total) for b in result] == [
            ("restaurants", 3000),
            ("groceries", 1500),
        ]

    def test_income_excluded(self):
        assert spending_by_category([_tx("a", 5000, "salary")]) == []

    def test_missing_category_goes_to_uncategorized(self):
        result = spending_by_category([_tx("a", -700), _tx("b", -300, "groceries")])
        assert result[0].category_id == UNCATEGORIZED
        assert result[0].category_name == "Uncategorized"
        assert result[0].total == 700

    def test_ties_keep_first_seen_order(self):
        result = spending_by_category(
            [
                _tx("a", -100, "zeta"),
                _tx("b", -100, "alpha"),
                _tx("c", -100, "mid"),
            ]
        )
        assert [b.category_id for b in result] == ["zeta", "alpha", "mid"]

    def test_names_resolved_from_mapping(self):
        result = spending_by_category(
            [_tx("a", -100, "groceries"), _tx("b", -50, "mystery")],
            {"groceries": "Groceries"},
        )
        assert result[0].category_name == "Groceries"
        # Unknown ids fall back to the id itself
        assert result[1].category_name == "mystery"

    def test_indexes_and_colors_follow_sorted_order(self):
        result = spending_by_category([_tx(str(i), -(i + 1) * 100, f"cat-{i}") for i in range(7)])
        assert [b.index for b in result] == list(range(7))
        assert result[0].color == CHART_COLORS[0]
        assert result[5].color == CHART_COLORS[0]
        assert result[6].color == CHART_COLORS[1]

    def test_totals_sum_to_spending(self):
        transactions = [
            _tx("a", -100, "x"),
            _tx("b", -250),
            _tx("c", 400, "x"),
            _tx("d", -50, "y"),
        ]
        buckets = spending_by_category(transactions)
        assert sum(b.total for b in buckets) == -split_income_spending(transactions).spending


class TestColors:
    @pytest.mark.parametrize("index,expected", [(0, "var(--chart-1)"), (4, "var(--chart-5)"), (5, "var(--chart-1)")])
    def test_color_for_index(self, index, expected):
        assert color_for_index(index) == expected


class TestTotalBalance:
    def test_sums_balances(self):
        accounts = [
            Account(id="1", display_name="Spending", account_type="TRANSACTIONAL", balance=Money("AUD", 12345)),
            Account(id="2", display_name="Savings", account_type="SAVER", balance=Money("AUD", 100000)),
        ]
        assert total_balance(accounts) == 112345

    def test_empty(self):
        assert total_balance([]) == 0


class TestFormatCurrency:
    @pytest.mark.parametrize(
        "amount,expected",
        [
            (12345, "$123.45"),
            (-12345, "-$123.45"),
            (0, "$0.00"),
            (5, "$0.05"),
            (123456789, "$1,234,567.89"),
        ],
    )
    def test_aud(self, amount, expected):
        assert format_currency(amount) == expected

    def test_other_currency(self):
        assert format_currency(1000, "GBP") == "£10.00"

    def test_unknown_currency_uses_code(self):
        assert format_currency(1000, "JPY") == "JPY 10.00"

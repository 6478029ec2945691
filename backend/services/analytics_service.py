"""Spending analytics over aggregated transactions.

All sums are integer minor units.  Spending is kept as a signed (negative)
sum throughout; only the API schemas convert it to an absolute value for
display.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping

from integrations.up_types import UNCATEGORIZED, Account, Transaction

# Deterministic palette; bucket ``index`` picks a colour modulo its length
CHART_COLORS = (
    "var(--chart-1)",
    "var(--chart-2)",
    "var(--chart-3)",
    "var(--chart-4)",
    "var(--chart-5)",
)

_CURRENCY_SYMBOLS = {"AUD": "$", "USD": "$", "NZD": "$", "EUR": "€", "GBP": "£"}


@dataclass(frozen=True)
class IncomeSpending:
    """Income and spending totals in minor units.

    ``spending`` is the signed sum of negative amounts, so it is <= 0.
    """

    income: int
    spending: int

    @property
    def net(self) -> int:
        return self.income + self.spending


@dataclass(frozen=True)
class CategorySpending:
    category_id: str
    category_name: str
    total: int  # absolute spending, minor units
    index: int  # position after sorting; drives colour assignment

    @property
    def color(self) -> str:
        return color_for_index(self.index)


def color_for_index(index: int) -> str:
    return CHART_COLORS[index % len(CHART_COLORS)]


def split_income_spending(transactions: Iterable[Transaction]) -> IncomeSpending:
    """Partition amounts by sign.  Zero amounts count toward neither total."""
    income = 0
    spending = 0
    for tx in transactions:
        amount = tx.amount.value_in_base_units
        if amount > 0:
            income += amount
        elif amount < 0:
            spending += amount
    return IncomeSpending(income=income, spending=spending)


def spending_by_category(
    transactions: Iterable[Transaction],
    category_names: Mapping[str, str] | None = None,
) -> list[CategorySpending]:
    """Group negative amounts by category and sort largest first.

    Transactions without a category land in the ``"uncategorized"`` bucket.
    Buckets with equal totals keep the order in which their category was
    first seen.
    """
    category_names = category_names or {}
    totals: dict[str, int] = {}  # insertion order = first-encountered order
    for tx in transactions:
        amount = tx.amount.value_in_base_units
        if amount >= 0:
            continue
        key = tx.category_id or UNCATEGORIZED
        totals[key] = totals.get(key, 0) + abs(amount)

    # sorted() is stable, so ties keep first-encountered order
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        CategorySpending(
            category_id=category_id,
            category_name=_category_label(category_id, category_names),
            total=total,
            index=index,
        )
        for index, (category_id, total) in enumerate(ordered)
    ]


def _category_label(category_id: str, category_names: Mapping[str, str]) -> str:
    if category_id == UNCATEGORIZED:
        return "Uncategorized"
    return category_names.get(category_id, category_id)


def total_balance(accounts: Iterable[Account]) -> int:
    """Sum of account balances in minor units."""
    return sum(account.balance.value_in_base_units for account in accounts)


def format_currency(amount_in_base_units: int, currency_code: str = "AUD") -> str:
    """Format minor units for display, e.g. ``-12345`` -> ``"-$123.45"``."""
    symbol = _CURRENCY_SYMBOLS.get(currency_code, f"{currency_code} ")
    major = Decimal(abs(amount_in_base_units)) / Decimal(100)
    sign = "-" if amount_in_base_units < 0 else ""
    return f"{sign}{symbol}{major:,.2f}"

"""Transaction aggregation by category"""

import statistics
from typing import Dict, Iterable, List, Sequence

from budget_advisor.domain.models import (
    INCOME,
    UNCATEGORIZED,
    CategoryStats,
    DateRange,
    SpendingAggregate,
    TransactionRecord,
)


def category_key(name: str | None) -> str:
    """Display name used as the grouping key; missing names share one bucket"""
    if name is None or not name.strip():
        return UNCATEGORIZED
    return name


def filter_to_periods(transactions: Iterable[TransactionRecord], ranges: Sequence[DateRange]) -> List[TransactionRecord]:
    """Keep transactions dated inside any of the ranges"""
    return [t for t in transactions if any(r.contains(t.date) for r in ranges)]


def aggregate_transactions(transactions: Iterable[TransactionRecord], months_analyzed: int) -> SpendingAggregate:
    """
    Group expenses by category and compute total, monthly average and median.

    Requirements:
    - Income only feeds total_income, never a category
    - Expense amounts are taken as absolute values (ledgers store them either sign)
    - Average divides by the months actually analyzed (guarded against zero)
    - Category order is first-seen order
    """
    amounts_by_category: Dict[str, List[float]] = {}
    total_income = 0.0
    total_expenses = 0.0

    for txn in transactions:
        amount = float(txn.amount)
        if txn.kind == INCOME:
            total_income += amount
            continue

        value = abs(amount)
        amounts_by_category.setdefault(category_key(txn.category_name), []).append(value)
        total_expenses += value

    divisor = max(1, months_analyzed)
    categories = {}
    for name, amounts in amounts_by_category.items():
        total = sum(amounts)
        categories[name] = CategoryStats(
            total=total,
            avg_per_month=total / divisor,
            median=statistics.median(amounts),
        )

    return SpendingAggregate(
        categories=categories,
        total_income=total_income,
        total_expenses=total_expenses,
    )

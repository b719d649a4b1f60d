"""Fixed vs. variable spending totals report"""

from typing import AbstractSet, Iterable

from budget_advisor.domain.aggregation import aggregate_transactions
from budget_advisor.domain.classification import FIXED_KEYWORDS, is_fixed_category
from budget_advisor.domain.models import CategoryTotal, SpendingSummary, TransactionRecord
from budget_advisor.utils.money import round2


def summarize_spending(
    transactions: Iterable[TransactionRecord],
    months_analyzed: int,
    fixed_keywords: AbstractSet[str] = FIXED_KEYWORDS,
) -> SpendingSummary:
    """
    Split category totals into fixed and variable, each sorted by total descending.

    Summary figures are window totals (not monthly averages).
    """
    aggregate = aggregate_transactions(transactions, months_analyzed)
    summary = SpendingSummary(total_income=round2(aggregate.total_income))

    fixed_sum = 0.0
    variable_sum = 0.0
    for name, stats in aggregate.categories.items():
        is_fixed = is_fixed_category(name, fixed_keywords)
        line = CategoryTotal(
            category=name,
            total=round2(stats.total),
            avg_per_month=round2(stats.avg_per_month),
            is_fixed=is_fixed,
        )
        if is_fixed:
            summary.fixed_totals.append(line)
            fixed_sum += stats.total
        else:
            summary.variable_totals.append(line)
            variable_sum += stats.total

    summary.fixed_totals.sort(key=lambda t: t.total, reverse=True)
    summary.variable_totals.sort(key=lambda t: t.total, reverse=True)
    summary.total_fixed_expenses = round2(fixed_sum)
    summary.total_variable_expenses = round2(variable_sum)
    return summary

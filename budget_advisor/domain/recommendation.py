"""Main entry point: transactions in, monthly budget recommendation out"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from budget_advisor.domain.aggregation import aggregate_transactions
from budget_advisor.domain.allocation import allocate
from budget_advisor.domain.classification import is_fixed_category
from budget_advisor.domain.exceptions import ComputationError
from budget_advisor.domain.models import (
    AllocationPolicy,
    CategoryBudget,
    Recommendation,
    ResolvedPeriods,
    SpendingAggregate,
    TransactionRecord,
)
from budget_advisor.domain.presentation import present
from budget_advisor.utils.money import finite_or_none


def normalize_targets(raw: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Keep only targets that are real, finite, non-negative numbers; anything else means "no target" """
    targets = {}
    if not isinstance(raw, Mapping):
        return targets
    for name, value in raw.items():
        number = finite_or_none(value)
        if number is not None and number >= 0:
            targets[name] = number
    return targets


def build_category_budgets(
    aggregate: SpendingAggregate,
    targets: Mapping[str, float],
    fixed_keywords,
) -> List[CategoryBudget]:
    """
    One budget line per observed category, plus targeted categories without history.

    Targets of zero for unseen categories are ignored: they carry no budget intent.
    Classification happens here, once per category.
    """
    budgets = [
        CategoryBudget(
            category=name,
            total=stats.total,
            avg_per_month=stats.avg_per_month,
            median=stats.median,
            is_fixed=is_fixed_category(name, fixed_keywords),
            user_target=targets.get(name),
        )
        for name, stats in aggregate.categories.items()
    ]

    for name, target in targets.items():
        if name in aggregate.categories or target <= 0:
            continue
        budgets.append(
            CategoryBudget(
                category=name,
                total=0.0,
                avg_per_month=0.0,
                median=0.0,
                is_fixed=is_fixed_category(name, fixed_keywords),
                user_target=target,
            )
        )

    return budgets


def recommend_budgets(
    transactions: Iterable[TransactionRecord],
    periods: ResolvedPeriods,
    savings_rate: float,
    policy: AllocationPolicy,
    targets: Optional[Mapping[str, Any]] = None,
) -> Recommendation:
    """
    Compute the monthly budget recommendation for one user.

    Pure and deterministic: identical inputs give identical output.

    Raises:
        ComputationError: malformed data broke a step (carries the step name)
    """
    step = "aggregate"
    try:
        aggregate = aggregate_transactions(transactions, periods.actual_months_analyzed)

        step = "classify"
        budgets = build_category_budgets(aggregate, normalize_targets(targets), policy.fixed_keywords)

        step = "allocate"
        allocation = allocate(
            budgets,
            total_income=aggregate.total_income,
            total_expenses=aggregate.total_expenses,
            months_analyzed=periods.actual_months_analyzed,
            savings_rate=savings_rate,
            policy=policy,
        )

        step = "present"
        return present(allocation, periods)

    except (TypeError, ValueError, ArithmeticError, AttributeError) as e:
        raise ComputationError(step, str(e)) from e

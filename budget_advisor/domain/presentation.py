"""Final formatting of allocation results"""

from budget_advisor.domain.models import (
    AllocationResult,
    CategoryBudget,
    Recommendation,
    RecommendationMeta,
    ResolvedPeriods,
)
from budget_advisor.utils.money import round2

INFEASIBLE_MESSAGE = "Fixed expenses exceed the available budget. No variable budget is possible."


def _finalize(budget: CategoryBudget) -> CategoryBudget:
    return CategoryBudget(
        category=budget.category,
        total=round2(budget.total),
        avg_per_month=round2(budget.avg_per_month),
        median=round2(budget.median),
        is_fixed=budget.is_fixed,
        user_target=round2(budget.user_target) if budget.user_target is not None else None,
        base=round2(budget.base) if budget.base is not None and not budget.is_fixed else None,
        recommended_monthly=round2(max(0.0, budget.recommended_monthly)),
    )


def present(allocation: AllocationResult, periods: ResolvedPeriods) -> Recommendation:
    """Sort by historical spend (descending, stable), round, and attach metadata"""
    meta = RecommendationMeta(
        months_window=periods.months_window,
        actual_months_analyzed=periods.actual_months_analyzed,
        months_analyzed=periods.months_analyzed,
        effective_income=round2(allocation.effective_income),
        cap_disponible=round2(allocation.spending_cap),
        fixed_total=round2(allocation.fixed_total),
    )

    if not allocation.feasible:
        return Recommendation(meta=meta, error=INFEASIBLE_MESSAGE)

    budgets = sorted((_finalize(b) for b in allocation.budgets), key=lambda b: b.total, reverse=True)
    return Recommendation(meta=meta, budgets=budgets)

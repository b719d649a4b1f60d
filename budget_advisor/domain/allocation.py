"""Budget allocation engine - core business logic for monthly recommendations"""

from typing import List

from budget_advisor.domain.classification import is_essential_category
from budget_advisor.domain.models import AllocationPolicy, AllocationResult, CategoryBudget
from budget_advisor.utils.money import round2


def effective_monthly_income(
    total_income: float,
    total_expenses: float,
    months_analyzed: int,
    fallback_multiplier: float,
) -> float:
    """
    Average monthly income, or an estimate from spending when none is recorded.

    Without tracked income, expenses are assumed to be 1/fallback_multiplier of
    the real income (1.2 -> expenses ~83% of income).
    """
    divisor = max(1, months_analyzed)
    avg_income = total_income / divisor
    if avg_income > 0:
        return avg_income
    return (total_expenses / divisor) * fallback_multiplier


def variable_ratio(available: float, base_sum: float) -> float:
    """Scale factor applied to every variable base, never above 1"""
    if base_sum <= 0:
        return 1.0
    return max(0.0, min(1.0, available / base_sum))


def _apply_floor(budgets: List[CategoryBudget], minimum: float) -> None:
    for b in budgets:
        if b.recommended_monthly < minimum:
            b.recommended_monthly = minimum


def _redistribute_to_essentials(
    variable: List[CategoryBudget],
    leftover: float,
    policy: AllocationPolicy,
) -> None:
    """Spread leftover budget over essential categories, weighted by base"""
    essentials = [b for b in variable if is_essential_category(b.category, policy.essential_keywords)]
    if not essentials:
        return

    essentials_base = sum(b.base or 0.0 for b in essentials)
    for b in essentials:
        if essentials_base > 0:
            weight = (b.base or 0.0) / essentials_base
        else:
            weight = 1 / len(essentials)
        b.recommended_monthly = round2(b.recommended_monthly + leftover * weight)
        if b.recommended_monthly < policy.minimum_budget:
            b.recommended_monthly = policy.minimum_budget


def _correct_overflow(
    budgets: List[CategoryBudget],
    variable: List[CategoryBudget],
    limit: float,
    minimum: float,
) -> None:
    """Shave any excess over `limit` off variable categories, proportionally to their share"""
    total = sum(b.recommended_monthly for b in budgets)
    if total <= limit or not variable:
        return

    over = total - limit
    variable_total = sum(b.recommended_monthly for b in variable)
    for b in variable:
        share = b.recommended_monthly / variable_total if variable_total > 0 else 1 / len(variable)
        b.recommended_monthly = round2(max(minimum, b.recommended_monthly - over * share))


def allocate(
    budgets: List[CategoryBudget],
    total_income: float,
    total_expenses: float,
    months_analyzed: int,
    savings_rate: float,
    policy: AllocationPolicy,
) -> AllocationResult:
    """
    Allocate the monthly spending cap across categories.

    Order matters, each step feeds the next:
    1. Effective income (average income, or expense-based estimate)
    2. Cap = income minus savings
    3. Fixed categories keep target or average, never scaled
    4. Infeasible if fixed total exceeds the cap (returned, not raised)
    5-7. Variable categories scaled by min(1, available / sum of bases)
    8. Floor at policy.minimum_budget
    9. Leftover redistributed to essential categories
    10. Overflow shaved off variable categories only

    `budgets` is modified in place; the same list is returned in the result.
    """
    effective_income = effective_monthly_income(
        total_income, total_expenses, months_analyzed, policy.income_fallback_multiplier
    )
    savings = effective_income * savings_rate
    cap = effective_income - savings

    fixed = [b for b in budgets if b.is_fixed]
    variable = [b for b in budgets if not b.is_fixed]

    for b in fixed:
        b.base = None
        b.recommended_monthly = round2(b.user_target if b.user_target is not None else b.avg_per_month)
    fixed_total = sum(b.recommended_monthly for b in fixed)

    if fixed_total > cap:
        return AllocationResult(
            feasible=False,
            budgets=[],
            effective_income=effective_income,
            spending_cap=cap,
            fixed_total=fixed_total,
            available_for_variable=cap - fixed_total,
            ratio=0.0,
        )

    available = cap - fixed_total
    for b in variable:
        b.base = b.user_target if b.user_target is not None else b.avg_per_month
    base_sum = sum(b.base or 0.0 for b in variable)
    ratio = variable_ratio(available, base_sum)

    for b in variable:
        b.recommended_monthly = round2((b.base or 0.0) * ratio)
    _apply_floor(variable, policy.minimum_budget)

    leftover = available - sum(b.recommended_monthly for b in variable)
    if leftover > 0:
        _redistribute_to_essentials(variable, leftover, policy)

    _correct_overflow(budgets, variable, cap + fixed_total, policy.minimum_budget)

    return AllocationResult(
        feasible=True,
        budgets=budgets,
        effective_income=effective_income,
        spending_cap=cap,
        fixed_total=fixed_total,
        available_for_variable=available,
        ratio=ratio,
    )

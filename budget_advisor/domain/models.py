"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, FrozenSet

INCOME = "income"
EXPENSE = "expense"
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class TransactionRecord:
    """Ledger transaction as supplied by the caller (never mutated)"""

    amount: float
    date: date
    kind: str  # "income" or "expense"
    category_name: Optional[str] = None


@dataclass(frozen=True)
class PeriodBoundary:
    """Recorded month closure with its exact start/end dates"""

    month_key: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class DateRange:
    """One resolved analysis period"""

    month_key: str
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class ResolvedPeriods:
    """Output of the period resolver, most recent month first"""

    months_window: int
    ranges: List[DateRange]

    @property
    def months_analyzed(self) -> List[str]:
        return [r.month_key for r in self.ranges]

    @property
    def actual_months_analyzed(self) -> int:
        return len(self.ranges)


@dataclass
class CategoryStats:
    """Per-category spending over the analyzed window"""

    total: float
    avg_per_month: float
    median: float


@dataclass
class SpendingAggregate:
    """Aggregator output"""

    categories: Dict[str, CategoryStats]
    total_income: float
    total_expenses: float


@dataclass
class CategoryBudget:
    """Budget line for one category, filled in by the allocator"""

    category: str
    total: float
    avg_per_month: float
    median: float
    is_fixed: bool
    user_target: Optional[float] = None
    base: Optional[float] = None
    recommended_monthly: float = 0.0

    @property
    def realistic(self) -> float:
        """Typical spend shown to the user: median if positive, else monthly average"""
        return self.median if self.median > 0 else self.avg_per_month


@dataclass(frozen=True)
class AllocationPolicy:
    """Tunable constants of the allocation algorithm"""

    minimum_budget: float
    income_fallback_multiplier: float
    essential_keywords: FrozenSet[str]
    fixed_keywords: FrozenSet[str]


@dataclass
class AllocationResult:
    """Allocator output before presentation"""

    feasible: bool
    budgets: List[CategoryBudget]
    effective_income: float
    spending_cap: float
    fixed_total: float
    available_for_variable: float
    ratio: float


@dataclass
class RecommendationMeta:
    """Summary metadata returned with every recommendation"""

    months_window: int
    actual_months_analyzed: int
    months_analyzed: List[str]
    effective_income: float
    cap_disponible: float
    fixed_total: float


@dataclass
class Recommendation:
    """Final, presentable result. `error` is set when fixed spend exceeds the cap."""

    meta: RecommendationMeta
    budgets: Optional[List[CategoryBudget]] = None
    error: Optional[str] = None

    @property
    def feasible(self) -> bool:
        return self.error is None


@dataclass
class CategoryTotal:
    """Spending total for one category (totals report)"""

    category: str
    total: float
    avg_per_month: float
    is_fixed: bool


@dataclass
class SpendingSummary:
    """Fixed vs. variable spending report over a window"""

    variable_totals: List[CategoryTotal] = field(default_factory=list)
    fixed_totals: List[CategoryTotal] = field(default_factory=list)
    total_income: float = 0.0
    total_fixed_expenses: float = 0.0
    total_variable_expenses: float = 0.0

    @property
    def available_for_variable(self) -> float:
        return self.total_income - self.total_fixed_expenses

    @property
    def potential_savings(self) -> float:
        return self.total_income - self.total_fixed_expenses - self.total_variable_expenses


@dataclass(frozen=True)
class AccountBalances:
    """Opening balances split by whether the account takes part in budgeting"""

    included: float = 0.0
    excluded: float = 0.0

    @property
    def total(self) -> float:
        return self.included + self.excluded

"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from budget_advisor.domain.models import (
    AccountBalances,
    CategoryBudget,
    PeriodBoundary,
    Recommendation,
    SpendingSummary,
    TransactionRecord,
)
from budget_advisor.config import settings
from budget_advisor.utils.money import round2

MONTH_KEY_PATTERN = r"^\d{4}-\d{2}$"


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecommendationParams(CamelModel):
    """Parameters shared by the recommendation endpoints"""

    months_window: int = Field(
        settings.default_months_window,
        ge=1,
        le=settings.max_months_window,
        description="Number of completed months to analyze",
    )
    selected_month: Optional[str] = Field(None, pattern=MONTH_KEY_PATTERN, description="Reference month YYYY-MM")
    savings_rate: Optional[float] = Field(None, ge=0, le=1, description="Fraction of income set aside")
    targets: Optional[Dict[str, Any]] = Field(None, description="Category spending targets")


class RecommendationRequest(RecommendationParams):
    """Request body for POST /v1/budgets/recommendation"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class TransactionSchema(CamelModel):
    """Single transaction supplied by the caller"""

    amount: float
    date: date
    kind: Literal["income", "expense"]
    category_name: Optional[str] = None

    def to_domain(self) -> TransactionRecord:
        return TransactionRecord(
            amount=self.amount,
            date=self.date,
            kind=self.kind,
            category_name=self.category_name,
        )


class ClosureSchema(CamelModel):
    """Recorded month closure"""

    month_key: str = Field(..., pattern=MONTH_KEY_PATTERN)
    start_date: date
    end_date: date

    def to_domain(self) -> PeriodBoundary:
        return PeriodBoundary(month_key=self.month_key, start_date=self.start_date, end_date=self.end_date)


class CalculationRequest(RecommendationParams):
    """Request body for POST /v1/budgets/calculate"""

    transactions: List[TransactionSchema] = Field(default_factory=list)
    closures: List[ClosureSchema] = Field(default_factory=list)


class CategoryBudgetSchema(CamelModel):
    """Budget recommendation for one category"""

    category: str
    total: float
    avg_per_month: float
    median: float
    realistic: float
    is_fixed: bool
    user_target: Optional[float] = None
    base: Optional[float] = None
    recommended_monthly: float

    @classmethod
    def from_domain(cls, budget: CategoryBudget) -> "CategoryBudgetSchema":
        return cls(
            category=budget.category,
            total=budget.total,
            avg_per_month=budget.avg_per_month,
            median=budget.median,
            realistic=budget.realistic,
            is_fixed=budget.is_fixed,
            user_target=budget.user_target,
            base=budget.base,
            recommended_monthly=budget.recommended_monthly,
        )


class RecommendationMetaSchema(CamelModel):
    """Metadata attached to every recommendation"""

    months_window: int
    actual_months_analyzed: int
    months_analyzed: List[str]
    effective_income: float
    cap_disponible: float
    fixed_total: float


class RecommendationResponse(CamelModel):
    """Response for the recommendation endpoints; `error` set when infeasible"""

    budgets: Optional[List[CategoryBudgetSchema]] = None
    meta: RecommendationMetaSchema
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, recommendation: Recommendation) -> "RecommendationResponse":
        meta = recommendation.meta
        budgets = None
        if recommendation.budgets is not None:
            budgets = [CategoryBudgetSchema.from_domain(b) for b in recommendation.budgets]
        return cls(
            budgets=budgets,
            meta=RecommendationMetaSchema(
                months_window=meta.months_window,
                actual_months_analyzed=meta.actual_months_analyzed,
                months_analyzed=meta.months_analyzed,
                effective_income=meta.effective_income,
                cap_disponible=meta.cap_disponible,
                fixed_total=meta.fixed_total,
            ),
            error=recommendation.error,
        )


class CategoryTotalSchema(CamelModel):
    """Spending total for one category"""

    category: str
    total: float
    avg_per_month: float
    is_fixed: bool


class SpendingSummarySchema(CamelModel):
    """Window totals"""

    total_income: float
    total_fixed_expenses: float
    total_variable_expenses: float
    available_for_variable: float
    potential_savings: float
    total_balance_included: float = 0.0
    total_balance_excluded: float = 0.0
    total_balance_all: float = 0.0


class TotalsMetaSchema(CamelModel):
    months_window: int
    actual_months_analyzed: int
    months_analyzed: List[str]
    excluded_accounts_count: int


class TotalsResponse(CamelModel):
    """Response for GET /v1/budgets/totals"""

    totals: List[CategoryTotalSchema]
    fixed_totals: List[CategoryTotalSchema]
    summary: SpendingSummarySchema
    meta: TotalsMetaSchema

    @classmethod
    def from_domain(
        cls, summary: SpendingSummary, balances: AccountBalances, meta: TotalsMetaSchema
    ) -> "TotalsResponse":
        def lines(items):
            return [
                CategoryTotalSchema(category=t.category, total=t.total, avg_per_month=t.avg_per_month, is_fixed=t.is_fixed)
                for t in items
            ]

        return cls(
            totals=lines(summary.variable_totals),
            fixed_totals=lines(summary.fixed_totals),
            summary=SpendingSummarySchema(
                total_income=summary.total_income,
                total_fixed_expenses=summary.total_fixed_expenses,
                total_variable_expenses=summary.total_variable_expenses,
                available_for_variable=round2(summary.available_for_variable),
                potential_savings=round2(summary.potential_savings),
                total_balance_included=round2(balances.included),
                total_balance_excluded=round2(balances.excluded),
                total_balance_all=round2(balances.total),
            ),
            meta=meta,
        )

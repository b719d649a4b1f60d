"""POST /v1/budgets/calculate - Recommendation from caller-supplied transactions"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from budget_advisor.api.v1.schemas import CalculationRequest, RecommendationResponse
from budget_advisor.api.dependencies import get_allocation_policy, get_request_id
from budget_advisor.config import settings
from budget_advisor.domain.aggregation import filter_to_periods
from budget_advisor.domain.models import AllocationPolicy
from budget_advisor.domain.periods import resolve_periods
from budget_advisor.domain.recommendation import recommend_budgets
from budget_advisor.domain.exceptions import ComputationError, InvalidPeriodError
from budget_advisor.infrastructure.observability.metrics import record_recommendation, computation_failures_counter

router = APIRouter()


@router.post("/budgets/calculate", response_model=RecommendationResponse, response_model_exclude_none=True)
def calculate_budgets(
    request_body: CalculationRequest,
    request: Request,
    policy: AllocationPolicy = Depends(get_allocation_policy),
):
    """
    Run the recommendation engine on transactions sent in the request body.

    No store access: periods come from `closures` (or calendar months), and
    transactions outside the resolved periods are ignored.
    """
    request_id = get_request_id(request)

    if not request_body.transactions:
        raise HTTPException(status_code=400, detail="No transactions supplied")

    step = "resolve_periods"
    try:
        transactions = [t.to_domain() for t in request_body.transactions]
        periods = resolve_periods(
            months_window=request_body.months_window,
            selected_month=request_body.selected_month,
            boundaries=[c.to_domain() for c in request_body.closures],
            history_start=min(t.date for t in transactions),
        )
        savings_rate = request_body.savings_rate
        if savings_rate is None:
            savings_rate = settings.default_savings_rate

        step = "compute"
        recommendation = recommend_budgets(
            filter_to_periods(transactions, periods.ranges),
            periods,
            savings_rate=savings_rate,
            policy=policy,
            targets=request_body.targets,
        )
        record_recommendation(recommendation.feasible, recommendation.meta.fixed_total, recommendation.meta.cap_disponible)
        return RecommendationResponse.from_domain(recommendation)

    except InvalidPeriodError as e:
        logging.warning(f"Invalid period: {e}", extra={"request_id": request_id, "step": step})
        raise HTTPException(status_code=422, detail=str(e))

    except ComputationError as e:
        computation_failures_counter.labels(step=e.step).inc()
        logging.error(f"Computation error: {e}", extra={"request_id": request_id, "step": e.step})
        raise HTTPException(status_code=500, detail="Internal server error")

    except Exception as e:
        computation_failures_counter.labels(step=step).inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "step": step})
        raise HTTPException(status_code=500, detail="Internal server error")

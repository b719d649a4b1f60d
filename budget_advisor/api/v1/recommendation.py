"""POST /v1/budgets/recommendation - Monthly budget recommendation endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from budget_advisor.api.v1.schemas import RecommendationRequest, RecommendationResponse
from budget_advisor.api.dependencies import get_allocation_policy, get_request_id
from budget_advisor.config import settings
from budget_advisor.infrastructure.database.session import get_db
from budget_advisor.infrastructure.database.repositories import (
    AccountRepository,
    MonthClosureRepository,
    TransactionRepository,
    UserSettingsRepository,
)
from budget_advisor.domain.models import AllocationPolicy
from budget_advisor.domain.periods import previous_month_keys, resolve_periods
from budget_advisor.domain.recommendation import recommend_budgets
from budget_advisor.domain.exceptions import ComputationError, InvalidPeriodError, NoAccountError
from budget_advisor.infrastructure.observability.metrics import record_recommendation, computation_failures_counter
from budget_advisor.infrastructure.observability.logging import log_recommendation

router = APIRouter()


@router.post("/budgets/recommendation", response_model=RecommendationResponse, response_model_exclude_none=True)
def create_recommendation(
    request_body: RecommendationRequest,
    request: Request,
    db: Session = Depends(get_db),
    policy: AllocationPolicy = Depends(get_allocation_policy),
):
    """
    Recommend monthly budgets per category from the user's completed months.

    Flow:
    1. Load the user's accounts (none -> 400)
    2. Resolve analysis periods from closures / calendar months
    3. Fetch transactions for each period
    4. Fill in targets and savings rate from stored settings when omitted
    5. Aggregate, classify, allocate, present

    A fixed total above the spending cap is a 200 response carrying `error`.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    user_id = request_body.user_id
    step = "load_accounts"

    try:
        # 1. Accounts
        account_ids = AccountRepository(db).get_account_ids(user_id)
        if not account_ids:
            raise NoAccountError("No account found")

        # 2. Periods
        step = "resolve_periods"
        transaction_repo = TransactionRepository(db)
        month_keys = previous_month_keys(request_body.selected_month, request_body.months_window)
        boundaries = MonthClosureRepository(db).get_boundaries(user_id, month_keys)
        periods = resolve_periods(
            months_window=request_body.months_window,
            selected_month=request_body.selected_month,
            boundaries=boundaries,
            history_start=transaction_repo.get_earliest_transaction_date(account_ids),
        )

        # 3. Transactions
        step = "fetch_transactions"
        transactions = transaction_repo.get_transactions(account_ids, periods.ranges)

        # 4. Stored preferences
        step = "load_settings"
        targets = request_body.targets
        savings_rate = request_body.savings_rate
        if targets is None or savings_rate is None:
            stored = UserSettingsRepository(db).get_settings(user_id)
            if stored is not None:
                targets = targets if targets is not None else stored.spend_targets
                savings_rate = savings_rate if savings_rate is not None else stored.savings_rate
        if savings_rate is None or not 0 <= savings_rate <= 1:
            savings_rate = settings.default_savings_rate

        # 5. Compute
        step = "compute"
        recommendation = recommend_budgets(
            transactions,
            periods,
            savings_rate=savings_rate,
            policy=policy,
            targets=targets,
        )

        duration_ms = (time.time() - start_time) * 1000
        record_recommendation(recommendation.feasible, recommendation.meta.fixed_total, recommendation.meta.cap_disponible)
        log_recommendation(
            request_id,
            user_id,
            recommendation.feasible,
            len(recommendation.budgets or []),
            periods.actual_months_analyzed,
            duration_ms,
        )

        return RecommendationResponse.from_domain(recommendation)

    except NoAccountError as e:
        logging.warning(f"No account: {e}", extra={"request_id": request_id, "user_id": user_id, "step": step})
        raise HTTPException(status_code=400, detail="No account found")

    except InvalidPeriodError as e:
        logging.warning(f"Invalid period: {e}", extra={"request_id": request_id, "user_id": user_id, "step": step})
        raise HTTPException(status_code=422, detail=str(e))

    except ComputationError as e:
        computation_failures_counter.labels(step=e.step).inc()
        logging.error(f"Computation error: {e}", extra={"request_id": request_id, "user_id": user_id, "step": e.step})
        raise HTTPException(status_code=500, detail="Internal server error")

    except Exception as e:
        computation_failures_counter.labels(step=step).inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "user_id": user_id, "step": step})
        raise HTTPException(status_code=500, detail="Internal server error")

"""GET /v1/budgets/totals - Fixed vs. variable spending totals"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from budget_advisor.api.v1.schemas import MONTH_KEY_PATTERN, TotalsMetaSchema, TotalsResponse
from budget_advisor.api.dependencies import get_allocation_policy, get_request_id
from budget_advisor.config import settings
from budget_advisor.infrastructure.database.session import get_db
from budget_advisor.infrastructure.database.repositories import (
    AccountRepository,
    MonthClosureRepository,
    TransactionRepository,
)
from budget_advisor.domain.models import AccountBalances, AllocationPolicy
from budget_advisor.domain.periods import previous_month_keys, resolve_periods
from budget_advisor.domain.totals import summarize_spending
from budget_advisor.domain.exceptions import InvalidPeriodError, NoAccountError
from budget_advisor.infrastructure.observability.metrics import computation_failures_counter

router = APIRouter()


@router.get("/budgets/totals", response_model=TotalsResponse)
def get_spending_totals(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    months_window: int = Query(1, ge=1, le=settings.max_months_window),
    selected_month: Optional[str] = Query(None, pattern=MONTH_KEY_PATTERN),
    db: Session = Depends(get_db),
    policy: AllocationPolicy = Depends(get_allocation_policy),
):
    """
    Spending per category over the completed months before `selected_month`.

    Returns:
        Variable and fixed category totals (descending) with income, savings and
        opening balance summary
    """
    request_id = get_request_id(request)
    step = "load_accounts"

    try:
        account_repo = AccountRepository(db)
        account_ids = account_repo.get_account_ids(user_id)
        if not account_ids:
            raise NoAccountError("No account found")
        excluded_count = len(account_repo.get_account_ids(user_id, include_excluded=True)) - len(account_ids)
        balances = AccountBalances(*account_repo.get_balances(user_id))

        step = "resolve_periods"
        transaction_repo = TransactionRepository(db)
        month_keys = previous_month_keys(selected_month, months_window)
        periods = resolve_periods(
            months_window=months_window,
            selected_month=selected_month,
            boundaries=MonthClosureRepository(db).get_boundaries(user_id, month_keys),
            history_start=transaction_repo.get_earliest_transaction_date(account_ids),
        )

        step = "fetch_transactions"
        transactions = transaction_repo.get_transactions(account_ids, periods.ranges)

        step = "summarize"
        summary = summarize_spending(transactions, periods.actual_months_analyzed, policy.fixed_keywords)

        return TotalsResponse.from_domain(
            summary,
            balances,
            TotalsMetaSchema(
                months_window=months_window,
                actual_months_analyzed=periods.actual_months_analyzed,
                months_analyzed=periods.months_analyzed,
                excluded_accounts_count=excluded_count,
            ),
        )

    except NoAccountError as e:
        logging.warning(f"No account: {e}", extra={"request_id": request_id, "user_id": user_id, "step": step})
        raise HTTPException(status_code=400, detail="No account found")

    except InvalidPeriodError as e:
        logging.warning(f"Invalid period: {e}", extra={"request_id": request_id, "user_id": user_id, "step": step})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        computation_failures_counter.labels(step=step).inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "user_id": user_id, "step": step})
        raise HTTPException(status_code=500, detail="Internal server error")

"""Period resolution - turns an analysis window into concrete date ranges"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from budget_advisor.domain.exceptions import InvalidPeriodError
from budget_advisor.domain.models import DateRange, PeriodBoundary, ResolvedPeriods
from budget_advisor.utils.date_utils import month_bounds, month_key_for, months_before, parse_month_key


def previous_month_keys(selected_month: Optional[str], months_window: int, today: date | None = None) -> List[str]:
    """
    Month keys to analyze for a reference month, most recent first.

    The reference month itself is never included: recommendations only use
    completed months.

    Raises:
        InvalidPeriodError: window < 1 or malformed month key
    """
    if months_window < 1:
        raise InvalidPeriodError(f"months_window must be >= 1, got {months_window}")

    reference = selected_month or month_key_for(today or date.today())
    try:
        parse_month_key(reference)
    except ValueError as e:
        raise InvalidPeriodError(str(e)) from e

    return months_before(reference, months_window)


def resolve_periods(
    months_window: int = 3,
    selected_month: Optional[str] = None,
    boundaries: Iterable[PeriodBoundary] = (),
    history_start: date | None = None,
    today: date | None = None,
) -> ResolvedPeriods:
    """
    Resolve `months_window` completed months before `selected_month` into date ranges.

    Rules:
    - A recorded closure for the month wins: its exact start/end dates are used
    - Otherwise the calendar month (first day to last day)
    - Months ending before `history_start` are dropped, so averages are not
      diluted by months where the user had no data yet

    Args:
        months_window: Number of prior months to analyze (>= 1)
        selected_month: Reference month "YYYY-MM" (default: current month)
        boundaries: Recorded month closures for the user
        history_start: Date of the user's earliest transaction, if known
        today: Override for the current date

    Returns:
        ResolvedPeriods with ranges ordered most recent first
    """
    month_keys = previous_month_keys(selected_month, months_window, today)
    closures: Dict[str, PeriodBoundary] = {b.month_key: b for b in boundaries}

    ranges = []
    for key in month_keys:
        closure = closures.get(key)
        if closure is not None:
            start, end = closure.start_date, closure.end_date
        else:
            start, end = month_bounds(key)

        if history_start is not None and end < history_start:
            continue

        ranges.append(DateRange(month_key=key, start=start, end=end))

    return ResolvedPeriods(months_window=months_window, ranges=ranges)

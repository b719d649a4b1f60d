"""Prometheus metrics for monitoring recommendation outcomes and failures"""

from prometheus_client import Counter, Histogram

# Recommendation metrics
recommendation_counter = Counter(
    "budget_recommendation_total",
    "Total budget recommendations computed",
    ["outcome"],  # feasible | infeasible
)

fixed_share_bucket_counter = Counter(
    "budget_fixed_share_bucket",
    "Share of the spending cap taken by fixed expenses",
    ["bucket"],  # <50%, 50-80%, 80-100%, >100%
)

computation_failures_counter = Counter(
    "budget_computation_failures_total",
    "Recommendations that failed unexpectedly",
    ["step"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def fixed_share_bucket(fixed_total: float, spending_cap: float) -> str:
    """Bucket the fixed/cap ratio for distribution analysis"""
    if spending_cap <= 0:
        return ">100%" if fixed_total > 0 else "<50%"

    share = fixed_total / spending_cap
    if share < 0.5:
        return "<50%"
    elif share <= 0.8:
        return "50-80%"
    elif share <= 1.0:
        return "80-100%"
    else:
        return ">100%"


def record_recommendation(feasible: bool, fixed_total: float, spending_cap: float) -> None:
    """Record recommendation metrics for monitoring infeasibility rates"""
    outcome = "feasible" if feasible else "infeasible"
    recommendation_counter.labels(outcome=outcome).inc()
    fixed_share_bucket_counter.labels(bucket=fixed_share_bucket(fixed_total, spending_cap)).inc()

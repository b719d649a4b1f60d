"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from budget_advisor.config import settings
from budget_advisor.domain.classification import FIXED_KEYWORDS
from budget_advisor.domain.models import AllocationPolicy


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_allocation_policy() -> AllocationPolicy:
    """Provide allocation constants from configuration"""
    return AllocationPolicy(
        minimum_budget=settings.minimum_category_budget,
        income_fallback_multiplier=settings.income_fallback_multiplier,
        essential_keywords=frozenset(k.strip().lower() for k in settings.essential_keywords),
        fixed_keywords=FIXED_KEYWORDS,
    )

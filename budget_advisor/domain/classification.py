"""Fixed vs. variable category classification by keyword"""

from typing import AbstractSet

# Housing, allowances, insurance, health, subscriptions, bills, taxes,
# credit repayments and savings transfers
FIXED_KEYWORDS = frozenset({
    "logement", "loyer",
    "allocation",
    "assurance", "assurances",
    "santé", "sante",
    "abonnement", "abonnements",
    "facture",
    "impot", "impôts", "impots",
    "crédit", "credit", "remboursement",
    "épargne", "epargne",
})

# Categories that receive leftover variable budget
ESSENTIAL_KEYWORDS = frozenset({"alimentation", "transport", "santé"})


def normalize_name(name: str | None) -> str:
    return (name or "").strip().lower()


def matches_keyword(name: str | None, keywords: AbstractSet[str]) -> bool:
    """Substring match of any keyword against the normalized name"""
    normalized = normalize_name(name)
    return any(keyword in normalized for keyword in keywords)


def is_fixed_category(name: str | None, keywords: AbstractSet[str] = FIXED_KEYWORDS) -> bool:
    return matches_keyword(name, keywords)


def is_essential_category(name: str | None, keywords: AbstractSet[str] = ESSENTIAL_KEYWORDS) -> bool:
    return matches_keyword(name, keywords)

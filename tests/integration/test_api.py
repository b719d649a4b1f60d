"""Integration tests for API endpoints"""

import pytest
from datetime import date
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from budget_advisor.domain.exceptions import ComputationError
from budget_advisor.infrastructure.database.models import MonthClosure, UserSettings

CALCULATE_BODY = {
    "transactions": [
        {"amount": 600, "date": "2024-01-02", "kind": "income", "categoryName": "Salaire"},
        {"amount": 300, "date": "2024-01-10", "kind": "expense", "categoryName": "Alimentation"},
    ],
    "selectedMonth": "2024-02",
    "monthsWindow": 1,
}


def failure_count(step: str) -> float:
    return REGISTRY.get_sample_value("budget_computation_failures_total", {"step": step}) or 0.0


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "budget_recommendation_total" in response.text


def test_request_id_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_recommendation_success(client: TestClient, seeded_ledger):
    """Test POST /v1/budgets/recommendation with three months of history"""
    response = client.post(
        "/v1/budgets/recommendation",
        json={"userId": "user_1", "selectedMonth": "2024-04"},
    )

    assert response.status_code == 200
    data = response.json()
    assert "error" not in data
    assert [b["category"] for b in data["budgets"]] == ["Loyer", "Alimentation"]

    loyer, alimentation = data["budgets"]
    assert loyer["isFixed"] is True
    assert loyer["recommendedMonthly"] == 1000
    assert "base" not in loyer
    assert "userTarget" not in loyer
    assert alimentation["avgPerMonth"] == 400
    assert alimentation["median"] == 100
    assert alimentation["recommendedMonthly"] == 1700

    assert data["meta"] == {
        "monthsWindow": 3,
        "actualMonthsAnalyzed": 3,
        "monthsAnalyzed": ["2024-03", "2024-02", "2024-01"],
        "effectiveIncome": 3000,
        "capDisponible": 2700,
        "fixedTotal": 1000,
    }


def test_recommendation_infeasible(client: TestClient, ledger):
    """Fixed spend above the cap is a 200 carrying an explanation"""
    for month in (1, 2, 3):
        ledger.add(date(2024, month, 5), 3000, "Salaire", kind="income")
        ledger.add(date(2024, month, 1), 2900, "Loyer")
        ledger.add(date(2024, month, 9), 150, "Alimentation")
    ledger.commit()

    response = client.post(
        "/v1/budgets/recommendation",
        json={"userId": "user_1", "selectedMonth": "2024-04"},
    )

    assert response.status_code == 200
    data = response.json()
    assert "Fixed expenses exceed" in data["error"]
    assert "budgets" not in data
    assert data["meta"]["fixedTotal"] == 2900
    assert data["meta"]["capDisponible"] == 2700


def test_recommendation_no_account(client: TestClient):
    response = client.post("/v1/budgets/recommendation", json={"userId": "nobody"})

    assert response.status_code == 400
    assert response.json()["detail"] == "No account found"


def test_recommendation_excluded_accounts_only(client: TestClient, db, ledger):
    ledger.account.exclude_from_previsionnel = True
    ledger.commit()

    response = client.post("/v1/budgets/recommendation", json={"userId": "user_1"})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {"userId": "user_1", "selectedMonth": "2024-13"},
        {"userId": "user_1", "selectedMonth": "April"},
        {"userId": "user_1", "savingsRate": 1.5},
        {"userId": "user_1", "monthsWindow": 0},
        {"userId": ""},
    ],
)
def test_recommendation_invalid_input(client: TestClient, seeded_ledger, body):
    response = client.post("/v1/budgets/recommendation", json=body)

    assert response.status_code == 422


def test_recommendation_uses_stored_settings(client: TestClient, db, seeded_ledger):
    """Stored targets and savings rate apply when the request omits them"""
    db.add(UserSettings(user_id="user_1", spend_targets={"Alimentation": 250}, savings_rate=0.2))
    db.commit()

    response = client.post(
        "/v1/budgets/recommendation",
        json={"userId": "user_1", "selectedMonth": "2024-04"},
    )

    data = response.json()
    alimentation = next(b for b in data["budgets"] if b["category"] == "Alimentation")
    assert data["meta"]["capDisponible"] == 2400
    assert alimentation["userTarget"] == 250
    assert alimentation["base"] == 250
    assert alimentation["recommendedMonthly"] == 1400


def test_recommendation_request_overrides_stored_settings(client: TestClient, db, seeded_ledger):
    db.add(UserSettings(user_id="user_1", spend_targets={"Alimentation": 250}, savings_rate=0.2))
    db.commit()

    response = client.post(
        "/v1/budgets/recommendation",
        json={"userId": "user_1", "selectedMonth": "2024-04", "savingsRate": 0.1, "targets": {}},
    )

    data = response.json()
    alimentation = next(b for b in data["budgets"] if b["category"] == "Alimentation")
    assert data["meta"]["capDisponible"] == 2700
    assert "userTarget" not in alimentation


def test_recommendation_short_history(client: TestClient, seeded_ledger):
    """A 6-month window over 3 months of history averages over 3 months"""
    response = client.post(
        "/v1/budgets/recommendation",
        json={"userId": "user_1", "selectedMonth": "2024-04", "monthsWindow": 6},
    )

    meta = response.json()["meta"]
    assert meta["monthsWindow"] == 6
    assert meta["actualMonthsAnalyzed"] == 3
    assert meta["effectiveIncome"] == 3000


def test_recommendation_uses_month_closures(client: TestClient, db, ledger):
    """A closure moves a transaction into the closed month"""
    ledger.add(date(2024, 2, 28), 2000, "Salaire", kind="income")
    ledger.add(date(2024, 3, 5), 300, "Transport")
    ledger.commit()
    db.add(MonthClosure(user_id="user_1", month_year="2024-03", start_date=date(2024, 2, 27), end_date=date(2024, 3, 26)))
    db.commit()

    response = client.post(
        "/v1/budgets/recommendation",
        json={"userId": "user_1", "selectedMonth": "2024-04", "monthsWindow": 1, "savingsRate": 0},
    )

    data = response.json()
    assert data["meta"]["effectiveIncome"] == 2000
    assert data["budgets"][0]["category"] == "Transport"
    assert data["budgets"][0]["recommendedMonthly"] == 2000


def test_recommendation_is_deterministic(client: TestClient, seeded_ledger):
    body = {"userId": "user_1", "selectedMonth": "2024-04", "savingsRate": 0.17, "targets": {"Alimentation": 123.45}}

    first = client.post("/v1/budgets/recommendation", json=body)
    second = client.post("/v1/budgets/recommendation", json=body)

    assert first.content == second.content


def test_calculate_endpoint(client: TestClient):
    """Test POST /v1/budgets/calculate with caller-supplied transactions"""
    transactions = [
        {"amount": 600, "date": "2024-01-02", "kind": "income", "categoryName": "Salaire"},
        {"amount": 300, "date": "2024-01-10", "kind": "expense", "categoryName": "Alimentation"},
        {"amount": 100, "date": "2024-01-12", "kind": "expense", "categoryName": "Transport"},
        {"amount": 999, "date": "2024-02-03", "kind": "expense", "categoryName": "Loisirs"},  # Reference month
    ]

    response = client.post(
        "/v1/budgets/calculate",
        json={"transactions": transactions, "selectedMonth": "2024-02", "monthsWindow": 1, "savingsRate": 0},
    )

    assert response.status_code == 200
    budgets = {b["category"]: b["recommendedMonthly"] for b in response.json()["budgets"]}
    assert budgets == {"Alimentation": 450, "Transport": 150}


def test_calculate_endpoint_with_closures(client: TestClient):
    transactions = [
        {"amount": 500, "date": "2023-12-30", "kind": "income"},
        {"amount": 80, "date": "2023-12-31", "kind": "expense"},
    ]

    response = client.post(
        "/v1/budgets/calculate",
        json={
            "transactions": transactions,
            "selectedMonth": "2024-02",
            "monthsWindow": 1,
            "closures": [{"monthKey": "2024-01", "startDate": "2023-12-29", "endDate": "2024-01-28"}],
        },
    )

    data = response.json()
    assert data["meta"]["effectiveIncome"] == 500
    assert data["budgets"][0]["category"] == "Uncategorized"


def test_calculate_endpoint_requires_transactions(client: TestClient):
    response = client.post("/v1/budgets/calculate", json={"transactions": []})

    assert response.status_code == 400


def test_totals_endpoint(client: TestClient, seeded_ledger):
    """Test GET /v1/budgets/totals"""
    response = client.get("/v1/budgets/totals?user_id=user_1&months_window=3&selected_month=2024-04")

    assert response.status_code == 200
    data = response.json()
    assert [t["category"] for t in data["totals"]] == ["Alimentation"]
    assert [t["category"] for t in data["fixedTotals"]] == ["Loyer"]
    assert data["summary"] == {
        "totalIncome": 9000,
        "totalFixedExpenses": 3000,
        "totalVariableExpenses": 1200,
        "availableForVariable": 6000,
        "potentialSavings": 4800,
        "totalBalanceIncluded": 0,
        "totalBalanceExcluded": 0,
        "totalBalanceAll": 0,
    }
    assert data["meta"]["excludedAccountsCount"] == 0


def test_totals_endpoint_no_account(client: TestClient):
    response = client.get("/v1/budgets/totals?user_id=nobody")

    assert response.status_code == 400


def test_calculate_endpoint_computation_failure(client: TestClient, monkeypatch):
    """A failing engine step is a generic 500 counted under that step"""
    def broken(*args, **kwargs):
        raise ComputationError("allocate", "division by zero")

    monkeypatch.setattr("budget_advisor.api.v1.calculate.recommend_budgets", broken)
    before = failure_count("allocate")

    response = client.post("/v1/budgets/calculate", json=CALCULATE_BODY)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert failure_count("allocate") == before + 1


def test_calculate_endpoint_unexpected_error(client: TestClient, monkeypatch):
    """Errors outside the engine are counted under the router step"""
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("budget_advisor.api.v1.calculate.filter_to_periods", broken)
    before = failure_count("compute")

    response = client.post("/v1/budgets/calculate", json=CALCULATE_BODY)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert failure_count("compute") == before + 1


def test_totals_endpoint_unexpected_error(client: TestClient, seeded_ledger, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("budget_advisor.api.v1.totals.summarize_spending", broken)
    before = failure_count("summarize")

    response = client.get("/v1/budgets/totals?user_id=user_1&months_window=3&selected_month=2024-04")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert failure_count("summarize") == before + 1


def test_totals_endpoint_invalid_period(client: TestClient, seeded_ledger):
    response = client.get("/v1/budgets/totals?user_id=user_1&selected_month=2024-13")

    assert response.status_code == 422


def test_totals_endpoint_balances(client: TestClient, ledger):
    """Opening balances are reported per budgeting scope, excluded accounts included in the overall figure"""
    ledger.account.initial_balance = 1500
    savings = ledger.add_account(excluded=True)
    savings.initial_balance = 200.5
    ledger.add(date(2024, 3, 5), 50, "Transport")
    ledger.commit()

    response = client.get("/v1/budgets/totals?user_id=user_1&selected_month=2024-04")

    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["totalBalanceIncluded"] == 1500
    assert summary["totalBalanceExcluded"] == 200.5
    assert summary["totalBalanceAll"] == 2000.5
    assert response.json()["meta"]["excludedAccountsCount"] == 1

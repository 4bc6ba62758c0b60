"""
E2E journeys through the gateway as a dealer would drive it.

Journeys:
- prime_salaried: prescreen, book with HDFC, bundle loan protection
- thin_freelancer: few lenders, higher insurance pricing
- enterprise_dealer: repeat business, growing payout and history
"""

import pytest
from fastapi.testclient import TestClient


def _prescreen(client: TestClient, borrower: dict, vehicle: dict, expenses: float = 0) -> dict:
    response = client.post(
        "/v1/prescreening/report",
        json={"borrower": borrower, "vehicle": vehicle, "monthly_expenses": expenses},
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
def test_prime_salaried_journey(client: TestClient):
    """
    prime_salaried: 780 bureau score, 1.5L salary
    Expected: Low risk, several lenders, cheapest quote becomes the policy
    """
    borrower = {
        "pan": "PQRSX6789K",
        "aadhaar": "987654321098",
        "credit_score": 780,
        "employment_type": "SALARIED",
        "monthly_income": 150000,
    }
    vehicle = {"make": "Hyundai", "model": "Creta", "category": "suv", "loan_amount": 1200000, "tenure_months": 60}

    report = _prescreen(client, borrower, vehicle, expenses=40000)
    assert report["risk_profile"]["risk_category"] == "Low"
    lender_ids = [lender["lender_id"] for lender in report["eligible_lenders"]]
    assert "hdfc-bank" in lender_ids

    commission = client.post(
        "/v1/commission/calculate",
        json={
            "loan_amount": 1200000,
            "lender_id": "hdfc",
            "dealer_id": "dealer-prime",
            "dealer_plan": "professional",
            "application_id": "app-prime",
        },
    )
    assert commission.status_code == 200
    assert commission.json()["commission_breakdown"]["total_commission"] == pytest.approx(18000)

    quotes = client.post(
        "/v1/insurance/quotes",
        json={
            "coverage_type": "loan_protection",
            "risk_profile": {
                "credit_score": 780,
                "employment_type": "SALARIED",
                "monthly_income": 150000,
                "loan_amount": 1200000,
                "loan_tenure": 60,
                "age": 35,
            },
        },
    ).json()
    cheapest = quotes["quotes"][0]

    policy = client.post(
        "/v1/insurance/policies",
        json={
            "application_id": "app-prime",
            "provider_id": cheapest["provider_id"],
            "coverage_type": "loan_protection",
            "risk_profile": {
                "credit_score": 780,
                "employment_type": "SALARIED",
                "monthly_income": 150000,
                "loan_amount": 1200000,
                "loan_tenure": 60,
                "age": 35,
            },
        },
    )
    assert policy.status_code == 200
    assert policy.json()["premium_amount"] == cheapest["premium"]


@pytest.mark.integration
def test_thin_freelancer_journey(client: TestClient):
    """
    thin_freelancer: 610 score, 30k income, existing EMIs
    Expected: only the NBFC that funds freelancers, risk-loaded insurance
    """
    borrower = {
        "pan": "LMNOP4321Z",
        "aadhaar": "111122223333",
        "credit_score": 610,
        "employment_type": "freelancer",
        "monthly_income": 30000,
        "existing_emis": 8000,
    }
    vehicle = {"make": "Maruti", "model": "Swift", "category": "hatchback", "loan_amount": 400000, "tenure_months": 48}

    report = _prescreen(client, borrower, vehicle, expenses=12000)
    assert [lender["lender_id"] for lender in report["eligible_lenders"]] == ["bajaj-finserv"]
    assert report["risk_profile"]["risk_category"] in {"Medium", "High"}
    assert report["emi_affordability"]["is_affordable"] is False

    quotes = client.post(
        "/v1/insurance/quotes",
        json={
            "coverage_type": "job_loss",
            "risk_profile": {
                "credit_score": 610,
                "employment_type": "freelancer",
                "monthly_income": 30000,
                "loan_amount": 400000,
                "loan_tenure": 48,
                "age": 52,
                "existing_emis": 8000,
            },
        },
    ).json()
    assert quotes["total_quotes"] == 3
    assert all(q["risk_multiplier"] > 1 for q in quotes["quotes"])


@pytest.mark.integration
def test_enterprise_dealer_history(client: TestClient):
    """
    enterprise_dealer: several loans booked in one month
    Expected: weekly payouts, every booking recorded
    """
    for i, lender in enumerate(["hdfc", "bajaj", "mahindra"]):
        response = client.post(
            "/v1/commission/calculate",
            json={
                "loan_amount": 900000,
                "lender_id": lender,
                "dealer_id": "dealer-ent",
                "dealer_plan": "enterprise",
                "application_id": f"app-ent-{i}",
            },
        )
        assert response.status_code == 200
        assert response.json()["payout"]["frequency"] == "weekly"

    history = client.get("/v1/commission/history?dealer_id=dealer-ent").json()
    assert len(history["records"]) == 3
    assert {r["lender_id"] for r in history["records"]} == {"hdfc", "bajaj", "mahindra"}

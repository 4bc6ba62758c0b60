"""Risk profile scoring - additive 0-100 score over identity, bureau, income and bank signals"""

from fin5_gateway.domain.models import (
    BankSignal,
    EmploymentType,
    IdentityVerification,
    InflowTrend,
    RiskProfileResult,
    ScoreBreakdown,
    ScoreComponent,
)
from fin5_gateway.domain.validation import to_number


def risk_category(score: float) -> str:
    """
    Map risk score to category.

    - 55+:   Low
    - 35-54: Medium
    - <35:   High
    """
    if score >= 55:
        return "Low"
    elif score >= 35:
        return "Medium"
    else:
        return "High"


def calculate_risk_profile(
    identity: IdentityVerification,
    credit_score: float,
    monthly_income: float,
    existing_emis: float,
    bank_signal: BankSignal,
    employment_type: EmploymentType | str,
) -> RiskProfileResult:
    """
    Score an applicant's risk profile.

    Points:
    - PAN valid 10, Aadhaar valid 10
    - Credit score: 750+ 20, 700+ 15, 650+ 10
    - Income: 1L+ 10, 50k+ 7, 25k+ 4
    - Existing EMI / income: <0.2 10, <0.4 5 (no income counts as ratio 1.0)
    - Bounced cheques: none 10, up to 2 5
    - Inflow trend stable or increasing: 5
    - Employment: salaried 5, self-employed 3
    """
    credit_score = to_number(credit_score)
    income = to_number(monthly_income)
    emis = to_number(existing_emis)
    bounced = to_number(bank_signal.bounced_cheques)

    if credit_score >= 750:
        credit_points = 20
    elif credit_score >= 700:
        credit_points = 15
    elif credit_score >= 650:
        credit_points = 10
    else:
        credit_points = 0

    if income >= 100_000:
        income_points = 10
    elif income >= 50_000:
        income_points = 7
    elif income >= 25_000:
        income_points = 4
    else:
        income_points = 0

    emi_to_income = emis / income if income > 0 else 1.0
    if emi_to_income < 0.2:
        emi_points = 10
    elif emi_to_income < 0.4:
        emi_points = 5
    else:
        emi_points = 0

    if bounced == 0:
        bounced_points = 10
    elif bounced <= 2:
        bounced_points = 5
    else:
        bounced_points = 0

    trend = InflowTrend.parse(bank_signal.inflow_trend)
    trend_points = 5 if trend in (InflowTrend.STABLE, InflowTrend.INCREASING) else 0

    employment = EmploymentType.parse(employment_type)
    if employment == EmploymentType.SALARIED:
        employment_points = 5
    elif employment == EmploymentType.SELF_EMPLOYED:
        employment_points = 3
    else:
        employment_points = 0

    breakdown = ScoreBreakdown(
        components={
            "pan": ScoreComponent(10 if identity.pan_valid else 0, 10),
            "aadhaar": ScoreComponent(10 if identity.aadhaar_valid else 0, 10),
            "credit_score": ScoreComponent(credit_points, 20),
            "income": ScoreComponent(income_points, 10),
            "emi_to_income": ScoreComponent(emi_points, 10),
            "bounced_cheques": ScoreComponent(bounced_points, 10),
            "inflow_trend": ScoreComponent(trend_points, 5),
            "employment": ScoreComponent(employment_points, 5),
        }
    )
    score = breakdown.total

    return RiskProfileResult(
        score=score,
        category=risk_category(score),
        breakdown=breakdown,
        emi_to_income_ratio=emi_to_income,
    )

"""Custom credit score - weighted 0-100 score with Gold/Silver/Bronze tiers"""

from typing import Optional

from fin5_gateway.domain.models import (
    AffordabilityFlags,
    ApplicationHistory,
    BankSignal,
    CreditReport,
    CustomCreditScore,
    EmploymentType,
    IdentityVerification,
    InflowTrend,
    ScoreBreakdown,
    ScoreComponent,
)
from fin5_gateway.domain.validation import to_number


def credit_tier(score: float) -> str:
    if score >= 80:
        return "Gold"
    elif score >= 60:
        return "Silver"
    elif score >= 40:
        return "Bronze"
    else:
        return "High Risk"


def bank_health_points(bank_signal: BankSignal) -> int:
    """Bank statement health out of 20"""
    points = 0
    bounced = to_number(bank_signal.bounced_cheques)
    if bounced == 0:
        points += 10
    elif bounced <= 2:
        points += 5
    if InflowTrend.parse(bank_signal.inflow_trend) in (InflowTrend.STABLE, InflowTrend.INCREASING):
        points += 5
    if to_number(bank_signal.monthly_inflow) > to_number(bank_signal.monthly_outflow):
        points += 5
    return points


def calculate_custom_credit_score(
    identity: IdentityVerification,
    credit_report: CreditReport,
    bank_signal: BankSignal,
    affordability: Optional[AffordabilityFlags],
    employment_type: EmploymentType | str,
    monthly_income: float,
    history: Optional[ApplicationHistory] = None,
) -> CustomCreditScore:
    """
    Score an applicant on the custom credit scale.

    Weights (maximum points):
    - Identity validity (10): PAN 5, Aadhaar 5
    - Bureau score (25): 750+ 25, 700+ 20, 650+ 15, else 5
    - Bank health (20): see bank_health_points
    - EMI affordability (15): affordable 10, disposable income above 10k 5
    - Employment and income (15): salaried 5 / self-employed 3; income above 1L 10, 50k+ 7, else 3
    - Application history (10): no past defaults 5, no past rejections 5

    Components top out at 95; the total is still clamped to [0, 100].
    """
    history = history or ApplicationHistory()

    identity_points = (5 if identity.pan_valid else 0) + (5 if identity.aadhaar_valid else 0)

    bureau_score = to_number(credit_report.credit_score)
    if bureau_score >= 750:
        bureau_points = 25
    elif bureau_score >= 700:
        bureau_points = 20
    elif bureau_score >= 650:
        bureau_points = 15
    else:
        bureau_points = 5

    affordability_points = 0
    if affordability is not None:
        if affordability.is_affordable:
            affordability_points += 10
        if affordability.disposable_income > 10_000:
            affordability_points += 5

    employment = EmploymentType.parse(employment_type)
    income = to_number(monthly_income)
    employment_points = 0
    if employment == EmploymentType.SALARIED:
        employment_points += 5
    elif employment == EmploymentType.SELF_EMPLOYED:
        employment_points += 3
    if income > 100_000:
        employment_points += 10
    elif income >= 50_000:
        employment_points += 7
    else:
        employment_points += 3

    history_points = 0
    if to_number(history.past_defaults) == 0:
        history_points += 5
    if to_number(history.past_rejections) == 0:
        history_points += 5

    breakdown = ScoreBreakdown(
        components={
            "identity": ScoreComponent(identity_points, 10),
            "bureau": ScoreComponent(bureau_points, 25),
            "bank_health": ScoreComponent(bank_health_points(bank_signal), 20),
            "emi_affordability": ScoreComponent(affordability_points, 15),
            "employment_income": ScoreComponent(employment_points, 15),
            "application_history": ScoreComponent(history_points, 10),
        }
    )
    score = breakdown.total

    return CustomCreditScore(score=score, category=credit_tier(score), breakdown=breakdown)

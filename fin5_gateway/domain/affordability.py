"""EMI affordability and amortised EMI calculation"""

from typing import Any

from fin5_gateway.domain.models import EmiAffordability
from fin5_gateway.domain.validation import round_half_up, to_number

MAX_EMI_TO_INCOME = 0.4
MIN_DISPOSABLE_INCOME = 10_000

EXCEEDS_MAX_WARNING = "Requested EMI exceeds recommended maximum based on your income."
LOW_DISPOSABLE_WARNING = "Your disposable income after all EMIs will be below ₹10,000."


def calculate_emi_affordability(
    monthly_income: Any = 0,
    existing_emis: Any = 0,
    monthly_expenses: Any = 0,
    requested_emi: Any = 0,
) -> EmiAffordability:
    """
    Check whether a new EMI fits the applicant's budget.

    Affordable when total EMIs stay within 40% of income and at least
    ₹10,000 of disposable income remains after the new loan. Missing or
    non-numeric inputs count as 0.
    """
    income = to_number(monthly_income)
    emis = to_number(existing_emis)
    expenses = to_number(monthly_expenses)
    new_emi = to_number(requested_emi)

    recommended_max_emi = round_half_up(income * MAX_EMI_TO_INCOME)
    total_emi_after_loan = emis + new_emi
    disposable_income = income - (emis + expenses)
    disposable_income_after_loan = income - (total_emi_after_loan + expenses)

    within_max = total_emi_after_loan <= recommended_max_emi
    enough_left = disposable_income_after_loan >= MIN_DISPOSABLE_INCOME

    warning = None
    if not within_max:
        warning = EXCEEDS_MAX_WARNING
    elif not enough_left:
        warning = LOW_DISPOSABLE_WARNING

    return EmiAffordability(
        monthly_income=income,
        existing_emis=emis,
        monthly_expenses=expenses,
        requested_emi=new_emi,
        recommended_max_emi=recommended_max_emi,
        total_emi_after_loan=total_emi_after_loan,
        disposable_income=disposable_income,
        disposable_income_after_loan=disposable_income_after_loan,
        is_affordable=within_max and enough_left,
        warning=warning,
    )


def calculate_emi(principal: Any, annual_rate_percent: Any, tenure_months: Any) -> float:
    """Standard reducing-balance EMI; zero-rate loans split the principal evenly"""
    principal = to_number(principal)
    n = int(to_number(tenure_months))
    if n <= 0 or principal <= 0:
        return 0.0

    r = to_number(annual_rate_percent) / (12 * 100)
    if r == 0:
        return round(principal / n, 2)

    emi = principal * r * (1 + r) ** n / ((1 + r) ** n - 1)
    return round(emi, 2)

"""Prescreening orchestration - runs independent checks concurrently and aggregates them"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from fin5_gateway.domain.affordability import calculate_emi, calculate_emi_affordability
from fin5_gateway.domain.credit_score import calculate_custom_credit_score
from fin5_gateway.domain.eligibility import filter_eligible_lenders
from fin5_gateway.domain.models import (
    ApplicationHistory,
    BorrowerProfile,
    LenderRule,
    PrescreeningReport,
    VehicleRequest,
)
from fin5_gateway.domain.risk_profile import calculate_risk_profile
from fin5_gateway.infrastructure.clients.verification import VerificationClient

logger = logging.getLogger(__name__)

# Indicative vehicle-loan rate used to estimate the EMI when the caller gives none
INDICATIVE_ANNUAL_RATE = 9.5


@dataclass(frozen=True)
class PrescreeningApplication:
    borrower: BorrowerProfile
    vehicle: VehicleRequest
    monthly_expenses: float = 0
    requested_emi: Optional[float] = None
    annual_interest_rate: float = INDICATIVE_ANNUAL_RATE
    history: ApplicationHistory = field(default_factory=ApplicationHistory)
    consent_handle: str = ""
    account_id: str = ""
    account_number: str = ""


async def run_prescreening(
    application: PrescreeningApplication,
    verification_client: VerificationClient,
    lenders: Iterable[LenderRule],
) -> PrescreeningReport:
    """
    Full prescreening report for an application.

    Flow:
    1. Verify identity, pull the bureau report and analyse the bank statement concurrently
    2. EMI affordability (requested EMI, or estimated from the vehicle loan)
    3. Risk profile and custom credit score
    4. Eligible lenders

    The applicant's declared credit score is used where given; otherwise the bureau score.

    Raises:
        VerificationAPIError: If any provider call fails
    """
    borrower = application.borrower
    identity, credit_report, bank_signal = await asyncio.gather(
        verification_client.verify_identity(borrower.pan, borrower.aadhaar),
        verification_client.get_credit_report(borrower.pan, borrower.aadhaar),
        verification_client.analyze_bank_statement(
            consent_handle=application.consent_handle,
            account_id=application.account_id,
            account_number=application.account_number,
        ),
    )

    if not borrower.credit_score:
        borrower = replace(borrower, credit_score=credit_report.credit_score)

    requested_emi = application.requested_emi
    if requested_emi is None:
        vehicle = application.vehicle
        requested_emi = calculate_emi(vehicle.loan_amount, application.annual_interest_rate, vehicle.tenure_months)

    affordability = calculate_emi_affordability(
        monthly_income=borrower.monthly_income,
        existing_emis=borrower.existing_emis,
        monthly_expenses=application.monthly_expenses,
        requested_emi=requested_emi,
    )

    risk_profile = calculate_risk_profile(
        identity=identity,
        credit_score=borrower.credit_score,
        monthly_income=borrower.monthly_income,
        existing_emis=borrower.existing_emis,
        bank_signal=bank_signal,
        employment_type=borrower.employment_type,
    )

    custom_score = calculate_custom_credit_score(
        identity=identity,
        credit_report=credit_report,
        bank_signal=bank_signal,
        affordability=affordability.flags,
        employment_type=borrower.employment_type,
        monthly_income=borrower.monthly_income,
        history=application.history,
    )

    eligible = filter_eligible_lenders(lenders, borrower, application.vehicle, application.vehicle.loan_amount)

    logger.info(
        "Prescreening report assembled",
        extra={
            "risk_category": risk_profile.category,
            "custom_score_category": custom_score.category,
            "eligible_lenders": len(eligible),
        },
    )

    return PrescreeningReport(
        identity=identity,
        credit_report=credit_report,
        bank_signal=bank_signal,
        affordability=affordability,
        risk_profile=risk_profile,
        custom_score=custom_score,
        eligible_lenders=eligible,
    )

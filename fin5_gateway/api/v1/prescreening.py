"""POST /v1/prescreening/* - eligibility, risk profile, custom credit score and EMI affordability"""

import asyncio
import logging
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from fin5_gateway.api.dependencies import get_lenders, get_request_id, get_verification_client
from fin5_gateway.api.v1.schemas import (
    CustomCreditScoreRequest,
    CustomCreditScoreResponse,
    EligibleLendersRequest,
    EligibleLendersResponse,
    EmiAffordabilityRequest,
    EmiAffordabilityResponse,
    LenderSchema,
    PrescreeningReportRequest,
    PrescreeningReportResponse,
    RiskProfileRequest,
    RiskProfileResponse,
)
from fin5_gateway.domain.affordability import calculate_emi_affordability
from fin5_gateway.domain.credit_score import calculate_custom_credit_score
from fin5_gateway.domain.eligibility import lender_rejection_reasons
from fin5_gateway.domain.exceptions import VerificationAPIError
from fin5_gateway.domain.models import (
    AffordabilityFlags,
    CreditReport,
    CustomCreditScore,
    EmiAffordability,
    IdentityVerification,
    LenderRule,
    RiskProfileResult,
)
from fin5_gateway.domain.risk_profile import calculate_risk_profile
from fin5_gateway.domain.validation import is_valid_aadhaar, is_valid_pan
from fin5_gateway.infrastructure.clients.verification import VerificationClient
from fin5_gateway.infrastructure.observability.logging import log_prescreening
from fin5_gateway.infrastructure.observability.metrics import eligible_lender_histogram, prescreening_counter
from fin5_gateway.services.prescreening import PrescreeningApplication, run_prescreening

router = APIRouter()


def _lender_schema(lender: LenderRule) -> LenderSchema:
    return LenderSchema(
        lender_id=lender.lender_id,
        name=lender.name,
        min_credit_score=lender.min_credit_score,
        min_loan_amount=lender.min_loan_amount,
        max_loan_amount=lender.max_loan_amount,
        supported_vehicle_types=sorted(lender.supported_vehicle_types),
        supported_employment_types=sorted(e.value for e in lender.supported_employment_types),
    )


def _risk_profile_response(result: RiskProfileResult, identity: IdentityVerification) -> RiskProfileResponse:
    return RiskProfileResponse(
        risk_score=result.score,
        risk_category=result.category,
        emi_to_income_ratio=result.emi_to_income_ratio,
        breakdown=result.breakdown.as_dict(),
        pan_valid=identity.pan_valid,
        aadhaar_valid=identity.aadhaar_valid,
    )


def _custom_score_response(result: CustomCreditScore, report: CreditReport) -> CustomCreditScoreResponse:
    return CustomCreditScoreResponse(
        custom_score=result.score,
        category=result.category,
        breakdown=result.breakdown.as_dict(),
        bureau_score=report.credit_score,
        bureau_name=report.bureau_name,
    )


def _affordability_response(result: EmiAffordability) -> EmiAffordabilityResponse:
    return EmiAffordabilityResponse(
        recommended_max_emi=result.recommended_max_emi,
        is_affordable=result.is_affordable,
        disposable_income=result.disposable_income,
        total_emi_after_loan=result.total_emi_after_loan,
        disposable_income_after_loan=result.disposable_income_after_loan,
        warning=result.warning,
    )


@router.post("/prescreening/eligible-lenders", response_model=EligibleLendersResponse)
def eligible_lenders(
    request_body: EligibleLendersRequest,
    lenders: List[LenderRule] = Depends(get_lenders),
):
    """
    Lenders whose credit, loan amount, vehicle and employment constraints all match.

    Ineligible lenders are listed under `rejected` with the constraints they fail.
    """
    borrower = request_body.borrower.to_domain()
    vehicle = request_body.vehicle.to_domain()

    eligible, rejected = [], {}
    for lender in lenders:
        reasons = lender_rejection_reasons(lender, borrower, vehicle, request_body.requested_amount)
        if reasons:
            rejected[lender.lender_id] = reasons
        else:
            eligible.append(_lender_schema(lender))

    eligible_lender_histogram.observe(len(eligible))
    return EligibleLendersResponse(eligible_lenders=eligible, rejected=rejected)


@router.post("/prescreening/risk-profile", response_model=RiskProfileResponse)
async def risk_profile(
    request_body: RiskProfileRequest,
    request: Request,
    verification_client: VerificationClient = Depends(get_verification_client),
):
    """Verify PAN/Aadhaar with the identity provider and score the applicant's risk profile"""
    start_time = time.time()
    request_id = get_request_id(request)
    borrower = request_body.borrower.to_domain()

    try:
        identity = await verification_client.verify_identity(borrower.pan, borrower.aadhaar)
    except VerificationAPIError as e:
        logging.error(f"Identity verification error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Verification service unavailable")

    result = calculate_risk_profile(
        identity=identity,
        credit_score=borrower.credit_score,
        monthly_income=borrower.monthly_income,
        existing_emis=borrower.existing_emis,
        bank_signal=request_body.bank_statement.to_domain(),
        employment_type=borrower.employment_type,
    )

    prescreening_counter.labels(check="risk_profile", outcome=result.category).inc()
    log_prescreening(request_id, "risk_profile", result.category, result.score, (time.time() - start_time) * 1000)
    return _risk_profile_response(result, identity)


@router.post("/prescreening/custom-credit-score", response_model=CustomCreditScoreResponse)
async def custom_credit_score(
    request_body: CustomCreditScoreRequest,
    request: Request,
    verification_client: VerificationClient = Depends(get_verification_client),
):
    """
    Custom Gold/Silver/Bronze score.

    Identity validity is judged by document pattern; the bureau report and
    bank statement analysis come from the verification provider.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    borrower = request_body.borrower.to_domain()
    account = request_body.account

    try:
        credit_report, bank_signal = await asyncio.gather(
            verification_client.get_credit_report(borrower.pan, borrower.aadhaar),
            verification_client.analyze_bank_statement(
                consent_handle=account.consent_handle,
                account_id=account.account_id,
                account_number=account.account_number,
            ),
        )
    except VerificationAPIError as e:
        logging.error(f"Bureau/bank analysis error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Verification service unavailable")

    identity = IdentityVerification(pan_valid=is_valid_pan(borrower.pan), aadhaar_valid=is_valid_aadhaar(borrower.aadhaar))

    flags = request_body.emi_affordability
    affordability = None
    if flags is not None:
        affordability = AffordabilityFlags(is_affordable=flags.is_affordable, disposable_income=flags.disposable_income)

    result = calculate_custom_credit_score(
        identity=identity,
        credit_report=credit_report,
        bank_signal=bank_signal,
        affordability=affordability,
        employment_type=borrower.employment_type,
        monthly_income=borrower.monthly_income,
        history=request_body.application_history.to_domain(),
    )

    prescreening_counter.labels(check="custom_score", outcome=result.category).inc()
    log_prescreening(request_id, "custom_score", result.category, result.score, (time.time() - start_time) * 1000)
    return _custom_score_response(result, credit_report)


@router.post("/prescreening/emi-affordability", response_model=EmiAffordabilityResponse)
def emi_affordability(request_body: EmiAffordabilityRequest):
    """Recommended maximum EMI and whether the requested EMI fits the applicant's budget"""
    result = calculate_emi_affordability(
        monthly_income=request_body.monthly_income,
        existing_emis=request_body.existing_emis,
        monthly_expenses=request_body.monthly_expenses,
        requested_emi=request_body.requested_emi,
    )
    prescreening_counter.labels(
        check="emi_affordability", outcome="affordable" if result.is_affordable else "unaffordable"
    ).inc()
    return _affordability_response(result)


@router.post("/prescreening/report", response_model=PrescreeningReportResponse)
async def prescreening_report(
    request_body: PrescreeningReportRequest,
    request: Request,
    verification_client: VerificationClient = Depends(get_verification_client),
    lenders: List[LenderRule] = Depends(get_lenders),
):
    """Run every prescreening check concurrently and return the combined report"""
    start_time = time.time()
    request_id = get_request_id(request)

    application = PrescreeningApplication(
        borrower=request_body.borrower.to_domain(),
        vehicle=request_body.vehicle.to_domain(),
        monthly_expenses=request_body.monthly_expenses,
        requested_emi=request_body.requested_emi,
        history=request_body.application_history.to_domain(),
        consent_handle=request_body.account.consent_handle,
        account_id=request_body.account.account_id,
        account_number=request_body.account.account_number,
    )

    try:
        report = await run_prescreening(application, verification_client, lenders)
    except VerificationAPIError as e:
        logging.error(f"Verification error during prescreening: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Verification service unavailable")

    prescreening_counter.labels(check="report", outcome=report.risk_profile.category).inc()
    eligible_lender_histogram.observe(len(report.eligible_lenders))
    log_prescreening(
        request_id, "report", report.risk_profile.category, report.risk_profile.score, (time.time() - start_time) * 1000
    )

    return PrescreeningReportResponse(
        risk_profile=_risk_profile_response(report.risk_profile, report.identity),
        custom_credit_score=_custom_score_response(report.custom_score, report.credit_report),
        emi_affordability=_affordability_response(report.affordability),
        eligible_lenders=[_lender_schema(lender) for lender in report.eligible_lenders],
    )

"""Insurance endpoints - catalog, multi-provider quotes, policy issuance and claims"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from fin5_gateway.api.dependencies import get_insurance_config, get_request_id
from fin5_gateway.api.v1.schemas import (
    ClaimDecisionRequest,
    ClaimListResponse,
    ClaimRequest,
    ClaimResponse,
    CoverageTypeInfo,
    InsuranceCatalogResponse,
    InsuranceQuoteRequest,
    InsuranceQuoteSchema,
    InsuranceQuotesResponse,
    PolicyRequest,
    PolicyResponse,
    ProviderInfo,
)
from fin5_gateway.domain.claims import decide_claim, ensure_claimable
from fin5_gateway.domain.exceptions import InvalidClaimTransitionError, PolicyNotActiveError
from fin5_gateway.domain.insurance import InsuranceConfig, build_quote, get_insurance_quotes, provider_terms
from fin5_gateway.domain.models import ClaimStatus, InsuranceQuote
from fin5_gateway.infrastructure.database.models import InsuranceClaim, InsurancePolicy
from fin5_gateway.infrastructure.database.repositories import ClaimRepository, PolicyRepository
from fin5_gateway.infrastructure.database.session import get_db
from fin5_gateway.infrastructure.observability.metrics import (
    insurance_claim_counter,
    insurance_claim_payout_counter,
    insurance_policy_counter,
    insurance_quote_counter,
)

router = APIRouter()


def _quote_schema(quote: InsuranceQuote) -> InsuranceQuoteSchema:
    return InsuranceQuoteSchema(
        provider_id=quote.provider_id,
        provider_name=quote.provider_name,
        coverage_type=quote.coverage_type,
        premium=quote.premium,
        coverage=quote.coverage,
        commission=quote.commission,
        terms=quote.terms,
        response_time_minutes=quote.response_time_minutes,
        rating=quote.rating,
        risk_multiplier=quote.risk_multiplier,
        used_default_terms=quote.used_default_terms,
    )


def _policy_response(policy: InsurancePolicy) -> PolicyResponse:
    return PolicyResponse(
        policy_id=str(policy.id),
        policy_number=policy.policy_number,
        application_id=policy.application_id,
        provider_id=policy.provider_id,
        coverage_type=policy.coverage_type,
        premium_amount=policy.premium_amount,
        coverage_amount=policy.coverage_amount,
        yearly_premium=policy.yearly_premium,
        start_date=policy.start_date.isoformat(),
        end_date=policy.end_date.isoformat(),
        status=policy.status,
    )


def _parse_uuid(value: str, label: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")


def _claim_response(claim: InsuranceClaim) -> ClaimResponse:
    return ClaimResponse(
        claim_id=str(claim.id),
        claim_number=claim.claim_number,
        policy_id=str(claim.policy_id),
        provider_id=claim.provider_id,
        claim_type=claim.claim_type,
        claim_amount=claim.claim_amount,
        status=claim.status,
        description=claim.description,
        documents=claim.documents or [],
        payout_amount=claim.payout_amount,
        rejection_reason=claim.rejection_reason,
        submitted_at=claim.submitted_at.isoformat(),
        processed_at=claim.processed_at.isoformat() if claim.processed_at else None,
        paid_at=claim.paid_at.isoformat() if claim.paid_at else None,
    )


@router.get("/insurance/catalog", response_model=InsuranceCatalogResponse)
def get_catalog(config: InsuranceConfig = Depends(get_insurance_config)):
    """Coverage types with their base rates and the providers offering them"""
    coverage_types = [
        CoverageTypeInfo(id=coverage, base_rate_percent=round(rate * 100, 2))
        for coverage, rate in config.coverage_base_rates.items()
    ]
    providers = [
        ProviderInfo(
            id=provider_id,
            name=terms.name,
            rating=terms.rating,
            response_time_minutes=terms.response_time_minutes,
            supported_coverage_types=sorted(terms.supported_coverage_types, key=lambda c: c.value),
        )
        for provider_id, terms in config.providers.items()
    ]
    return InsuranceCatalogResponse(coverage_types=coverage_types, providers=providers)


@router.post("/insurance/quotes", response_model=InsuranceQuotesResponse)
def create_quotes(
    request_body: InsuranceQuoteRequest,
    db: Session = Depends(get_db),
    config: InsuranceConfig = Depends(get_insurance_config),
):
    """
    Quote every provider offering the coverage type, cheapest first.

    Volume discounts use each provider's policy count for the current month.
    """
    policy_repo = PolicyRepository(db)
    quotes = get_insurance_quotes(
        request_body.coverage_type,
        request_body.risk_profile.to_domain(),
        policy_counter=policy_repo.count_monthly_policies,
        config=config,
    )

    for quote in quotes:
        insurance_quote_counter.labels(provider_id=quote.provider_id, coverage_type=quote.coverage_type).inc()

    return InsuranceQuotesResponse(
        coverage_type=request_body.coverage_type,
        quotes=[_quote_schema(q) for q in quotes],
        total_quotes=len(quotes),
    )


@router.post("/insurance/policies", response_model=PolicyResponse)
def create_policy(
    request_body: PolicyRequest,
    request: Request,
    db: Session = Depends(get_db),
    config: InsuranceConfig = Depends(get_insurance_config),
):
    """
    Issue a policy priced from the chosen provider's current quote.

    The policy runs from today for whole years covering the loan tenure.
    """
    request_id = get_request_id(request)
    terms, _ = provider_terms(request_body.provider_id, config)
    if request_body.coverage_type not in terms.supported_coverage_types:
        raise HTTPException(
            status_code=422,
            detail=f"{request_body.provider_id} does not offer {request_body.coverage_type.value} cover",
        )

    profile = request_body.risk_profile.to_domain()
    policy_repo = PolicyRepository(db)

    try:
        quote = build_quote(
            request_body.provider_id,
            request_body.coverage_type,
            profile,
            policy_repo.count_monthly_policies(request_body.provider_id),
            config,
        )
        db_policy = policy_repo.create_policy(
            application_id=request_body.application_id,
            quote=quote,
            loan_amount=profile.loan_amount,
            tenure_months=profile.loan_tenure_months,
            customer_id=request_body.customer_id,
        )
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    insurance_policy_counter.labels(provider_id=quote.provider_id).inc()
    logging.info(
        "Insurance policy issued",
        extra={
            "request_id": request_id,
            "step": "policy_issued",
            "provider_id": quote.provider_id,
            "policy_number": db_policy.policy_number,
            "premium": quote.premium,
            "used_default_terms": quote.used_default_terms,
        },
    )
    return _policy_response(db_policy)


@router.get("/insurance/policies/{policy_id}", response_model=PolicyResponse)
def get_policy(policy_id: str, db: Session = Depends(get_db)):
    policy = PolicyRepository(db).get_policy_by_id(_parse_uuid(policy_id, "policy"))
    if not policy:
        raise HTTPException(status_code=404, detail="Policy not found")

    return _policy_response(policy)


@router.post("/insurance/claims", response_model=ClaimResponse)
def submit_claim(request_body: ClaimRequest, request: Request, db: Session = Depends(get_db)):
    """
    File a claim against an active policy.

    The claim starts PENDING with a CLM- reference. Unknown policies are 404,
    lapsed or cancelled ones 409.
    """
    request_id = get_request_id(request)
    policy = PolicyRepository(db).get_policy_by_id(_parse_uuid(request_body.policy_id, "policy"))
    if not policy:
        raise HTTPException(status_code=404, detail="Policy not found")

    try:
        ensure_claimable(policy.status)
    except PolicyNotActiveError as e:
        raise HTTPException(status_code=409, detail=str(e))

    try:
        db_claim = ClaimRepository(db).create_claim(
            policy=policy,
            claim_type=request_body.claim_type.value,
            claim_amount=request_body.claim_amount,
            description=request_body.description,
            documents=request_body.documents,
        )
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    insurance_claim_counter.labels(provider_id=db_claim.provider_id, outcome="submitted").inc()
    logging.info(
        "Insurance claim submitted",
        extra={
            "request_id": request_id,
            "step": "claim_submitted",
            "policy_number": policy.policy_number,
            "claim_number": db_claim.claim_number,
            "claim_amount": db_claim.claim_amount,
        },
    )
    return _claim_response(db_claim)


@router.get("/insurance/claims", response_model=ClaimListResponse)
def list_claims(
    policy_id: str = Query(..., description="Policy the claims were filed against"),
    status: Optional[ClaimStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """Claims on a policy, most recently submitted first"""
    claims = ClaimRepository(db).find_claims(
        policy_id=_parse_uuid(policy_id, "policy"),
        status=status.value if status else None,
    )
    return ClaimListResponse(
        policy_id=policy_id,
        claims=[_claim_response(c) for c in claims],
        total_claims=len(claims),
    )


@router.get("/insurance/claims/{claim_id}", response_model=ClaimResponse)
def get_claim(claim_id: str, db: Session = Depends(get_db)):
    claim = ClaimRepository(db).get_claim_by_id(_parse_uuid(claim_id, "claim"))
    if not claim:
        raise HTTPException(status_code=404, detail="Claim not found")

    return _claim_response(claim)


@router.put("/insurance/claims/{claim_id}", response_model=ClaimResponse)
def process_claim(
    claim_id: str,
    request_body: ClaimDecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Record the provider's decision on a pending claim.

    Approved claims are paid out (the requested payout, else the claimed
    amount); rejected claims keep the reason. Decided claims are 409.
    """
    request_id = get_request_id(request)
    claim_repo = ClaimRepository(db)
    claim = claim_repo.get_claim_by_id(_parse_uuid(claim_id, "claim"))
    if not claim:
        raise HTTPException(status_code=404, detail="Claim not found")

    try:
        decision = decide_claim(
            claim.status,
            claim.claim_amount,
            approved=request_body.approved,
            payout_amount=request_body.payout_amount,
            rejection_reason=request_body.rejection_reason,
        )
    except InvalidClaimTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    try:
        claim_repo.apply_decision(claim, decision)
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    outcome = "paid" if decision.status is ClaimStatus.PAID else "rejected"
    insurance_claim_counter.labels(provider_id=claim.provider_id, outcome=outcome).inc()
    if decision.payout_amount:
        insurance_claim_payout_counter.labels(provider_id=claim.provider_id).inc(decision.payout_amount)
    logging.info(
        "Insurance claim processed",
        extra={
            "request_id": request_id,
            "step": "claim_processed",
            "claim_number": claim.claim_number,
            "status": decision.status.value,
            "payout_amount": decision.payout_amount,
        },
    )
    return _claim_response(claim)

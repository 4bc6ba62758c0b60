"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache
from typing import List

from fastapi import Request

from fin5_gateway.config import settings
from fin5_gateway.domain.commission import DEFAULT_COMMISSION_CONFIG, CommissionConfig
from fin5_gateway.domain.eligibility import DEFAULT_LENDERS
from fin5_gateway.domain.insurance import DEFAULT_INSURANCE_CONFIG, InsuranceConfig
from fin5_gateway.domain.models import LenderRule
from fin5_gateway.infrastructure.clients.verification import VerificationClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_verification_client() -> VerificationClient:
    """Provide identity/bureau verification client instance"""
    return VerificationClient()


@lru_cache
def get_commission_config() -> CommissionConfig:
    """Rate tables with environment overrides applied, built once"""
    return DEFAULT_COMMISSION_CONFIG.with_overrides(
        lender_rates=settings.lender_commission_rates,
        dealer_shares=settings.dealer_plan_shares,
        default_rate=settings.default_commission_rate,
        dealer_processing_fee_rate=settings.dealer_processing_fee_rate,
        platform_processing_fee_rate=settings.platform_processing_fee_rate,
        gst_rate=settings.gst_rate,
    )


@lru_cache
def get_insurance_config() -> InsuranceConfig:
    """Coverage rates and provider terms with environment overrides applied, built once"""
    return DEFAULT_INSURANCE_CONFIG.with_overrides(
        coverage_base_rates=settings.coverage_base_rates,
        provider_overrides=settings.insurance_provider_overrides,
    )


def get_lenders() -> List[LenderRule]:
    """Lender directory used for eligibility checks"""
    return list(DEFAULT_LENDERS)

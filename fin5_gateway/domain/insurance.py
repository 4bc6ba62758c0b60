"""Insurance pricing engine - risk-adjusted premiums and multi-provider quotes"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from fin5_gateway.domain.models import (
    CoverageType,
    EmploymentType,
    InsuranceQuote,
    InsuranceRiskProfile,
    PremiumCalculation,
)
from fin5_gateway.domain.validation import round_half_up, to_number

logger = logging.getLogger(__name__)

MIN_RISK_MULTIPLIER = 0.5
MAX_RISK_MULTIPLIER = 2.0

# Read-only count of a provider's policies created since the start of the month
PolicyCounter = Callable[[str], int]


@dataclass(frozen=True)
class ProviderTerms:
    name: str
    commission_rate: float
    supported_coverage_types: frozenset
    min_premium: float
    max_coverage: float
    response_time_minutes: int
    rating: float = 4.0


ALL_COVERAGE = frozenset(CoverageType)

DEFAULT_PROVIDER_TERMS = ProviderTerms(
    name="Default Provider",
    commission_rate=0.20,
    supported_coverage_types=ALL_COVERAGE,
    min_premium=1000,
    max_coverage=2_500_000,
    response_time_minutes=60,
)

COVERAGE_TERMS: Dict[CoverageType, List[str]] = {
    CoverageType.LOAN_PROTECTION: [
        "Covers loan amount in case of death or permanent disability",
        "Waiting period of 30 days for natural death",
        "No waiting period for accidental death",
        "Coverage valid for entire loan tenure",
    ],
    CoverageType.JOB_LOSS: [
        "Covers EMIs for up to 12 months during unemployment",
        "Waiting period of 90 days from policy start",
        "Requires proof of involuntary job loss",
        "Maximum coverage period of 12 months",
    ],
    CoverageType.CRITICAL_ILLNESS: [
        "Covers 37 critical illnesses as per standard definition",
        "Waiting period of 90 days",
        "Lump sum payout on diagnosis",
        "Coverage amount up to loan amount",
    ],
    CoverageType.ASSET_PROTECTION: [
        "Covers vehicle damage due to accident or theft",
        "Includes roadside assistance",
        "Covers repair costs up to vehicle value",
        "24/7 customer support",
    ],
}


@dataclass(frozen=True)
class InsuranceConfig:
    providers: Mapping[str, ProviderTerms] = field(
        default_factory=lambda: {
            "ICICI_LOMBARD": ProviderTerms(
                name="ICICI Lombard",
                commission_rate=0.20,
                supported_coverage_types=ALL_COVERAGE,
                min_premium=1000,
                max_coverage=5_000_000,
                response_time_minutes=30,
                rating=4.5,
            ),
            "HDFC_ERGO": ProviderTerms(
                name="HDFC Ergo",
                commission_rate=0.18,
                supported_coverage_types=frozenset(
                    {CoverageType.LOAN_PROTECTION, CoverageType.JOB_LOSS, CoverageType.ASSET_PROTECTION}
                ),
                min_premium=800,
                max_coverage=3_000_000,
                response_time_minutes=45,
                rating=4.3,
            ),
            "BAJAJ_ALLIANZ": ProviderTerms(
                name="Bajaj Allianz",
                commission_rate=0.22,
                supported_coverage_types=frozenset(
                    {CoverageType.LOAN_PROTECTION, CoverageType.CRITICAL_ILLNESS, CoverageType.ASSET_PROTECTION}
                ),
                min_premium=1200,
                max_coverage=4_000_000,
                response_time_minutes=60,
                rating=4.2,
            ),
            "TATA_AIG": ProviderTerms(
                name="Tata AIG",
                commission_rate=0.25,
                supported_coverage_types=frozenset(
                    {CoverageType.LOAN_PROTECTION, CoverageType.JOB_LOSS, CoverageType.CRITICAL_ILLNESS}
                ),
                min_premium=1500,
                max_coverage=2_500_000,
                response_time_minutes=90,
                rating=4.0,
            ),
        }
    )
    coverage_base_rates: Mapping[CoverageType, float] = field(
        default_factory=lambda: {
            CoverageType.LOAN_PROTECTION: 0.025,
            CoverageType.JOB_LOSS: 0.015,
            CoverageType.CRITICAL_ILLNESS: 0.020,
            CoverageType.ASSET_PROTECTION: 0.030,
        }
    )
    default_base_rate: float = 0.025
    # Premium-to-coverage ratio used to derive the implied coverage of a premium
    coverage_cap_rate: float = 0.025
    # (monthly policies, discount factor), highest threshold first
    volume_discount_tiers: Tuple[Tuple[int, float], ...] = ((1000, 0.8), (500, 0.85), (100, 0.9))

    def with_overrides(
        self,
        coverage_base_rates: Optional[Mapping[str, float]] = None,
        provider_overrides: Optional[Mapping[str, Mapping[str, float]]] = None,
    ) -> "InsuranceConfig":
        """Copy with base rates and provider min_premium/max_coverage/commission_rate overridden"""
        rates = dict(self.coverage_base_rates)
        for coverage_type, rate in (coverage_base_rates or {}).items():
            rates[CoverageType(coverage_type)] = rate

        providers = dict(self.providers)
        for provider_id, values in (provider_overrides or {}).items():
            base = providers.get(provider_id, DEFAULT_PROVIDER_TERMS)
            allowed = {k: v for k, v in values.items() if k in ("min_premium", "max_coverage", "commission_rate")}
            providers[provider_id] = replace(base, **allowed)

        return replace(self, coverage_base_rates=rates, providers=providers)


DEFAULT_INSURANCE_CONFIG = InsuranceConfig()


def calculate_risk_multiplier(profile: InsuranceRiskProfile) -> float:
    """
    Multiply independent risk factors into one premium multiplier.

    - Credit score: 750+ x0.7, 650+ x0.9, 550+ x1.1, else x1.3
    - Employment: salaried x0.9, self-employed x1.1, other x1.2
    - Age: <30 x0.9, <50 x1.0, else x1.2
    - Income: above 1L x0.8, above 50k x0.9, else x1.1
    - Existing EMIs above 50% of income x1.3, above 30% x1.1

    Clamped to [0.5, 2.0].
    """
    credit_score = to_number(profile.credit_score)
    income = to_number(profile.monthly_income)
    age = to_number(profile.age)
    emis = to_number(profile.existing_emis)
    employment = EmploymentType.parse(profile.employment_type)

    multiplier = 1.0

    if credit_score >= 750:
        multiplier *= 0.7
    elif credit_score >= 650:
        multiplier *= 0.9
    elif credit_score >= 550:
        multiplier *= 1.1
    else:
        multiplier *= 1.3

    if employment == EmploymentType.SALARIED:
        multiplier *= 0.9
    elif employment == EmploymentType.SELF_EMPLOYED:
        multiplier *= 1.1
    else:
        multiplier *= 1.2

    if age < 30:
        multiplier *= 0.9
    elif age < 50:
        multiplier *= 1.0
    else:
        multiplier *= 1.2

    if income > 100_000:
        multiplier *= 0.8
    elif income > 50_000:
        multiplier *= 0.9
    else:
        multiplier *= 1.1

    if emis > income * 0.5:
        multiplier *= 1.3
    elif emis > income * 0.3:
        multiplier *= 1.1

    return max(MIN_RISK_MULTIPLIER, min(MAX_RISK_MULTIPLIER, multiplier))


def volume_discount(monthly_policy_count: int, config: InsuranceConfig = DEFAULT_INSURANCE_CONFIG) -> float:
    count = to_number(monthly_policy_count)
    for threshold, discount in sorted(config.volume_discount_tiers, reverse=True):
        if count >= threshold:
            return discount
    return 1.0


def base_premium_rate(coverage_type: CoverageType | str, config: InsuranceConfig = DEFAULT_INSURANCE_CONFIG) -> Tuple[float, bool]:
    """Returns: (rate, used_default_rate)"""
    try:
        return config.coverage_base_rates[CoverageType(coverage_type)], False
    except (ValueError, KeyError):
        logger.warning(
            "Unknown coverage type, using default base rate",
            extra={"coverage_type": str(coverage_type), "default_rate": config.default_base_rate},
        )
        return config.default_base_rate, True


def provider_terms(provider_id: str, config: InsuranceConfig = DEFAULT_INSURANCE_CONFIG) -> Tuple[ProviderTerms, bool]:
    """Returns: (terms, used_default_terms)"""
    terms = config.providers.get(provider_id)
    if terms is not None:
        return terms, False
    logger.warning("Unknown insurance provider, pricing with default terms", extra={"provider_id": provider_id})
    return DEFAULT_PROVIDER_TERMS, True


def calculate_premium(
    provider_id: str,
    coverage_type: CoverageType | str,
    profile: InsuranceRiskProfile,
    monthly_policy_count: int = 0,
    config: InsuranceConfig = DEFAULT_INSURANCE_CONFIG,
) -> PremiumCalculation:
    """
    Price one provider's cover for a borrower.

    premium = loan x base rate x risk multiplier x volume discount, raised to
    the provider's minimum premium. If the loan exceeds the coverage that
    premium implies (capped at the provider's max coverage), the premium is
    recomputed on the capped coverage, never below the minimum premium.
    """
    terms, used_default_terms = provider_terms(provider_id, config)
    rate, used_default_rate = base_premium_rate(coverage_type, config)
    loan_amount = to_number(profile.loan_amount)

    base_premium = loan_amount * rate
    risk_multiplier = calculate_risk_multiplier(profile)
    discount = volume_discount(monthly_policy_count, config)

    premium = max(base_premium * risk_multiplier * discount, terms.min_premium)

    max_coverage = min(premium / config.coverage_cap_rate, terms.max_coverage)
    if loan_amount > max_coverage:
        premium = max(max_coverage * config.coverage_cap_rate * risk_multiplier * discount, terms.min_premium)

    return PremiumCalculation(
        premium=round_half_up(premium),
        base_premium=base_premium,
        risk_multiplier=risk_multiplier,
        volume_discount=discount,
        used_default_terms=used_default_terms,
        used_default_rate=used_default_rate,
    )


def build_quote(
    provider_id: str,
    coverage_type: CoverageType | str,
    profile: InsuranceRiskProfile,
    monthly_policy_count: int = 0,
    config: InsuranceConfig = DEFAULT_INSURANCE_CONFIG,
) -> InsuranceQuote:
    terms, _ = provider_terms(provider_id, config)
    calculation = calculate_premium(provider_id, coverage_type, profile, monthly_policy_count, config)
    coverage_value = coverage_type.value if isinstance(coverage_type, CoverageType) else str(coverage_type)
    try:
        coverage_terms = COVERAGE_TERMS[CoverageType(coverage_value)]
    except ValueError:
        coverage_terms = []

    return InsuranceQuote(
        provider_id=provider_id,
        provider_name=terms.name,
        coverage_type=coverage_value,
        premium=calculation.premium,
        coverage=min(to_number(profile.loan_amount), terms.max_coverage),
        commission=calculation.premium * terms.commission_rate,
        terms=list(coverage_terms),
        response_time_minutes=terms.response_time_minutes,
        rating=terms.rating,
        risk_multiplier=calculation.risk_multiplier,
        used_default_terms=calculation.used_default_terms,
    )


def get_insurance_quotes(
    coverage_type: CoverageType | str,
    profile: InsuranceRiskProfile,
    policy_counter: Optional[PolicyCounter] = None,
    config: InsuranceConfig = DEFAULT_INSURANCE_CONFIG,
) -> List[InsuranceQuote]:
    """
    Quote every provider that supports the coverage type, cheapest first.

    policy_counter supplies each provider's policy count for the current
    month (volume discount); without one no discount applies. A coverage
    type no provider offers yields no quotes.
    """
    try:
        coverage = CoverageType(coverage_type)
    except ValueError:
        logger.warning("Unknown coverage type, no provider offers it", extra={"coverage_type": str(coverage_type)})
        return []

    quotes = []
    for provider_id, terms in config.providers.items():
        if coverage not in terms.supported_coverage_types:
            continue
        count = policy_counter(provider_id) if policy_counter else 0
        quotes.append(build_quote(provider_id, coverage, profile, count, config))

    return sorted(quotes, key=lambda q: q.premium)


def policy_term_years(tenure_months: int) -> int:
    """Policies run for whole years covering the loan tenure (at least one)"""
    months = to_number(tenure_months)
    return max(1, math.ceil(months / 12))


def yearly_premium(premium: float, tenure_months: int) -> float:
    """Premium spread over the policy years"""
    return round(to_number(premium) / policy_term_years(tenure_months), 2)

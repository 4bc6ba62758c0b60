"""Unit tests for insurance pricing"""

import pytest
from dataclasses import replace
from fin5_gateway.domain.insurance import (
    DEFAULT_INSURANCE_CONFIG,
    MAX_RISK_MULTIPLIER,
    MIN_RISK_MULTIPLIER,
    build_quote,
    calculate_premium,
    calculate_risk_multiplier,
    get_insurance_quotes,
    policy_term_years,
    volume_discount,
    yearly_premium,
)
from fin5_gateway.domain.models import CoverageType, EmploymentType, InsuranceRiskProfile


def test_prime_profile_hits_multiplier_floor(prime_insurance_profile):
    # 0.7 x 0.9 x 0.9 x 0.8 = 0.4536
    assert calculate_risk_multiplier(prime_insurance_profile) == MIN_RISK_MULTIPLIER


def test_risky_profile_hits_multiplier_ceiling():
    profile = InsuranceRiskProfile(
        credit_score=500,
        employment_type=EmploymentType.OTHER,
        monthly_income=20_000,
        age=55,
        existing_emis=15_000,
    )

    # 1.3 x 1.2 x 1.2 x 1.1 x 1.3 = 2.68
    assert calculate_risk_multiplier(profile) == MAX_RISK_MULTIPLIER


def test_average_profile_multiplier():
    profile = InsuranceRiskProfile(
        credit_score=700,
        employment_type=EmploymentType.SELF_EMPLOYED,
        monthly_income=60_000,
        age=40,
        existing_emis=20_000,
    )

    # 0.9 x 1.1 x 1.0 x 0.9 x 1.1
    assert calculate_risk_multiplier(profile) == pytest.approx(0.9801)


@pytest.mark.parametrize(
    "count,discount",
    [(0, 1.0), (99, 1.0), (100, 0.9), (499, 0.9), (500, 0.85), (999, 0.85), (1000, 0.8), (5000, 0.8)],
)
def test_volume_discount_tiers(count, discount):
    assert volume_discount(count) == discount


def test_premium_recomputed_on_capped_coverage(prime_insurance_profile):
    # 5L x 2.5% x 0.5 = 6250 implies 2.5L coverage < 5L loan, so price on 2.5L
    calculation = calculate_premium("ICICI_LOMBARD", CoverageType.LOAN_PROTECTION, prime_insurance_profile)

    assert calculation.base_premium == pytest.approx(12_500)
    assert calculation.premium == 3_125
    assert calculation.used_default_terms is False


def test_small_loan_pays_provider_minimum(prime_insurance_profile):
    profile = replace(prime_insurance_profile, loan_amount=10_000)

    for provider_id, terms in DEFAULT_INSURANCE_CONFIG.providers.items():
        calculation = calculate_premium(provider_id, CoverageType.LOAN_PROTECTION, profile)
        assert calculation.premium == terms.min_premium


def test_premium_never_below_minimum_after_recompute():
    profile = InsuranceRiskProfile(credit_score=800, employment_type="SALARIED", monthly_income=200_000, age=25)

    for loan in (50_000, 100_000, 1_000_000, 10_000_000):
        calculation = calculate_premium("TATA_AIG", "job_loss", replace(profile, loan_amount=loan), 2_000)
        assert calculation.premium >= 1_500


def test_volume_discount_lowers_premium():
    profile = InsuranceRiskProfile(
        credit_score=700, employment_type="SALARIED", monthly_income=60_000, age=35, loan_amount=200_000
    )

    full = calculate_premium("ICICI_LOMBARD", CoverageType.ASSET_PROTECTION, profile, monthly_policy_count=0)
    discounted = calculate_premium("ICICI_LOMBARD", CoverageType.ASSET_PROTECTION, profile, monthly_policy_count=1000)

    assert discounted.volume_discount == 0.8
    assert discounted.premium < full.premium


def test_unknown_provider_priced_with_default_terms(prime_insurance_profile, caplog):
    calculation = calculate_premium("NEW_INSURER", CoverageType.LOAN_PROTECTION, prime_insurance_profile)

    assert calculation.used_default_terms is True
    assert calculation.premium >= 1_000
    assert "Unknown insurance provider" in caplog.text


def test_unknown_coverage_type_uses_default_rate(prime_insurance_profile):
    calculation = calculate_premium("ICICI_LOMBARD", "pet_cover", prime_insurance_profile)

    assert calculation.used_default_rate is True
    assert calculation.base_premium == pytest.approx(12_500)


def test_unknown_coverage_type_has_no_quotes(prime_insurance_profile, caplog):
    with caplog.at_level("WARNING"):
        quotes = get_insurance_quotes("pet_cover", prime_insurance_profile)

    assert quotes == []
    assert "Unknown coverage type" in caplog.text


def test_quotes_cover_supporting_providers_cheapest_first(prime_insurance_profile):
    quotes = get_insurance_quotes(CoverageType.JOB_LOSS, prime_insurance_profile)

    assert {q.provider_id for q in quotes} == {"ICICI_LOMBARD", "HDFC_ERGO", "TATA_AIG"}
    premiums = [q.premium for q in quotes]
    assert premiums == sorted(premiums)


def test_quotes_use_policy_counter(prime_insurance_profile):
    counts = {"ICICI_LOMBARD": 1_000}
    seen = []

    def counter(provider_id):
        seen.append(provider_id)
        return counts.get(provider_id, 0)

    quotes = get_insurance_quotes(CoverageType.CRITICAL_ILLNESS, prime_insurance_profile, policy_counter=counter)

    assert sorted(seen) == ["BAJAJ_ALLIANZ", "ICICI_LOMBARD", "TATA_AIG"]
    assert len(quotes) == 3


def test_quote_fields(prime_insurance_profile):
    quote = build_quote("HDFC_ERGO", CoverageType.ASSET_PROTECTION, prime_insurance_profile)

    assert quote.provider_name == "HDFC Ergo"
    assert quote.coverage_type == "asset_protection"
    assert quote.coverage == 500_000
    assert quote.commission == pytest.approx(quote.premium * 0.18)
    assert "Includes roadside assistance" in quote.terms
    assert quote.rating == 4.3


def test_coverage_capped_at_provider_maximum(prime_insurance_profile):
    quote = build_quote("TATA_AIG", CoverageType.LOAN_PROTECTION, replace(prime_insurance_profile, loan_amount=4_000_000))

    assert quote.coverage == 2_500_000


def test_provider_overrides():
    config = DEFAULT_INSURANCE_CONFIG.with_overrides(
        coverage_base_rates={"job_loss": 0.01},
        provider_overrides={"TATA_AIG": {"min_premium": 2_000, "rating": 1.0}},
    )

    assert config.coverage_base_rates[CoverageType.JOB_LOSS] == 0.01
    assert config.providers["TATA_AIG"].min_premium == 2_000
    assert config.providers["TATA_AIG"].rating == 4.0


@pytest.mark.parametrize("tenure,years", [(0, 1), (12, 1), (13, 2), (36, 3), (60, 5)])
def test_policy_term_years(tenure, years):
    assert policy_term_years(tenure) == years


def test_yearly_premium():
    assert yearly_premium(3_000, 36) == 1_000
    assert yearly_premium(1_000, 0) == 1_000

"""Unit tests for EMI affordability and EMI calculation"""

import pytest
from fin5_gateway.domain.affordability import (
    EXCEEDS_MAX_WARNING,
    LOW_DISPOSABLE_WARNING,
    calculate_emi,
    calculate_emi_affordability,
)


def test_affordable_emi_has_no_warning():
    result = calculate_emi_affordability(
        monthly_income=60_000, existing_emis=5_000, monthly_expenses=15_000, requested_emi=10_000
    )

    assert result.recommended_max_emi == 24_000
    assert result.total_emi_after_loan == 15_000
    assert result.disposable_income == 40_000
    assert result.disposable_income_after_loan == 30_000
    assert result.is_affordable is True
    assert result.warning is None


def test_emi_above_recommended_max():
    result = calculate_emi_affordability(monthly_income=30_000, existing_emis=10_000, requested_emi=5_000)

    assert result.recommended_max_emi == 12_000
    assert result.is_affordable is False
    assert result.warning == EXCEEDS_MAX_WARNING


def test_low_disposable_income_after_loan():
    result = calculate_emi_affordability(
        monthly_income=60_000, existing_emis=0, monthly_expenses=40_000, requested_emi=15_000
    )

    assert result.disposable_income_after_loan == 5_000
    assert result.is_affordable is False
    assert result.warning == LOW_DISPOSABLE_WARNING


def test_exactly_at_limits_is_affordable():
    result = calculate_emi_affordability(
        monthly_income=50_000, existing_emis=10_000, monthly_expenses=20_000, requested_emi=10_000
    )

    assert result.total_emi_after_loan == result.recommended_max_emi == 20_000
    assert result.disposable_income_after_loan == 10_000
    assert result.is_affordable is True


def test_recommended_max_rounds_half_up():
    # 0.4 x 1001.25 = 400.5
    assert calculate_emi_affordability(monthly_income=1001.25).recommended_max_emi == 401


def test_missing_inputs_default_to_zero():
    result = calculate_emi_affordability(monthly_income=None, existing_emis="abc")

    assert result.recommended_max_emi == 0
    assert result.total_emi_after_loan == 0
    assert result.is_affordable is False
    assert result.warning == LOW_DISPOSABLE_WARNING


def test_calculate_emi_reducing_balance():
    assert calculate_emi(500_000, 9.5, 60) == pytest.approx(10_501, rel=1e-3)


def test_calculate_emi_zero_rate_splits_principal():
    assert calculate_emi(120_000, 0, 12) == 10_000


def test_calculate_emi_degenerate_inputs():
    assert calculate_emi(0, 9.5, 60) == 0
    assert calculate_emi(100_000, 9.5, 0) == 0

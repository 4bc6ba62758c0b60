"""Unit tests for the commission engine"""

import pytest
from datetime import date, datetime
from fin5_gateway.domain.commission import (
    DEFAULT_COMMISSION_CONFIG,
    apply_gst,
    calculate_commission,
    calculate_payout,
    calculate_performance_bonus,
    lender_display_name,
    lookup_commission_rate,
)
from fin5_gateway.domain.eligibility import DEFAULT_LENDERS
from fin5_gateway.domain.models import DealerPlan


def test_hdfc_basic_plan_split():
    """₹8.5L via HDFC on the basic plan"""
    split = calculate_commission(850_000, "hdfc", "basic")

    assert split.commission_rate == 0.015
    assert split.used_default_rate is False
    assert split.total_commission == pytest.approx(12_750)
    assert split.dealer_commission_gross == pytest.approx(3_187.5)
    assert split.platform_commission_gross == pytest.approx(9_562.5)
    assert split.dealer_commission == pytest.approx(3_123.75)
    assert split.platform_commission == pytest.approx(9_084.375)


@pytest.mark.parametrize("plan", list(DealerPlan))
def test_net_plus_fee_equals_gross(plan):
    split = calculate_commission(1_234_567, "bajaj", plan)

    assert split.dealer_commission + split.dealer_processing_fee == pytest.approx(split.dealer_commission_gross)
    assert split.platform_commission + split.platform_processing_fee == pytest.approx(split.platform_commission_gross)
    assert split.dealer_commission_gross + split.platform_commission_gross == pytest.approx(split.total_commission)


def test_higher_plans_earn_larger_dealer_share():
    basic = calculate_commission(1_000_000, "sbi", DealerPlan.BASIC)
    professional = calculate_commission(1_000_000, "sbi", DealerPlan.PROFESSIONAL)
    enterprise = calculate_commission(1_000_000, "sbi", DealerPlan.ENTERPRISE)

    assert basic.dealer_commission <= professional.dealer_commission <= enterprise.dealer_commission


def test_nbfc_rates_are_used():
    assert lookup_commission_rate("chola") == (0.021, False)
    assert lookup_commission_rate("HDFC") == (0.015, False)


def test_eligibility_lender_ids_map_to_rate_table():
    for lender in DEFAULT_LENDERS:
        _, used_default_rate = lookup_commission_rate(lender.lender_id)
        assert used_default_rate is False, lender.lender_id

    assert lookup_commission_rate("hdfc-bank") == (0.015, False)
    assert lookup_commission_rate("bajaj-finserv") == lookup_commission_rate("bajaj")
    assert lender_display_name("mahindra-finance") == "Mahindra Finance"


def test_unknown_lender_falls_back_to_default_rate(caplog):
    split = calculate_commission(1_000_000, "unknown-lender", DealerPlan.BASIC)

    assert split.commission_rate == 0.015
    assert split.used_default_rate is True
    assert "Unknown lender id" in caplog.text


def test_invalid_dealer_plan_rejected():
    with pytest.raises(ValueError):
        calculate_commission(1_000_000, "hdfc", "platinum")


def test_non_numeric_loan_amount_gives_zero_commission():
    split = calculate_commission("abc", "hdfc", DealerPlan.BASIC)

    assert split.total_commission == 0
    assert split.dealer_commission == 0


def test_overrides_replace_rates_without_touching_defaults():
    config = DEFAULT_COMMISSION_CONFIG.with_overrides(
        lender_rates={"hdfc": 0.02, "bajaj": 0.03, "yes": 0.01},
        dealer_shares={"basic": 0.4},
        gst_rate=0.12,
        default_rate=None,
    )

    assert config.bank_rates["hdfc"] == 0.02
    assert config.nbfc_rates["bajaj"] == 0.03
    assert config.bank_rates["yes"] == 0.01
    assert config.dealer_shares[DealerPlan.BASIC] == 0.4
    assert config.gst_rate == 0.12
    assert config.default_rate == 0.015
    assert DEFAULT_COMMISSION_CONFIG.bank_rates["hdfc"] == 0.015

    split = calculate_commission(1_000_000, "hdfc", DealerPlan.BASIC, config)
    assert split.total_commission == pytest.approx(20_000)
    assert split.dealer_commission_gross == pytest.approx(8_000)


def test_apply_gst_on_platform_share():
    gst = apply_gst(9_084.375)

    assert gst.gst_amount == pytest.approx(1_635.1875)
    assert gst.net_platform_commission == pytest.approx(7_449.1875)


def test_performance_bonus_sums_tiers():
    bonus = calculate_performance_bonus(
        applications=120, approval_rate=0.87, total_loan_amount=6_000_000, base_commission=1_000
    )

    assert bonus.bonus_rate == pytest.approx(0.15)
    assert bonus.bonus_amount == pytest.approx(150)
    assert bonus.total_amount == pytest.approx(1_150)


def test_performance_bonus_top_tiers():
    bonus = calculate_performance_bonus(
        applications=250, approval_rate=0.95, total_loan_amount=12_000_000, base_commission=10_000
    )

    assert bonus.bonus_rate == pytest.approx(0.28)
    assert bonus.total_amount == pytest.approx(12_800)


def test_no_bonus_below_every_threshold():
    bonus = calculate_performance_bonus(
        applications=49, approval_rate=0.79, total_loan_amount=999_999, base_commission=5_000
    )

    assert bonus.bonus_rate == 0
    assert bonus.total_amount == 5_000


@pytest.mark.parametrize(
    "plan,frequency,expected",
    [
        (DealerPlan.BASIC, "monthly", date(2024, 2, 2)),
        (DealerPlan.PROFESSIONAL, "bi-weekly", date(2024, 2, 1)),
        (DealerPlan.ENTERPRISE, "weekly", date(2024, 1, 31)),
    ],
)
def test_payout_schedule(plan, frequency, expected):
    payout = calculate_payout("dealer-1", plan, 3_123.75, now=datetime(2024, 1, 30, 10, 0))

    assert payout.frequency == frequency
    assert payout.estimated_payout_date == expected
    assert payout.amount == 3_123.75


def test_lender_display_name():
    assert lender_display_name("hdfc") == "HDFC Bank"
    assert lender_display_name("yes") == "YES"

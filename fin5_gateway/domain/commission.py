"""Commission engine - lender commission, platform/dealer split, performance bonuses and payouts"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

from fin5_gateway.domain.models import (
    CommissionSplit,
    DealerPlan,
    GstBreakdown,
    Payout,
    PerformanceBonus,
)
from fin5_gateway.domain.validation import to_number

logger = logging.getLogger(__name__)

# (threshold, bonus rate), highest threshold first
BonusTiers = Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class PayoutSchedule:
    frequency: str
    processing_days: int


@dataclass(frozen=True)
class CommissionConfig:
    """Rate tables and plan tiers; built once at startup and passed to each calculation"""

    bank_rates: Mapping[str, float] = field(
        default_factory=lambda: {
            "hdfc": 0.015,
            "icici": 0.014,
            "sbi": 0.012,
            "axis": 0.016,
            "kotak": 0.017,
        }
    )
    nbfc_rates: Mapping[str, float] = field(
        default_factory=lambda: {
            "bajaj": 0.020,
            "tata": 0.018,
            "mahindra": 0.019,
            "chola": 0.021,
            "fullerton": 0.022,
        }
    )
    default_rate: float = 0.015
    dealer_shares: Mapping[DealerPlan, float] = field(
        default_factory=lambda: {
            DealerPlan.BASIC: 0.25,
            DealerPlan.PROFESSIONAL: 0.30,
            DealerPlan.ENTERPRISE: 0.35,
        }
    )
    dealer_processing_fee_rate: float = 0.02
    platform_processing_fee_rate: float = 0.05
    gst_rate: float = 0.18
    application_bonus_tiers: BonusTiers = ((200, 0.10), (100, 0.05), (50, 0.02))
    approval_rate_bonus_tiers: BonusTiers = ((0.90, 0.08), (0.85, 0.05), (0.80, 0.03))
    loan_volume_bonus_tiers: BonusTiers = ((10_000_000, 0.10), (5_000_000, 0.05), (1_000_000, 0.02))
    payout_schedules: Mapping[DealerPlan, PayoutSchedule] = field(
        default_factory=lambda: {
            DealerPlan.BASIC: PayoutSchedule("monthly", 3),
            DealerPlan.PROFESSIONAL: PayoutSchedule("bi-weekly", 2),
            DealerPlan.ENTERPRISE: PayoutSchedule("weekly", 1),
        }
    )

    def with_overrides(
        self,
        lender_rates: Optional[Mapping[str, float]] = None,
        dealer_shares: Optional[Mapping[str, float]] = None,
        **scalars: Optional[float],
    ) -> "CommissionConfig":
        """
        Return a copy with rate overrides applied.

        Lender ids already in the NBFC table update it; any other id is
        treated as a bank. Scalar overrides that are None are ignored.
        """
        bank_rates = dict(self.bank_rates)
        nbfc_rates = dict(self.nbfc_rates)
        for lender_id, rate in (lender_rates or {}).items():
            key = lender_key(lender_id)
            if key in nbfc_rates:
                nbfc_rates[key] = rate
            else:
                bank_rates[key] = rate

        shares = dict(self.dealer_shares)
        for plan, share in (dealer_shares or {}).items():
            shares[DealerPlan(plan)] = share

        changes = {name: value for name, value in scalars.items() if value is not None}
        return replace(self, bank_rates=bank_rates, nbfc_rates=nbfc_rates, dealer_shares=shares, **changes)


DEFAULT_COMMISSION_CONFIG = CommissionConfig()

LENDER_NAMES: Dict[str, str] = {
    "hdfc": "HDFC Bank",
    "icici": "ICICI Bank",
    "sbi": "State Bank of India",
    "axis": "Axis Bank",
    "kotak": "Kotak Mahindra Bank",
    "bajaj": "Bajaj Finance",
    "tata": "Tata Capital",
    "mahindra": "Mahindra Finance",
    "chola": "Cholamandalam Finance",
    "fullerton": "Fullerton India",
}

# Lender ids used by the eligibility catalogue
LENDER_ALIASES: Dict[str, str] = {
    "hdfc-bank": "hdfc",
    "icici-bank": "icici",
    "bajaj-finserv": "bajaj",
    "mahindra-finance": "mahindra",
}


def lender_key(lender_id: str) -> str:
    key = (lender_id or "").strip().lower()
    return LENDER_ALIASES.get(key, key)


def lender_display_name(lender_id: str) -> str:
    return LENDER_NAMES.get(lender_key(lender_id), lender_id.upper())


def lookup_commission_rate(lender_id: str, config: CommissionConfig = DEFAULT_COMMISSION_CONFIG) -> Tuple[float, bool]:
    """
    Find the lender's commission rate: banks first, then NBFCs.

    Returns: (rate, used_default_rate)
    """
    key = lender_key(lender_id)
    if key in config.bank_rates:
        return config.bank_rates[key], False
    if key in config.nbfc_rates:
        return config.nbfc_rates[key], False

    logger.warning(
        "Unknown lender id, using default commission rate",
        extra={"lender_id": lender_id, "default_rate": config.default_rate},
    )
    return config.default_rate, True


def calculate_commission(
    loan_amount: Any,
    lender_id: str,
    dealer_plan: DealerPlan | str,
    config: CommissionConfig = DEFAULT_COMMISSION_CONFIG,
) -> CommissionSplit:
    """
    Split the lender's commission between platform and dealer.

    Steps:
    1. Look up lender rate (default 1.5% when unknown, flagged)
    2. Total commission = loan amount x rate
    3. Dealer gross = total x plan share; platform gross = remainder
    4. Each share pays its own processing fee (dealer 2%, platform 5%)

    GST is not applied here; see apply_gst.

    Example:
        ₹8,50,000 via HDFC (1.5%) on basic plan (25%)
        total 12750 -> dealer 3187.5 gross / 3123.75 net,
        platform 9562.5 gross / 9084.375 net
    """
    plan = DealerPlan(dealer_plan)
    amount = to_number(loan_amount)
    rate, used_default_rate = lookup_commission_rate(lender_id, config)

    total_commission = amount * rate
    dealer_gross = total_commission * config.dealer_shares[plan]
    platform_gross = total_commission - dealer_gross

    dealer_fee = dealer_gross * config.dealer_processing_fee_rate
    platform_fee = platform_gross * config.platform_processing_fee_rate

    return CommissionSplit(
        loan_amount=amount,
        lender_id=lender_id,
        dealer_plan=plan,
        commission_rate=rate,
        used_default_rate=used_default_rate,
        total_commission=total_commission,
        dealer_commission_gross=dealer_gross,
        platform_commission_gross=platform_gross,
        dealer_processing_fee=dealer_fee,
        platform_processing_fee=platform_fee,
        dealer_commission=dealer_gross - dealer_fee,
        platform_commission=platform_gross - platform_fee,
    )


def apply_gst(platform_commission: Any, rate: float = DEFAULT_COMMISSION_CONFIG.gst_rate) -> GstBreakdown:
    """GST is charged on the platform's share only"""
    amount = to_number(platform_commission)
    gst_amount = amount * rate
    return GstBreakdown(gst_amount=gst_amount, net_platform_commission=amount - gst_amount)


def _tier_bonus(value: float, tiers: BonusTiers) -> float:
    """Bonus of the highest threshold met, 0 when none is"""
    for threshold, bonus in sorted(tiers, reverse=True):
        if value >= threshold:
            return bonus
    return 0.0


def calculate_performance_bonus(
    applications: Any,
    approval_rate: Any,
    total_loan_amount: Any,
    base_commission: Any,
    config: CommissionConfig = DEFAULT_COMMISSION_CONFIG,
) -> PerformanceBonus:
    """
    Monthly performance bonus on a dealer's commission.

    Three independent tables (application count, approval rate, loan
    volume) each contribute the bonus of their highest tier met; the summed
    rate is applied to the base commission.
    """
    bonus_rate = (
        _tier_bonus(to_number(applications), config.application_bonus_tiers)
        + _tier_bonus(to_number(approval_rate), config.approval_rate_bonus_tiers)
        + _tier_bonus(to_number(total_loan_amount), config.loan_volume_bonus_tiers)
    )
    base = to_number(base_commission)

    return PerformanceBonus(
        bonus_rate=bonus_rate,
        bonus_amount=base * bonus_rate,
        total_amount=base * (1 + bonus_rate),
    )


def calculate_payout(
    dealer_id: str,
    dealer_plan: DealerPlan | str,
    amount: Any,
    now: Optional[datetime] = None,
    config: CommissionConfig = DEFAULT_COMMISSION_CONFIG,
) -> Payout:
    """Estimate when a dealer's commission is paid out under their plan's schedule"""
    plan = DealerPlan(dealer_plan)
    schedule = config.payout_schedules[plan]
    now = now or datetime.utcnow()

    return Payout(
        dealer_id=dealer_id,
        dealer_plan=plan,
        amount=to_number(amount),
        frequency=schedule.frequency,
        processing_days=schedule.processing_days,
        estimated_payout_date=(now + timedelta(days=schedule.processing_days)).date(),
    )

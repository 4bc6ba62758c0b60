"""Prometheus metrics for prescreening outcomes, commissions, insurance and verification calls"""

from prometheus_client import Counter, Histogram

# Prescreening metrics
prescreening_counter = Counter(
    "fin5_prescreening_total",
    "Prescreening checks completed",
    ["check", "outcome"],  # risk_profile: Low|Medium|High, custom_score: Gold|Silver|Bronze|High Risk
)

eligible_lender_histogram = Histogram(
    "fin5_eligible_lenders",
    "Number of lenders eligible per prescreening",
    buckets=[0, 1, 2, 3, 5, 10],
)

# Commission metrics
commission_amount_counter = Counter(
    "fin5_commission_rupees_total",
    "Total commission calculated, by share",
    ["dealer_plan", "share"],  # share: dealer | platform
)

default_rate_fallback_counter = Counter(
    "fin5_commission_default_rate_total",
    "Commission calculations for lenders missing from the rate table",
)

# Insurance metrics
insurance_quote_counter = Counter(
    "fin5_insurance_quotes_total",
    "Insurance quotes issued",
    ["provider_id", "coverage_type"],
)

insurance_policy_counter = Counter(
    "fin5_insurance_policies_total",
    "Insurance policies issued",
    ["provider_id"],
)

insurance_claim_counter = Counter(
    "fin5_insurance_claims_total",
    "Insurance claims by lifecycle step",
    ["provider_id", "outcome"],  # outcome: submitted | paid | rejected
)

insurance_claim_payout_counter = Counter(
    "fin5_insurance_claim_payout_rupees_total",
    "Total paid out on approved claims",
    ["provider_id"],
)

# Verification provider metrics
verification_failures_counter = Counter(
    "verification_failures_total",
    "Failed identity/bureau verification calls",
    ["operation"],
)

verification_latency_histogram = Histogram(
    "verification_latency_seconds",
    "Identity/bureau verification response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_commission(dealer_plan: str, dealer_commission: float, platform_commission: float, used_default_rate: bool) -> None:
    """Record commission totals per plan and flag default-rate fallbacks"""
    commission_amount_counter.labels(dealer_plan=dealer_plan, share="dealer").inc(max(dealer_commission, 0))
    commission_amount_counter.labels(dealer_plan=dealer_plan, share="platform").inc(max(platform_commission, 0))
    if used_default_rate:
        default_rate_fallback_counter.inc()

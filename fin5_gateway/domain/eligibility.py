"""Lender eligibility filtering for prescreening"""

from typing import Iterable, List

from fin5_gateway.domain.models import BorrowerProfile, EmploymentType, LenderRule, VehicleRequest
from fin5_gateway.domain.validation import to_number

ALL_EMPLOYMENT = frozenset(
    {EmploymentType.SALARIED, EmploymentType.SELF_EMPLOYED, EmploymentType.BUSINESS_OWNER}
)

# Lender directory used when the caller does not supply its own
DEFAULT_LENDERS: List[LenderRule] = [
    LenderRule(
        lender_id="hdfc-bank",
        name="HDFC Bank",
        min_credit_score=650,
        min_loan_amount=100_000,
        max_loan_amount=5_000_000,
        supported_vehicle_types=frozenset({"sedan", "suv", "hatchback", "muv"}),
        supported_employment_types=ALL_EMPLOYMENT,
    ),
    LenderRule(
        lender_id="icici-bank",
        name="ICICI Bank",
        min_credit_score=680,
        min_loan_amount=150_000,
        max_loan_amount=3_000_000,
        supported_vehicle_types=frozenset({"sedan", "suv", "hatchback"}),
        supported_employment_types=frozenset({EmploymentType.SALARIED, EmploymentType.SELF_EMPLOYED}),
    ),
    LenderRule(
        lender_id="bajaj-finserv",
        name="Bajaj Finserv",
        min_credit_score=600,
        min_loan_amount=50_000,
        max_loan_amount=2_000_000,
        supported_vehicle_types=frozenset({"sedan", "suv", "hatchback", "muv", "commercial"}),
        supported_employment_types=ALL_EMPLOYMENT | {EmploymentType.FREELANCER},
    ),
    LenderRule(
        lender_id="mahindra-finance",
        name="Mahindra Finance",
        min_credit_score=580,
        min_loan_amount=75_000,
        max_loan_amount=1_500_000,
        supported_vehicle_types=frozenset({"suv", "muv", "commercial"}),
        supported_employment_types=ALL_EMPLOYMENT,
    ),
    LenderRule(
        lender_id="sbi",
        name="State Bank of India",
        min_credit_score=620,
        min_loan_amount=100_000,
        max_loan_amount=4_000_000,
        supported_vehicle_types=frozenset({"sedan", "suv", "hatchback", "muv"}),
        supported_employment_types=ALL_EMPLOYMENT,
    ),
]


def lender_rejection_reasons(
    lender: LenderRule,
    borrower: BorrowerProfile,
    vehicle: VehicleRequest,
    requested_amount: float,
) -> List[str]:
    """
    List every lender constraint the application fails.

    An empty list means the lender accepts the application.
    """
    reasons = []
    requested = to_number(requested_amount)
    credit_score = to_number(borrower.credit_score)

    if not lender.is_active:
        reasons.append("lender_inactive")
    if credit_score < lender.min_credit_score:
        reasons.append("credit_score_below_minimum")
    if requested < lender.min_loan_amount:
        reasons.append("loan_amount_below_minimum")
    elif requested > lender.max_loan_amount:
        reasons.append("loan_amount_above_maximum")
    if vehicle.vehicle_type not in lender.supported_vehicle_types:
        reasons.append("vehicle_type_not_supported")
    if EmploymentType.parse(borrower.employment_type) not in lender.supported_employment_types:
        reasons.append("employment_type_not_supported")

    return reasons


def is_lender_eligible(
    lender: LenderRule,
    borrower: BorrowerProfile,
    vehicle: VehicleRequest,
    requested_amount: float,
) -> bool:
    return not lender_rejection_reasons(lender, borrower, vehicle, requested_amount)


def filter_eligible_lenders(
    lenders: Iterable[LenderRule],
    borrower: BorrowerProfile,
    vehicle: VehicleRequest,
    requested_amount: float,
) -> List[LenderRule]:
    """
    Narrow the lender list to those whose constraints all match.

    Input order is preserved and every qualifying lender is returned once.
    An empty list is a normal outcome, not an error.
    """
    return [
        lender
        for lender in lenders
        if is_lender_eligible(lender, borrower, vehicle, requested_amount)
    ]

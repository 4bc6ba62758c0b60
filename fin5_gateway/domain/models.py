"""Domain models - immutable dataclasses representing prescreening, commission and insurance entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from fin5_gateway.domain.exceptions import InvalidLenderRuleError


class EmploymentType(str, Enum):
    SALARIED = "SALARIED"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    BUSINESS_OWNER = "BUSINESS_OWNER"
    FREELANCER = "FREELANCER"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EmploymentType":
        """Normalise 'self-employed', 'Self Employed', 'SELF_EMPLOYED' to the same member"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.OTHER
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


class InflowTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"

    @classmethod
    def parse(cls, value: Optional[str]) -> "InflowTrend":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.STABLE
        key = value.strip().lower()
        aliases = {"rising": cls.INCREASING, "falling": cls.DECREASING}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return cls.STABLE


class DealerPlan(str, Enum):
    BASIC = "basic"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class CoverageType(str, Enum):
    LOAN_PROTECTION = "loan_protection"
    JOB_LOSS = "job_loss"
    CRITICAL_ILLNESS = "critical_illness"
    ASSET_PROTECTION = "asset_protection"


class ClaimType(str, Enum):
    DEATH = "death"
    DISABILITY = "disability"
    JOB_LOSS = "job_loss"
    ASSET_DAMAGE = "asset_damage"


class ClaimStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAID = "PAID"


@dataclass(frozen=True)
class BorrowerProfile:
    """Applicant as seen by prescreening"""

    credit_score: int = 0
    employment_type: EmploymentType = EmploymentType.OTHER
    monthly_income: float = 0
    existing_emis: float = 0
    pan: str = ""
    aadhaar: str = ""
    years_of_experience: float = 0
    age: int = 0


@dataclass(frozen=True)
class VehicleRequest:
    """Vehicle and loan the applicant is asking for"""

    make: str = ""
    model: str = ""
    category: str = ""
    loan_amount: float = 0
    tenure_months: int = 0
    down_payment: float = 0

    @property
    def vehicle_type(self) -> str:
        """Category used for lender matching; falls back to make when no category is given"""
        return (self.category or self.make).strip().lower()


@dataclass(frozen=True)
class BankSignal:
    """Bank statement analysis summary"""

    monthly_inflow: float = 0
    monthly_outflow: float = 0
    average_balance: float = 0
    bounced_cheques: int = 0
    inflow_trend: InflowTrend = InflowTrend.STABLE
    salary_credits: int = 0
    emi_debits: int = 0


@dataclass(frozen=True)
class LenderRule:
    """Lending constraints of a bank or NBFC"""

    lender_id: str
    name: str
    min_credit_score: int
    min_loan_amount: float
    max_loan_amount: float
    supported_vehicle_types: FrozenSet[str]
    supported_employment_types: FrozenSet[EmploymentType]
    is_active: bool = True
    max_credit_score: int = 900

    def __post_init__(self) -> None:
        if self.min_credit_score > self.max_credit_score:
            raise InvalidLenderRuleError(
                f"{self.lender_id}: min_credit_score {self.min_credit_score} "
                f"exceeds max_credit_score {self.max_credit_score}"
            )
        if self.min_loan_amount > self.max_loan_amount:
            raise InvalidLenderRuleError(
                f"{self.lender_id}: min_loan_amount {self.min_loan_amount} "
                f"exceeds max_loan_amount {self.max_loan_amount}"
            )
        # Normalise set contents so membership checks are case-insensitive
        object.__setattr__(
            self, "supported_vehicle_types", frozenset(v.lower() for v in self.supported_vehicle_types)
        )
        object.__setattr__(
            self,
            "supported_employment_types",
            frozenset(EmploymentType.parse(e) for e in self.supported_employment_types),
        )


@dataclass(frozen=True)
class IdentityVerification:
    """PAN/Aadhaar verification outcome from the identity provider"""

    pan_valid: bool
    aadhaar_valid: bool
    pan_name: Optional[str] = None
    pan_status: Optional[str] = None
    aadhaar_name: Optional[str] = None
    aadhaar_status: Optional[str] = None


@dataclass(frozen=True)
class CreditReport:
    """Bureau report summary"""

    credit_score: int
    bureau_name: str = "Unknown"
    total_accounts: int = 0
    active_accounts: int = 0
    overdue_accounts: int = 0


@dataclass(frozen=True)
class ApplicationHistory:
    past_defaults: int = 0
    past_rejections: int = 0


@dataclass(frozen=True)
class ScoreComponent:
    points: float
    max_points: float


@dataclass(frozen=True)
class ScoreBreakdown:
    """Named sub-scores; total is their sum clamped to [0, 100]"""

    components: Dict[str, ScoreComponent] = field(default_factory=dict)

    @property
    def total(self) -> float:
        raw = sum(c.points for c in self.components.values())
        return max(0, min(100, raw))

    @property
    def max_total(self) -> float:
        return sum(c.max_points for c in self.components.values())

    def as_dict(self) -> Dict[str, float]:
        return {name: c.points for name, c in self.components.items()}


@dataclass(frozen=True)
class RiskProfileResult:
    score: float
    category: str  # Low | Medium | High
    breakdown: ScoreBreakdown
    emi_to_income_ratio: float


@dataclass(frozen=True)
class AffordabilityFlags:
    """The parts of an affordability check the custom credit score uses"""

    is_affordable: bool = False
    disposable_income: float = 0


@dataclass(frozen=True)
class EmiAffordability:
    monthly_income: float
    existing_emis: float
    monthly_expenses: float
    requested_emi: float
    recommended_max_emi: int
    total_emi_after_loan: float
    disposable_income: float
    disposable_income_after_loan: float
    is_affordable: bool
    warning: Optional[str] = None

    @property
    def flags(self) -> AffordabilityFlags:
        return AffordabilityFlags(is_affordable=self.is_affordable, disposable_income=self.disposable_income)


@dataclass(frozen=True)
class CustomCreditScore:
    score: float
    category: str  # Gold | Silver | Bronze | High Risk
    breakdown: ScoreBreakdown


@dataclass(frozen=True)
class CommissionSplit:
    """Lender commission split between platform and dealer, net of processing fees (pre-GST)"""

    loan_amount: float
    lender_id: str
    dealer_plan: DealerPlan
    commission_rate: float
    used_default_rate: bool
    total_commission: float
    dealer_commission_gross: float
    platform_commission_gross: float
    dealer_processing_fee: float
    platform_processing_fee: float
    dealer_commission: float
    platform_commission: float


@dataclass(frozen=True)
class GstBreakdown:
    gst_amount: float
    net_platform_commission: float


@dataclass(frozen=True)
class PerformanceBonus:
    bonus_rate: float
    bonus_amount: float
    total_amount: float


@dataclass(frozen=True)
class Payout:
    dealer_id: str
    dealer_plan: DealerPlan
    amount: float
    frequency: str
    processing_days: int
    estimated_payout_date: date


@dataclass(frozen=True)
class InsuranceRiskProfile:
    """Borrower attributes used for insurance pricing"""

    credit_score: int = 0
    employment_type: EmploymentType = EmploymentType.OTHER
    monthly_income: float = 0
    loan_amount: float = 0
    loan_tenure_months: int = 0
    age: int = 0
    existing_emis: float = 0
    vehicle_type: str = ""


@dataclass(frozen=True)
class PremiumCalculation:
    premium: int
    base_premium: float
    risk_multiplier: float
    volume_discount: float
    used_default_terms: bool = False
    used_default_rate: bool = False


@dataclass(frozen=True)
class InsuranceQuote:
    provider_id: str
    provider_name: str
    coverage_type: str
    premium: int
    coverage: float
    commission: float
    terms: List[str]
    response_time_minutes: int
    rating: float
    risk_multiplier: float
    used_default_terms: bool = False


@dataclass(frozen=True)
class PrescreeningReport:
    """Aggregate of all independent prescreening checks"""

    identity: IdentityVerification
    credit_report: CreditReport
    bank_signal: BankSignal
    affordability: EmiAffordability
    risk_profile: RiskProfileResult
    custom_score: CustomCreditScore
    eligible_lenders: List[LenderRule]

"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, Field

from fin5_gateway.domain.models import (
    ApplicationHistory,
    BankSignal,
    BorrowerProfile,
    ClaimStatus,
    ClaimType,
    CoverageType,
    DealerPlan,
    EmploymentType,
    InflowTrend,
    InsuranceRiskProfile,
    VehicleRequest,
)
from fin5_gateway.domain.validation import to_number, to_optional_number, to_text

# Numeric inputs never fail validation: absent or non-numeric values become 0
Numeric = Annotated[float, BeforeValidator(to_number)]
OptionalNumeric = Annotated[Optional[float], BeforeValidator(to_optional_number)]
# null text fields read as empty
Text = Annotated[str, BeforeValidator(to_text)]


class BorrowerSchema(BaseModel):
    pan: Text = ""
    aadhaar: Text = ""
    credit_score: Numeric = 0
    employment_type: Text = "OTHER"
    monthly_income: Numeric = 0
    existing_emis: Numeric = 0
    years_of_experience: Numeric = 0
    age: Numeric = 0

    def to_domain(self) -> BorrowerProfile:
        return BorrowerProfile(
            pan=self.pan,
            aadhaar=self.aadhaar,
            credit_score=int(self.credit_score),
            employment_type=EmploymentType.parse(self.employment_type),
            monthly_income=self.monthly_income,
            existing_emis=self.existing_emis,
            years_of_experience=self.years_of_experience,
            age=int(self.age),
        )


class VehicleSchema(BaseModel):
    make: Text = ""
    model: Text = ""
    category: Text = ""
    loan_amount: Numeric = 0
    tenure_months: Numeric = 0
    down_payment: Numeric = 0

    def to_domain(self) -> VehicleRequest:
        return VehicleRequest(
            make=self.make,
            model=self.model,
            category=self.category,
            loan_amount=self.loan_amount,
            tenure_months=int(self.tenure_months),
            down_payment=self.down_payment,
        )


class BankSignalSchema(BaseModel):
    monthly_inflow: Numeric = 0
    monthly_outflow: Numeric = 0
    average_balance: Numeric = 0
    bounced_cheques: Numeric = 0
    inflow_trend: Text = "stable"
    salary_credits: Numeric = 0
    emi_debits: Numeric = 0

    def to_domain(self) -> BankSignal:
        return BankSignal(
            monthly_inflow=self.monthly_inflow,
            monthly_outflow=self.monthly_outflow,
            average_balance=self.average_balance,
            bounced_cheques=int(self.bounced_cheques),
            inflow_trend=InflowTrend.parse(self.inflow_trend),
            salary_credits=int(self.salary_credits),
            emi_debits=int(self.emi_debits),
        )


class BankAccountSchema(BaseModel):
    consent_handle: Text = ""
    account_id: Text = ""
    account_number: Text = ""


class ApplicationHistorySchema(BaseModel):
    past_defaults: Numeric = 0
    past_rejections: Numeric = 0

    def to_domain(self) -> ApplicationHistory:
        return ApplicationHistory(past_defaults=int(self.past_defaults), past_rejections=int(self.past_rejections))


# --- Prescreening ---


class EligibleLendersRequest(BaseModel):
    borrower: BorrowerSchema
    vehicle: VehicleSchema
    requested_amount: Numeric = 0


class LenderSchema(BaseModel):
    lender_id: str
    name: str
    min_credit_score: int
    min_loan_amount: float
    max_loan_amount: float
    supported_vehicle_types: List[str]
    supported_employment_types: List[str]


class EligibleLendersResponse(BaseModel):
    eligible_lenders: List[LenderSchema]
    rejected: Dict[str, List[str]] = {}


class RiskProfileRequest(BaseModel):
    borrower: BorrowerSchema
    bank_statement: BankSignalSchema = Field(default_factory=BankSignalSchema)


class RiskProfileResponse(BaseModel):
    risk_score: float
    risk_category: str
    emi_to_income_ratio: float
    breakdown: Dict[str, float]
    pan_valid: bool
    aadhaar_valid: bool


class EmiAffordabilityRequest(BaseModel):
    monthly_income: Numeric = 0
    existing_emis: Numeric = 0
    monthly_expenses: Numeric = 0
    requested_emi: Numeric = 0


class EmiAffordabilityResponse(BaseModel):
    recommended_max_emi: int
    is_affordable: bool
    disposable_income: float
    total_emi_after_loan: float
    disposable_income_after_loan: float
    warning: Optional[str] = None


class AffordabilityFlagsSchema(BaseModel):
    is_affordable: bool = False
    disposable_income: Numeric = 0


class CustomCreditScoreRequest(BaseModel):
    borrower: BorrowerSchema
    account: BankAccountSchema = Field(default_factory=BankAccountSchema)
    emi_affordability: Optional[AffordabilityFlagsSchema] = None
    application_history: ApplicationHistorySchema = Field(default_factory=ApplicationHistorySchema)


class CustomCreditScoreResponse(BaseModel):
    custom_score: float
    category: str
    breakdown: Dict[str, float]
    bureau_score: int
    bureau_name: str


class PrescreeningReportRequest(BaseModel):
    borrower: BorrowerSchema
    vehicle: VehicleSchema
    account: BankAccountSchema = Field(default_factory=BankAccountSchema)
    monthly_expenses: Numeric = 0
    requested_emi: OptionalNumeric = None
    application_history: ApplicationHistorySchema = Field(default_factory=ApplicationHistorySchema)


class PrescreeningReportResponse(BaseModel):
    risk_profile: RiskProfileResponse
    custom_credit_score: CustomCreditScoreResponse
    emi_affordability: EmiAffordabilityResponse
    eligible_lenders: List[LenderSchema]


# --- Commission ---


class MonthlyStatsSchema(BaseModel):
    applications: Numeric = 0
    approval_rate: Numeric = 0
    total_loan_amount: Numeric = 0


class VehicleDetailsSchema(BaseModel):
    make: str = ""
    model: str = ""
    variant: str = ""


class CommissionRequest(BaseModel):
    """Request body for POST /v1/commission/calculate"""

    loan_amount: Annotated[float, BeforeValidator(to_number), Field(gt=0)]
    lender_id: str = Field(..., min_length=1)
    dealer_id: str = Field(..., min_length=1)
    dealer_plan: DealerPlan
    application_id: str = Field(..., min_length=1)
    customer_name: str = ""
    vehicle_details: Optional[VehicleDetailsSchema] = None
    monthly_stats: Optional[MonthlyStatsSchema] = None


class CommissionBreakdownSchema(BaseModel):
    total_commission: float
    dealer_commission_gross: float
    platform_commission_gross: float
    dealer_processing_fee: float
    platform_processing_fee: float
    dealer_commission: float
    platform_commission: float
    gst_amount: float
    net_platform_commission: float


class PerformanceBonusSchema(BaseModel):
    bonus_rate: float
    bonus_amount: float
    total_dealer_commission: float


class PayoutSchema(BaseModel):
    frequency: str
    processing_days: int
    estimated_payout_date: date


class CommissionResponse(BaseModel):
    """Response for POST /v1/commission/calculate"""

    record_id: str
    application_id: str
    dealer_id: str
    dealer_plan: DealerPlan
    lender_id: str
    lender_name: str
    loan_amount: float
    commission_rate: float
    used_default_rate: bool
    commission_breakdown: CommissionBreakdownSchema
    performance_bonus: PerformanceBonusSchema
    payout: PayoutSchema
    status: str


class CommissionHistoryItem(BaseModel):
    record_id: str
    application_id: str
    dealer_id: str
    lender_id: str
    loan_amount: float
    dealer_commission: float
    bonus_amount: float
    status: str
    created_at: str


class CommissionSummarySchema(BaseModel):
    total_records: int
    total_commission: float
    dealer_commission: float
    platform_commission: float
    gst_amount: float
    bonus_amount: float
    commission_by_status: Dict[str, float]


class CommissionHistoryResponse(BaseModel):
    dealer_id: Optional[str] = None
    lender_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    records: List[CommissionHistoryItem]
    summary: CommissionSummarySchema


# --- Insurance ---


class InsuranceRiskProfileSchema(BaseModel):
    credit_score: Numeric = 0
    employment_type: Text = "OTHER"
    monthly_income: Numeric = 0
    loan_amount: Numeric = 0
    loan_tenure: Numeric = 0
    age: Numeric = 0
    existing_emis: Numeric = 0
    vehicle_type: Text = ""

    def to_domain(self) -> InsuranceRiskProfile:
        return InsuranceRiskProfile(
            credit_score=int(self.credit_score),
            employment_type=EmploymentType.parse(self.employment_type),
            monthly_income=self.monthly_income,
            loan_amount=self.loan_amount,
            loan_tenure_months=int(self.loan_tenure),
            age=int(self.age),
            existing_emis=self.existing_emis,
            vehicle_type=self.vehicle_type,
        )


class InsuranceQuoteRequest(BaseModel):
    coverage_type: CoverageType
    risk_profile: InsuranceRiskProfileSchema


class InsuranceQuoteSchema(BaseModel):
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
    used_default_terms: bool


class InsuranceQuotesResponse(BaseModel):
    coverage_type: CoverageType
    quotes: List[InsuranceQuoteSchema]
    total_quotes: int


class CoverageTypeInfo(BaseModel):
    id: CoverageType
    base_rate_percent: float


class ProviderInfo(BaseModel):
    id: str
    name: str
    rating: float
    response_time_minutes: int
    supported_coverage_types: List[CoverageType]


class InsuranceCatalogResponse(BaseModel):
    coverage_types: List[CoverageTypeInfo]
    providers: List[ProviderInfo]


class PolicyRequest(BaseModel):
    application_id: str = Field(..., min_length=1)
    provider_id: str = Field(..., min_length=1)
    coverage_type: CoverageType
    risk_profile: InsuranceRiskProfileSchema
    customer_id: str = ""


class PolicyResponse(BaseModel):
    policy_id: str
    policy_number: str
    application_id: str
    provider_id: str
    coverage_type: str
    premium_amount: float
    coverage_amount: float
    yearly_premium: Optional[float] = None
    start_date: str
    end_date: str
    status: str


class ClaimRequest(BaseModel):
    """Request body for POST /v1/insurance/claims"""

    policy_id: str = Field(..., min_length=1)
    claim_type: ClaimType
    claim_amount: Annotated[float, BeforeValidator(to_number), Field(gt=0)]
    description: Text = ""
    documents: List[str] = []


class ClaimDecisionRequest(BaseModel):
    approved: bool
    payout_amount: OptionalNumeric = None
    rejection_reason: Optional[str] = None


class ClaimResponse(BaseModel):
    claim_id: str
    claim_number: str
    policy_id: str
    provider_id: str
    claim_type: str
    claim_amount: float
    status: ClaimStatus
    description: str
    documents: List[str]
    payout_amount: Optional[float] = None
    rejection_reason: Optional[str] = None
    submitted_at: str
    processed_at: Optional[str] = None
    paid_at: Optional[str] = None


class ClaimListResponse(BaseModel):
    policy_id: str
    claims: List[ClaimResponse]
    total_claims: int

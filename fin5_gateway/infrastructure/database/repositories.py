"""Data access layer for insurance policies, claims and commission records"""

import secrets
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from fin5_gateway.domain.claims import ClaimDecision
from fin5_gateway.domain.insurance import policy_term_years, yearly_premium
from fin5_gateway.domain.models import ClaimStatus, CommissionSplit, GstBreakdown, InsuranceQuote, PerformanceBonus
from fin5_gateway.infrastructure.database.models import CommissionRecord, InsuranceClaim, InsurancePolicy
from fin5_gateway.utils.date_utils import add_years, start_of_month


def generate_reference(prefix: str) -> str:
    """POL-1700000000000-3F9K2Q7ZB style reference"""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(5).upper()[:9]}"


class PolicyRepository:
    """Repository for insurance policies"""

    def __init__(self, db: Session):
        self.db = db

    def count_monthly_policies(self, provider_id: str, now: Optional[datetime] = None) -> int:
        """Policies created for a provider since the start of the current month"""
        month_start = start_of_month(now or datetime.utcnow())
        return (
            self.db.query(func.count(InsurancePolicy.id))
            .filter(InsurancePolicy.provider_id == provider_id)
            .filter(InsurancePolicy.created_at >= month_start)
            .scalar()
        ) or 0

    def create_policy(
        self,
        application_id: str,
        quote: InsuranceQuote,
        loan_amount: float,
        tenure_months: int,
        customer_id: str = "",
        now: Optional[datetime] = None,
    ) -> InsurancePolicy:
        """Persist a policy issued from a quote"""
        start = now or datetime.utcnow()
        db_policy = InsurancePolicy(
            application_id=application_id,
            provider_id=quote.provider_id,
            policy_number=generate_reference("POL"),
            coverage_type=quote.coverage_type,
            premium_amount=quote.premium,
            coverage_amount=quote.coverage,
            loan_amount=loan_amount,
            yearly_premium=yearly_premium(quote.premium, tenure_months),
            start_date=start,
            end_date=add_years(start, policy_term_years(tenure_months)),
            status="ACTIVE",
            customer_id=customer_id,
            auto_renewal=True,
            created_at=start,
        )
        self.db.add(db_policy)
        self.db.flush()  # Get ID without committing
        return db_policy

    def get_policy_by_id(self, policy_id: uuid.UUID) -> Optional[InsurancePolicy]:
        return self.db.query(InsurancePolicy).filter(InsurancePolicy.id == policy_id).first()


class ClaimRepository:
    """Repository for insurance claims"""

    def __init__(self, db: Session):
        self.db = db

    def create_claim(
        self,
        policy: InsurancePolicy,
        claim_type: str,
        claim_amount: float,
        description: str = "",
        documents: Optional[List[str]] = None,
        now: Optional[datetime] = None,
    ) -> InsuranceClaim:
        """Persist a new pending claim against a policy"""
        db_claim = InsuranceClaim(
            policy_id=policy.id,
            provider_id=policy.provider_id,
            claim_number=generate_reference("CLM"),
            claim_type=claim_type,
            claim_amount=claim_amount,
            status=ClaimStatus.PENDING.value,
            description=description,
            documents=list(documents or []),
            submitted_at=now or datetime.utcnow(),
        )
        self.db.add(db_claim)
        self.db.flush()
        return db_claim

    def get_claim_by_id(self, claim_id: uuid.UUID) -> Optional[InsuranceClaim]:
        return self.db.query(InsuranceClaim).filter(InsuranceClaim.id == claim_id).first()

    def find_claims(
        self,
        policy_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        limit: int = 50,
    ) -> List[InsuranceClaim]:
        """Claims matching the filters, most recently submitted first"""
        query = self.db.query(InsuranceClaim)
        if policy_id:
            query = query.filter(InsuranceClaim.policy_id == policy_id)
        if status:
            query = query.filter(InsuranceClaim.status == status.upper())
        return query.order_by(InsuranceClaim.submitted_at.desc()).limit(limit).all()

    def apply_decision(self, claim: InsuranceClaim, decision: ClaimDecision) -> InsuranceClaim:
        claim.status = decision.status.value
        claim.processed_at = decision.processed_at
        claim.payout_amount = decision.payout_amount
        claim.paid_at = decision.paid_at
        claim.rejection_reason = decision.rejection_reason
        self.db.flush()
        return claim


@dataclass
class MonthlyDealerStats:
    applications: int
    total_loan_amount: float


@dataclass
class CommissionTotals:
    record_count: int = 0
    total_commission: float = 0.0
    dealer_commission: float = 0.0
    platform_commission: float = 0.0
    gst_amount: float = 0.0
    bonus_amount: float = 0.0
    by_status: Dict[str, float] = field(default_factory=dict)


class CommissionRepository:
    """Repository for dealer commission records"""

    def __init__(self, db: Session):
        self.db = db

    def create_record(
        self,
        application_id: str,
        dealer_id: str,
        split: CommissionSplit,
        gst: GstBreakdown,
        bonus: PerformanceBonus,
        breakdown: Dict[str, Any],
    ) -> CommissionRecord:
        """Persist a calculated commission in pending state"""
        db_record = CommissionRecord(
            application_id=application_id,
            dealer_id=dealer_id,
            dealer_plan=split.dealer_plan.value,
            lender_id=split.lender_id,
            loan_amount=split.loan_amount,
            commission_rate=split.commission_rate,
            used_default_rate=split.used_default_rate,
            total_commission=split.total_commission,
            dealer_commission=split.dealer_commission,
            platform_commission=split.platform_commission,
            gst_amount=gst.gst_amount,
            bonus_rate=bonus.bonus_rate,
            bonus_amount=bonus.bonus_amount,
            status="pending",
            breakdown=breakdown,
        )
        self.db.add(db_record)
        self.db.flush()
        return db_record

    def _filtered(
        self,
        query,
        dealer_id: Optional[str] = None,
        lender_id: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        if dealer_id:
            query = query.filter(CommissionRecord.dealer_id == dealer_id)
        if lender_id:
            query = query.filter(CommissionRecord.lender_id == lender_id)
        if status:
            query = query.filter(CommissionRecord.status == status.lower())
        if start_date:
            query = query.filter(CommissionRecord.created_at >= datetime.combine(start_date, datetime.min.time()))
        if end_date:
            # end date is inclusive
            day_after = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
            query = query.filter(CommissionRecord.created_at < day_after)
        return query

    def find_records(self, limit: int = 50, **filters) -> List[CommissionRecord]:
        """
        Most recent commission records matching the filters, newest first.

        Filters: dealer_id, lender_id, status, start_date, end_date (each
        optional; created_at falls within the inclusive date range).
        """
        return (
            self._filtered(self.db.query(CommissionRecord), **filters)
            .order_by(CommissionRecord.created_at.desc())
            .limit(limit)
            .all()
        )

    def summarize(self, **filters) -> CommissionTotals:
        """Totals over every record matching the filters, ignoring any page limit"""
        rows = (
            self._filtered(
                self.db.query(
                    CommissionRecord.status,
                    func.count(CommissionRecord.id),
                    func.sum(CommissionRecord.total_commission),
                    func.sum(CommissionRecord.dealer_commission),
                    func.sum(CommissionRecord.platform_commission),
                    func.sum(CommissionRecord.gst_amount),
                    func.sum(CommissionRecord.bonus_amount),
                ),
                **filters,
            )
            .group_by(CommissionRecord.status)
            .all()
        )

        totals = CommissionTotals()
        for status, count, total, dealer, platform, gst, bonus in rows:
            totals.record_count += count or 0
            totals.total_commission += total or 0.0
            totals.dealer_commission += dealer or 0.0
            totals.platform_commission += platform or 0.0
            totals.gst_amount += gst or 0.0
            totals.bonus_amount += bonus or 0.0
            totals.by_status[status] = total or 0.0
        return totals

    def monthly_stats(self, dealer_id: str, now: Optional[datetime] = None) -> MonthlyDealerStats:
        """Applications and loan volume a dealer has sourced this month"""
        month_start = start_of_month(now or datetime.utcnow())
        count, volume = (
            self.db.query(func.count(CommissionRecord.id), func.sum(CommissionRecord.loan_amount))
            .filter(CommissionRecord.dealer_id == dealer_id)
            .filter(CommissionRecord.created_at >= month_start)
            .one()
        )
        return MonthlyDealerStats(applications=count or 0, total_loan_amount=volume or 0.0)

"""SQLAlchemy ORM models for insurance policies, claims and dealer commissions"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Float, DateTime, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class InsurancePolicy(Base):
    """Insurance policy bundled with a vehicle loan"""

    __tablename__ = "insurance_policy"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(Text, nullable=False, index=True)
    provider_id = Column(String(64), nullable=False, index=True)
    policy_number = Column(Text, nullable=False, unique=True)
    coverage_type = Column(String(32), nullable=False)
    premium_amount = Column(Float, nullable=False)
    coverage_amount = Column(Float, nullable=False)
    loan_amount = Column(Float, nullable=False)
    yearly_premium = Column(Float, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(16), nullable=False, default="ACTIVE")
    customer_id = Column(Text, nullable=False, default="")
    auto_renewal = Column(Boolean, nullable=False, default=True)
    # Naive UTC, compared against the start of the month for volume discounts
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class InsuranceClaim(Base):
    """Claim filed against an insurance policy"""

    __tablename__ = "insurance_claim"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    policy_id = Column(Uuid, ForeignKey("insurance_policy.id"), nullable=False, index=True)
    provider_id = Column(String(64), nullable=False, index=True)
    claim_number = Column(Text, nullable=False, unique=True)
    claim_type = Column(String(32), nullable=False)
    claim_amount = Column(Float, nullable=False)
    status = Column(String(16), nullable=False, default="PENDING", index=True)
    description = Column(Text, nullable=False, default="")
    documents = Column(JSON, nullable=True)
    payout_amount = Column(Float, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    processed_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)


class CommissionRecord(Base):
    """Commission calculated for a dealer-sourced loan"""

    __tablename__ = "commission_record"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(Text, nullable=False, index=True)
    dealer_id = Column(Text, nullable=False, index=True)
    dealer_plan = Column(String(16), nullable=False)
    lender_id = Column(Text, nullable=False)
    loan_amount = Column(Float, nullable=False)
    commission_rate = Column(Float, nullable=False)
    used_default_rate = Column(Boolean, nullable=False, default=False)
    total_commission = Column(Float, nullable=False)
    dealer_commission = Column(Float, nullable=False)
    platform_commission = Column(Float, nullable=False)
    gst_amount = Column(Float, nullable=False)
    bonus_rate = Column(Float, nullable=False, default=0.0)
    bonus_amount = Column(Float, nullable=False, default=0.0)
    status = Column(String(16), nullable=False, default="pending")
    breakdown = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

"""Pytest fixtures for testing"""

import os

# Must be set before the app modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fin5_gateway.api.dependencies import get_verification_client
from fin5_gateway.api.main import create_app
from fin5_gateway.domain.models import (
    BankSignal,
    BorrowerProfile,
    EmploymentType,
    IdentityVerification,
    InflowTrend,
    InsuranceRiskProfile,
    LenderRule,
    VehicleRequest,
)
from fin5_gateway.infrastructure.clients.verification import VerificationClient
from fin5_gateway.infrastructure.database.models import Base
from fin5_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Test client on the test database with verification in mock mode"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_verification_client] = lambda: VerificationClient(mock=True)
    return TestClient(app)


@pytest.fixture
def sedan_lender() -> LenderRule:
    return LenderRule(
        lender_id="test-bank",
        name="Test Bank",
        min_credit_score=650,
        min_loan_amount=100_000,
        max_loan_amount=5_000_000,
        supported_vehicle_types=frozenset({"sedan"}),
        supported_employment_types=frozenset({"salaried"}),
    )


@pytest.fixture
def salaried_borrower() -> BorrowerProfile:
    return BorrowerProfile(
        credit_score=760,
        employment_type=EmploymentType.SALARIED,
        monthly_income=120_000,
        existing_emis=0,
        pan="ABCDE1234F",
        aadhaar="123456789012",
        age=32,
    )


@pytest.fixture
def sedan() -> VehicleRequest:
    return VehicleRequest(make="Honda", model="City", category="sedan", loan_amount=600_000, tenure_months=60)


@pytest.fixture
def verified_identity() -> IdentityVerification:
    return IdentityVerification(pan_valid=True, aadhaar_valid=True)


@pytest.fixture
def clean_bank_signal() -> BankSignal:
    """No bounces, steady inflow above outflow"""
    return BankSignal(
        monthly_inflow=120_000,
        monthly_outflow=70_000,
        average_balance=200_000,
        bounced_cheques=0,
        inflow_trend=InflowTrend.STABLE,
    )


@pytest.fixture
def prime_insurance_profile() -> InsuranceRiskProfile:
    return InsuranceRiskProfile(
        credit_score=760,
        employment_type=EmploymentType.SALARIED,
        monthly_income=120_000,
        loan_amount=500_000,
        loan_tenure_months=36,
        age=28,
        existing_emis=0,
        vehicle_type="sedan",
    )

"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from debt_planner.api.main import create_app
from debt_planner.infrastructure.database.models import Base
from debt_planner.infrastructure.database.session import get_db
from debt_planner.domain.models import Debt


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
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def start_date() -> date:
    return date(2025, 1, 15)


@pytest.fixture
def sample_debts() -> list[Debt]:
    """Typical household mix: store card, medical bill, credit card"""
    return [
        Debt(
            id="store",
            name="Store Card",
            balance_cents=45000,  # $450
            apr=Decimal("24.99"),
            min_payment_cents=3500,
            category="credit_card",
        ),
        Debt(
            id="medical",
            name="Medical Bill",
            balance_cents=62000,  # $620
            apr=Decimal("0"),
            min_payment_cents=2500,
            category="medical",
        ),
        Debt(
            id="visa",
            name="Visa",
            balance_cents=180000,  # $1800
            apr=Decimal("22.49"),
            min_payment_cents=5500,
            category="credit_card",
        ),
    ]

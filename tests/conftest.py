"""Pytest fixtures for testing"""

import pytest
from typing import Generator
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from mca_servicing.api.main import create_app
from mca_servicing.api.dependencies import get_payment_webhook_client
from mca_servicing.infrastructure.database.models import Base
from mca_servicing.infrastructure.database.session import get_db
from mca_servicing.domain.models import PaybackFrequency, PaybackTerms


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
def webhook_client() -> MagicMock:
    """Payment webhook client that records events instead of sending them"""
    client = MagicMock()
    client.send_payback_event = AsyncMock(return_value=None)
    return client


@pytest.fixture
def client(db: Session, webhook_client: MagicMock) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_webhook_client] = lambda: webhook_client
    return TestClient(app)


@pytest.fixture
def weekday_terms() -> PaybackTerms:
    """Monday-Friday daily collection"""
    return PaybackTerms(frequency=PaybackFrequency.DAILY, payday_list=[1, 2, 3, 4, 5])


@pytest.fixture
def funding_id(client: TestClient) -> str:
    """Funding with $10,000 payback and $500 residual fees"""
    response = client.post(
        "/v1/fundings",
        json={
            "name": "Acme Bakery Advance",
            "merchant": "Acme Bakery LLC",
            "payback_amount_cents": 1_000_000,
            "residual_fee_amount_cents": 50_000,
        },
    )
    assert response.status_code == 201
    return response.json()["funding_id"]

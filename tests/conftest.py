"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cashflow_gateway.api.main import create_app
from cashflow_gateway.infrastructure.database.models import Base
from cashflow_gateway.infrastructure.database.session import get_db
from cashflow_gateway.domain.models import Bank, BankId, DirectedTransaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_bank(bank_id: str, *payment_types: str, name: str | None = None) -> Bank:
    return Bank(id=BankId(bank_id), name=name or f"Bank {bank_id}", payment_types=frozenset(payment_types))


def make_txn(debtor: str, creditor: str, amount: str) -> DirectedTransaction:
    return DirectedTransaction(debtor=BankId(debtor), creditor=BankId(creditor), amount=Decimal(amount))


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
def upi_banks() -> list[Bank]:
    """Three banks that all accept UPI"""
    return [
        make_bank("A", "UPI", name="Alpha Bank"),
        make_bank("B", "UPI", "WIRE", name="Beta Bank"),
        make_bank("C", "UPI", name="Gamma Bank"),
    ]


@pytest.fixture
def snapshot_payload() -> dict:
    """Request body: A owes 150 in total, spread over B and C, via chained debts"""
    return {
        "banks": [
            {"id": "A", "name": "Alpha Bank", "payment_types": ["UPI"]},
            {"id": "B", "name": "Beta Bank", "payment_types": ["UPI", "WIRE"]},
            {"id": "C", "name": "Gamma Bank", "payment_types": ["UPI"]},
        ],
        "transactions": [
            {"debtor": "A", "creditor": "B", "amount": "60"},
            {"debtor": "A", "creditor": "C", "amount": "90"},
            {"debtor": "C", "creditor": "B", "amount": "40"},
        ],
    }

"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_tracker.api.main import create_app
from finance_tracker.api.dependencies import get_identity_client
from finance_tracker.domain.exceptions import AuthenticationInvalidError
from finance_tracker.domain.models import Transaction, User
from finance_tracker.infrastructure.database.models import Base
from finance_tracker.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ALICE = User(id="user-alice", email="alice@example.com", name="Alice", picture="https://example.com/alice.png")
BOB = User(id="user-bob", email="bob@example.com", name="Bob", picture="https://example.com/bob.png")

ALICE_HEADERS = {"Authorization": "Bearer token-alice"}
BOB_HEADERS = {"Authorization": "Bearer token-bob"}


class FakeIdentityClient:
    """Identity provider stand-in keyed by token"""

    def __init__(self):
        self.users = {"token-alice": ALICE, "token-bob": BOB}

    async def get_user(self, token: str) -> User:
        if token not in self.users:
            raise AuthenticationInvalidError("Invalid or expired token")
        return self.users[token]


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
def app(db: Session):
    """FastAPI app wired to the test database and fake identity provider"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client] = FakeIdentityClient
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


def make_transaction(
    amount: str,
    txn_type: str = "expense",
    category: str = "Other",
    txn_date: date | None = None,
    user_id: str = ALICE.id,
    txn_id: str = "t",
) -> Transaction:
    return Transaction(
        id=txn_id,
        user_id=user_id,
        amount=Decimal(amount),
        description="Test",
        category=category,
        type=txn_type,
        date=txn_date or date.today(),
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """A month of salary and everyday spending"""
    today = date.today()
    return [
        make_transaction("4500", "income", "Income", today - timedelta(days=20), txn_id="salary"),
        make_transaction("6.50", "expense", "Food & Dining", today, txn_id="coffee"),
        make_transaction("40", "expense", "Transportation", today - timedelta(days=1), txn_id="gas"),
        make_transaction("120", "expense", "Shopping", today - timedelta(days=3), txn_id="grocery"),
        make_transaction("23.50", "expense", "Food & Dining", today - timedelta(days=10), txn_id="lunch"),
        make_transaction("15.99", "expense", "Entertainment", today - timedelta(days=40), txn_id="netflix"),
    ]

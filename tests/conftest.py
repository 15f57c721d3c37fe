"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before settings are read
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import itertools
import pytest
from datetime import date
from typing import Generator, List, Optional, Set
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from ledgerly.api.dependencies import get_account_client, get_transaction_client
from ledgerly.api.main import create_app
from ledgerly.domain.exceptions import NotFoundError, TransactionServiceError
from ledgerly.domain.models import TransactionRecord
from ledgerly.infrastructure.database.models import Base
from ledgerly.infrastructure.database.session import get_db
from ledgerly.services.debt_service import DebtService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "user_1"
CHECKING = "acct_checking"


class FakeAccountClient:
    """In-memory account lookup"""

    def __init__(self, account_ids: Set[str]):
        self.account_ids = account_ids

    async def get_account(self, user_id: str, account_id: str) -> dict:
        if account_id not in self.account_ids:
            raise NotFoundError(f"Account {account_id} not found")
        return {"id": account_id, "user_id": user_id}


class FakeTransactionClient:
    """Records transactions in memory; can be told to reject some descriptions"""

    def __init__(self):
        self.created: List[TransactionRecord] = []
        self.fail_descriptions: Set[str] = set()
        self._ids = itertools.count(1)

    async def create_transaction(
        self,
        user_id: str,
        amount_cents: int,
        type: str,
        description: str,
        on: date,
        account_id: Optional[str] = None,
    ) -> TransactionRecord:
        if description in self.fail_descriptions:
            raise TransactionServiceError("Transaction service unavailable")
        record = TransactionRecord(
            transaction_id=f"txn_{next(self._ids)}",
            amount_cents=amount_cents,
            type=type,
            description=description,
            date=on,
            account_id=account_id,
        )
        self.created.append(record)
        return record


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
def accounts() -> FakeAccountClient:
    return FakeAccountClient({CHECKING, "acct_savings"})


@pytest.fixture
def transactions() -> FakeTransactionClient:
    return FakeTransactionClient()


@pytest.fixture
def service(db: Session, accounts: FakeAccountClient, transactions: FakeTransactionClient) -> DebtService:
    """Debt service over the test session with fake collaborators"""
    return DebtService(db, accounts, transactions)


@pytest.fixture
def client(db: Session, accounts: FakeAccountClient, transactions: FakeTransactionClient) -> TestClient:
    """Create FastAPI test client with test database and fake collaborators"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_account_client] = lambda: accounts
    app.dependency_overrides[get_transaction_client] = lambda: transactions
    return TestClient(app, headers={"X-User-ID": USER_ID})


@pytest.fixture
def car_loan_fields() -> dict:
    """$1200 loan over 12 monthly payments starting Jan 15th 2025"""
    return {
        "name": "Car Loan",
        "role": "institutional",
        "principal_cents": 120000,
        "frequency": "monthly",
        "term": 12,
        "start_date": date(2025, 1, 15),
        "account_id": CHECKING,
    }

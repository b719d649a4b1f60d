"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from budget_advisor.api.main import create_app
from budget_advisor.api.dependencies import get_allocation_policy
from budget_advisor.infrastructure.database.models import Base, Account, Category, Transaction
from budget_advisor.infrastructure.database.session import get_db
from budget_advisor.domain.models import TransactionRecord


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
def policy():
    """Default allocation policy (floor 10, fallback x1.2, food/transport/health essentials)"""
    return get_allocation_policy()


class LedgerBuilder:
    """Seeds accounts, categories and transactions for one user"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.categories: Dict[str, Category] = {}
        self.account = self.add_account()

    def add_account(self, excluded: bool = False) -> Account:
        account = Account(user_id=self.user_id, name="Main", exclude_from_previsionnel=excluded)
        self.db.add(account)
        self.db.flush()
        return account

    def category(self, name: str, kind: str = "expense") -> Category:
        if name not in self.categories:
            category = Category(user_id=self.user_id, name=name, type=kind)
            self.db.add(category)
            self.db.flush()
            self.categories[name] = category
        return self.categories[name]

    def add(
        self,
        day: date,
        amount: float,
        category: Optional[str],
        kind: str = "expense",
        account: Optional[Account] = None,
    ) -> Transaction:
        txn = Transaction(
            account_id=(account or self.account).id,
            category_id=self.category(category, kind).id if category else None,
            amount=Decimal(str(amount)),
            date=day,
            type=kind,
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def commit(self) -> None:
        self.db.commit()


@pytest.fixture
def ledger(db: Session) -> LedgerBuilder:
    return LedgerBuilder(db, "user_1")


@pytest.fixture
def seeded_ledger(ledger: LedgerBuilder) -> LedgerBuilder:
    """
    Three complete months (Jan-Mar 2024):
    salary 3000/month, rent (Loyer) 1000/month, groceries (Alimentation) 4 x 100/month
    """
    for month in (1, 2, 3):
        ledger.add(date(2024, month, 5), 3000, "Salaire", kind="income")
        ledger.add(date(2024, month, 1), 1000, "Loyer")
        for day in (3, 10, 17, 24):
            ledger.add(date(2024, month, day), 100, "Alimentation")
    ledger.commit()
    return ledger


@pytest.fixture
def sample_transactions() -> list[TransactionRecord]:
    """Same history as `seeded_ledger`, as domain records"""
    transactions = []
    for month in (1, 2, 3):
        transactions.append(TransactionRecord(3000.0, date(2024, month, 5), "income", "Salaire"))
        transactions.append(TransactionRecord(1000.0, date(2024, month, 1), "expense", "Loyer"))
        for day in (3, 10, 17, 24):
            transactions.append(TransactionRecord(100.0, date(2024, month, day), "expense", "Alimentation"))
    return transactions

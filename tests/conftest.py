"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_FORMAT", "standard")

import dataclasses
import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ewallet.api.dependencies import get_uow_factory
from ewallet.api.main import create_app
from ewallet.application.account_service import AccountService
from ewallet.domain.accounts import new_id
from ewallet.domain.exceptions import (
    AccountNotFoundError,
    DuplicateAccrualError,
    ProfileNotFoundError,
    UserNotFoundError,
)
from ewallet.domain.models import Account, AccountType, FixedTerm, Profile, User
from ewallet.infrastructure.database.models import AccountRecord, Base, ProfileRecord, UserRecord
from ewallet.infrastructure.database.unit_of_work import SqlAlchemyUnitOfWork

FIXED_NOW = datetime(2025, 3, 15, 2, 0, tzinfo=timezone.utc)


# In-memory unit of work


class InMemoryStore:
    """Committed state shared by every FakeUnitOfWork"""

    def __init__(self):
        self.users = {}
        self.profiles = {}
        self.accounts = {}
        self.transactions = []
        self.interest_history = []
        self.write_calls = 0
        # (operation, key) -> exception raised when that write is attempted
        self.failures = {}
        self.lock = threading.Lock()

    def add_user(self, user_id: str, with_profile: bool = True) -> User:
        user = User(id=user_id, username=user_id, email=f"{user_id}@example.com")
        self.users[user_id] = user
        if with_profile:
            self.profiles[user_id] = Profile(
                user_id=user_id,
                display_name=user_id.title(),
                phone_number="0812345678",
                national_id="1100000000001",
                birth_year=1990,
            )
        return user

    def add_account(
        self,
        user_id: str,
        account_type: AccountType = AccountType.FLEXIBLE_SAVINGS,
        balance: str = "0",
        age_days: int = 40,
        account_id: str | None = None,
    ) -> Account:
        fixed_term = None
        if account_type == AccountType.FIXED_SAVINGS:
            fixed_term = FixedTerm(term_months=3, interest_rate=Decimal("1.8"))
        created_at = FIXED_NOW - timedelta(days=age_days)
        account = Account(
            id=account_id or new_id(),
            user_id=user_id,
            account_type=account_type,
            account_number=f"X{len(self.accounts):012d}",
            balance=Decimal(balance),
            fixed_term=fixed_term,
            created_at=created_at,
            updated_at=created_at,
        )
        self.accounts[account.id] = account
        return account

    def fail(self, operation: str, key: str, error: Exception) -> None:
        self.failures[(operation, key)] = error

    def check(self, operation: str, key: str) -> None:
        error = self.failures.get((operation, key))
        if error is not None:
            raise error

    def history_for(self, account_id: str) -> list:
        return [h for h in self.interest_history if h.account_id == account_id]

    def transactions_for(self, account_id: str) -> list:
        return [t for t in self.transactions if t.account_id == account_id]


class FakeUserRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def get_by_id(self, user_id):
        try:
            return self.store.users[user_id]
        except KeyError:
            raise UserNotFoundError(f"User {user_id} not found") from None


class FakeProfileRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def get_by_user_id(self, user_id):
        try:
            return self.store.profiles[user_id]
        except KeyError:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found") from None


class FakeAccountRepository:
    def __init__(self, store: InMemoryStore, uow: "FakeUnitOfWork"):
        self.store = store
        self.uow = uow

    def create(self, account):
        self.store.write_calls += 1
        self.store.check("create_account", account.user_id)
        self.uow.pending.append(lambda: self.store.accounts.__setitem__(account.id, account))
        return account

    def get_by_id(self, account_id):
        try:
            return dataclasses.replace(self.store.accounts[account_id])
        except KeyError:
            raise AccountNotFoundError(f"Account {account_id} not found") from None

    def get_payment_account_by_user_id(self, user_id):
        for account in self.store.accounts.values():
            if account.user_id == user_id and account.account_type == AccountType.PAYMENT:
                return account
        raise AccountNotFoundError(f"User {user_id} has no payment account")

    def count_savings_accounts(self, user_id):
        return sum(
            1
            for a in self.store.accounts.values()
            if a.user_id == user_id and a.account_type.is_savings
        )

    def list_by_user_id(self, user_id):
        accounts = [a for a in self.store.accounts.values() if a.user_id == user_id]
        return sorted(accounts, key=lambda a: a.created_at)

    def get_flexible_savings_accounts(self):
        return [
            a for a in self.store.accounts.values() if a.account_type == AccountType.FLEXIBLE_SAVINGS
        ]

    def update_balance(self, account_id, new_balance):
        self.store.write_calls += 1
        self.store.check("update_balance", account_id)
        if account_id not in self.store.accounts:
            raise AccountNotFoundError(f"Account {account_id} not found")

        def apply():
            self.store.accounts[account_id].balance = new_balance

        self.uow.pending.append(apply)


class FakeTransactionRepository:
    def __init__(self, store: InMemoryStore, uow: "FakeUnitOfWork"):
        self.store = store
        self.uow = uow

    def create(self, transaction):
        self.store.write_calls += 1
        self.store.check("create_transaction", transaction.account_id)
        self.uow.pending.append(lambda: self.store.transactions.append(transaction))
        return transaction


class FakeInterestHistoryRepository:
    def __init__(self, store: InMemoryStore, uow: "FakeUnitOfWork"):
        self.store = store
        self.uow = uow

    def create(self, entry):
        self.store.write_calls += 1
        self.store.check("create_interest_history", entry.account_id)
        if self.exists(entry.account_id, entry.date):
            raise DuplicateAccrualError(f"Interest already recorded for {entry.account_id}")
        self.uow.pending.append(lambda: self.store.interest_history.append(entry))
        return entry

    def exists(self, account_id, accrual_date):
        return any(
            h.account_id == account_id and h.date == accrual_date for h in self.store.interest_history
        )


class FakeUnitOfWork:
    """Buffers writes until commit; leaving the block discards the buffer"""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.pending = []
        self.users = FakeUserRepository(store)
        self.profiles = FakeProfileRepository(store)
        self.accounts = FakeAccountRepository(store, self)
        self.transactions = FakeTransactionRepository(store, self)
        self.interest_history = FakeInterestHistoryRepository(store, self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.pending.clear()

    def commit(self):
        with self.store.lock:
            for apply in self.pending:
                apply()
        self.pending.clear()

    def rollback(self):
        self.pending.clear()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(store)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def service(uow_factory) -> AccountService:
    """Account service over the in-memory store with a fixed clock"""
    return AccountService(uow_factory, clock=lambda: FIXED_NOW)


# SQL database

TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session_factory() -> Generator[sessionmaker, None, None]:
    """Create test database and yield its session factory"""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sql_uow_factory(db_session_factory) -> Callable[[], SqlAlchemyUnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(db_session_factory)


@pytest.fixture
def seed_user(db_session_factory):
    """Insert a user, optionally with a completed profile"""

    def _seed(user_id: str, with_profile: bool = True) -> str:
        db = db_session_factory()
        try:
            db.add(UserRecord(id=user_id, username=user_id, email=f"{user_id}@example.com"))
            db.flush()
            if with_profile:
                db.add(
                    ProfileRecord(
                        user_id=user_id,
                        display_name=user_id.title(),
                        phone_number="0812345678",
                        national_id="1100000000001",
                        birth_year=1990,
                    )
                )
            db.commit()
        finally:
            db.close()
        return user_id

    return _seed


@pytest.fixture
def seed_flexible_account(db_session_factory):
    """Insert a flexible savings account with a given balance and age"""

    def _seed(user_id: str, balance: str, age_days: int = 40) -> str:
        created_at = FIXED_NOW - timedelta(days=age_days)
        account_id = new_id()
        db = db_session_factory()
        try:
            db.add(
                AccountRecord(
                    id=account_id,
                    user_id=user_id,
                    account_type=AccountType.FLEXIBLE_SAVINGS.value,
                    account_number=f"SAV{account_id[:10]}",
                    balance=Decimal(balance),
                    created_at=created_at,
                    updated_at=created_at,
                )
            )
            db.commit()
        finally:
            db.close()
        return account_id

    return _seed


@pytest.fixture
def client(sql_uow_factory) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()
    app.dependency_overrides[get_uow_factory] = lambda: sql_uow_factory
    return TestClient(app)

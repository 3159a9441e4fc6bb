"""Repository contracts the account engine depends on"""

from datetime import date
from decimal import Decimal
from typing import List, Protocol

from ewallet.domain.models import Account, InterestHistory, Profile, Transaction, User


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> User:
        """Raises UserNotFoundError"""
        ...


class ProfileRepository(Protocol):
    def get_by_user_id(self, user_id: str) -> Profile:
        """Raises ProfileNotFoundError"""
        ...


class AccountRepository(Protocol):
    def create(self, account: Account) -> Account: ...

    def get_by_id(self, account_id: str) -> Account: ...

    def get_payment_account_by_user_id(self, user_id: str) -> Account:
        """Raises AccountNotFoundError when the user has no payment account"""
        ...

    def count_savings_accounts(self, user_id: str) -> int: ...

    def list_by_user_id(self, user_id: str) -> List[Account]: ...

    def get_flexible_savings_accounts(self) -> List[Account]: ...

    def update_balance(self, account_id: str, new_balance: Decimal) -> None: ...


class TransactionRepository(Protocol):
    def create(self, transaction: Transaction) -> Transaction: ...


class InterestHistoryRepository(Protocol):
    def create(self, entry: InterestHistory) -> InterestHistory:
        """Raises DuplicateAccrualError if (account_id, date) already exists"""
        ...

    def exists(self, account_id: str, accrual_date: date) -> bool: ...


class UnitOfWork(Protocol):
    """
    Repositories sharing one database transaction.

    Used as a context manager: leaving the block normally keeps whatever was
    committed, an exception rolls back uncommitted writes.
    """

    users: UserRepository
    profiles: ProfileRepository
    accounts: AccountRepository
    transactions: TransactionRepository
    interest_history: InterestHistoryRepository

    def __enter__(self) -> "UnitOfWork": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

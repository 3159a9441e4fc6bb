"""Data access layer for wallet entities"""

import dataclasses
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ewallet.config import settings
from ewallet.domain.accounts import generate_account_number
from ewallet.domain.exceptions import (
    AccountNotFoundError,
    DuplicateAccrualError,
    LimitPaymentAccountError,
    ProfileNotFoundError,
    RepositoryError,
    UserNotFoundError,
)
from ewallet.domain.models import (
    SAVINGS_ACCOUNT_TYPES,
    Account,
    AccountType,
    FixedTerm,
    InterestHistory,
    Profile,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
    utcnow,
)
from ewallet.infrastructure.database.models import (
    AccountRecord,
    InterestHistoryRecord,
    ProfileRecord,
    TransactionRecord,
    UserRecord,
)
from ewallet.utils.date_utils import ensure_utc


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Surface driver/ORM failures as RepositoryError"""
    try:
        yield
    except SQLAlchemyError as e:
        raise RepositoryError(f"Failed to {action}: {e}") from e


def account_to_domain(record: AccountRecord) -> Account:
    fixed_term = None
    if record.fixed_term_months is not None and record.interest_rate is not None:
        fixed_term = FixedTerm(term_months=record.fixed_term_months, interest_rate=Decimal(record.interest_rate))
    return Account(
        id=record.id,
        user_id=record.user_id,
        account_type=AccountType(record.account_type),
        account_number=record.account_number,
        balance=Decimal(record.balance),
        fixed_term=fixed_term,
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
    )


class UserRepository:
    """Read access to registered users"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> User:
        with translate_errors("load user"):
            record = self.db.query(UserRecord).filter(UserRecord.id == user_id).first()
        if record is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return User(
            id=record.id,
            username=record.username,
            email=record.email,
            is_email_verified=record.is_email_verified,
            created_at=ensure_utc(record.created_at),
        )


class ProfileRepository:
    """Read access to completed profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_id(self, user_id: str) -> Profile:
        with translate_errors("load profile"):
            record = self.db.query(ProfileRecord).filter(ProfileRecord.user_id == user_id).first()
        if record is None:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return Profile(
            user_id=record.user_id,
            display_name=record.display_name,
            phone_number=record.phone_number,
            national_id=record.national_id,
            birth_year=record.birth_year,
            gender=record.gender,
            team=record.team,
            created_at=ensure_utc(record.created_at),
        )


class AccountRepository:
    """Repository for wallet accounts"""

    def __init__(self, db: Session, max_number_attempts: int | None = None):
        self.db = db
        self.max_number_attempts = max_number_attempts or settings.account_number_max_attempts

    def create(self, account: Account) -> Account:
        """
        Insert a new account.

        Account numbers are random, so a collision on the unique number index
        is retried with a fresh number. A violation of the one-payment-account
        index means a concurrent request won and raises LimitPaymentAccountError.
        The session is rolled back on every failed attempt.
        """
        for attempt in range(1, self.max_number_attempts + 1):
            self.db.add(
                AccountRecord(
                    id=account.id,
                    user_id=account.user_id,
                    account_type=account.account_type.value,
                    account_number=account.account_number,
                    balance=account.balance,
                    interest_rate=account.interest_rate,
                    fixed_term_months=account.fixed_term_months,
                    created_at=account.created_at,
                    updated_at=account.updated_at,
                )
            )
            try:
                self.db.flush()
                return account
            except IntegrityError as e:
                self.db.rollback()
                if account.account_type == AccountType.PAYMENT and self._has_payment_account(account.user_id):
                    raise LimitPaymentAccountError(
                        f"User {account.user_id} already has a payment account"
                    ) from e
                if attempt == self.max_number_attempts:
                    raise RepositoryError(f"Failed to create account: {e}") from e
                account = dataclasses.replace(
                    account, account_number=generate_account_number(account.account_type)
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                raise RepositoryError(f"Failed to create account: {e}") from e

        raise RepositoryError("Failed to create account")

    def get_by_id(self, account_id: str) -> Account:
        with translate_errors("load account"):
            record = self.db.query(AccountRecord).filter(AccountRecord.id == account_id).first()
        if record is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account_to_domain(record)

    def get_payment_account_by_user_id(self, user_id: str) -> Account:
        with translate_errors("load payment account"):
            record = (
                self.db.query(AccountRecord)
                .filter(
                    AccountRecord.user_id == user_id,
                    AccountRecord.account_type == AccountType.PAYMENT.value,
                )
                .first()
            )
        if record is None:
            raise AccountNotFoundError(f"User {user_id} has no payment account")
        return account_to_domain(record)

    def count_savings_accounts(self, user_id: str) -> int:
        with translate_errors("count savings accounts"):
            return (
                self.db.query(func.count(AccountRecord.id))
                .filter(
                    AccountRecord.user_id == user_id,
                    AccountRecord.account_type.in_([t.value for t in SAVINGS_ACCOUNT_TYPES]),
                )
                .scalar()
            )

    def list_by_user_id(self, user_id: str) -> List[Account]:
        with translate_errors("list accounts"):
            records = (
                self.db.query(AccountRecord)
                .filter(AccountRecord.user_id == user_id)
                .order_by(AccountRecord.created_at, AccountRecord.id)
                .all()
            )
        return [account_to_domain(r) for r in records]

    def get_flexible_savings_accounts(self) -> List[Account]:
        with translate_errors("list flexible savings accounts"):
            records = (
                self.db.query(AccountRecord)
                .filter(AccountRecord.account_type == AccountType.FLEXIBLE_SAVINGS.value)
                .order_by(AccountRecord.id)
                .all()
            )
        return [account_to_domain(r) for r in records]

    def update_balance(self, account_id: str, new_balance: Decimal) -> None:
        with translate_errors("update balance"):
            updated = (
                self.db.query(AccountRecord)
                .filter(AccountRecord.id == account_id)
                .update({"balance": new_balance, "updated_at": utcnow()}, synchronize_session=False)
            )
        if updated == 0:
            raise AccountNotFoundError(f"Account {account_id} not found")

    def _has_payment_account(self, user_id: str) -> bool:
        try:
            self.get_payment_account_by_user_id(user_id)
        except AccountNotFoundError:
            return False
        return True


class TransactionRepository:
    """Append-only ledger of balance changes"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, transaction: Transaction) -> Transaction:
        with translate_errors("record transaction"):
            self.db.add(
                TransactionRecord(
                    id=transaction.id,
                    account_id=transaction.account_id,
                    transaction_type=transaction.transaction_type.value,
                    amount=transaction.amount,
                    status=transaction.status.value,
                    balance_after=transaction.balance_after,
                    related_account_id=transaction.related_account_id,
                    created_at=transaction.created_at,
                )
            )
            self.db.flush()
        return transaction

    def list_by_account_id(self, account_id: str) -> List[Transaction]:
        """Ledger entries for an account, oldest first"""
        with translate_errors("list transactions"):
            records = (
                self.db.query(TransactionRecord)
                .filter(TransactionRecord.account_id == account_id)
                .order_by(TransactionRecord.created_at)
                .all()
            )
        return [
            Transaction(
                id=r.id,
                account_id=r.account_id,
                transaction_type=TransactionType(r.transaction_type),
                amount=Decimal(r.amount),
                balance_after=Decimal(r.balance_after),
                status=TransactionStatus(r.status),
                related_account_id=r.related_account_id,
                created_at=ensure_utc(r.created_at),
            )
            for r in records
        ]


class InterestHistoryRepository:
    """Repository for daily interest records"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, entry: InterestHistory) -> InterestHistory:
        self.db.add(
            InterestHistoryRecord(
                id=entry.id,
                account_id=entry.account_id,
                date=entry.date,
                interest_amount=entry.interest_amount,
                created_at=entry.created_at,
            )
        )
        try:
            self.db.flush()
        except IntegrityError as e:
            # Only the (account_id, date) row already existing counts as a duplicate
            self.db.rollback()
            if self.exists(entry.account_id, entry.date):
                raise DuplicateAccrualError(
                    f"Interest already recorded for account {entry.account_id} on {entry.date}"
                ) from e
            raise RepositoryError(f"Failed to record interest history: {e}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to record interest history: {e}") from e
        return entry

    def exists(self, account_id: str, accrual_date: date) -> bool:
        with translate_errors("check interest history"):
            return (
                self.db.query(InterestHistoryRecord.id)
                .filter(
                    InterestHistoryRecord.account_id == account_id,
                    InterestHistoryRecord.date == accrual_date,
                )
                .first()
                is not None
            )

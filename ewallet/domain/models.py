"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from ewallet.domain.exceptions import InvalidAccountError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountType(str, Enum):
    PAYMENT = "payment"
    FIXED_SAVINGS = "savings_fixed"
    FLEXIBLE_SAVINGS = "savings_flexible"

    @property
    def is_savings(self) -> bool:
        return self in (AccountType.FIXED_SAVINGS, AccountType.FLEXIBLE_SAVINGS)


SAVINGS_ACCOUNT_TYPES = (AccountType.FIXED_SAVINGS, AccountType.FLEXIBLE_SAVINGS)


class TransactionType(str, Enum):
    INTEREST = "interest"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"


class TransactionStatus(str, Enum):
    SUCCESS = "success"


@dataclass
class User:
    """Registered wallet user (read-only for the account engine)"""

    id: str
    username: str
    email: str
    is_email_verified: bool = False
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Profile:
    """Completed KYC-style profile; its presence gates account creation"""

    user_id: str
    display_name: str
    phone_number: str
    national_id: str
    birth_year: int
    gender: str = ""
    team: str = ""
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class FixedTerm:
    """Rate and term locked in when a fixed savings account is opened"""

    term_months: int
    interest_rate: Decimal  # annual percent, e.g. Decimal("1.8")


@dataclass
class Account:
    """
    Wallet account.

    `fixed_term` is present exactly when the account is fixed savings, so the
    interest rate and term are always set together or not at all.
    """

    id: str
    user_id: str
    account_type: AccountType
    account_number: str
    balance: Decimal = Decimal("0")
    fixed_term: Optional[FixedTerm] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.account_type = AccountType(self.account_type)
        if self.balance < 0:
            raise InvalidAccountError(f"Account {self.id} balance cannot be negative")
        is_fixed = self.account_type == AccountType.FIXED_SAVINGS
        if is_fixed and self.fixed_term is None:
            raise InvalidAccountError("Fixed savings account requires a term and rate")
        if not is_fixed and self.fixed_term is not None:
            raise InvalidAccountError(f"{self.account_type.value} account cannot carry a fixed term")

    @property
    def interest_rate(self) -> Optional[Decimal]:
        return self.fixed_term.interest_rate if self.fixed_term else None

    @property
    def fixed_term_months(self) -> Optional[int]:
        return self.fixed_term.term_months if self.fixed_term else None


@dataclass(frozen=True)
class Transaction:
    """Append-only ledger entry for a balance-affecting event"""

    id: str
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    balance_after: Decimal
    status: TransactionStatus = TransactionStatus.SUCCESS
    related_account_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class InterestHistory:
    """Interest credited to an account for one accrual date"""

    id: str
    account_id: str
    date: date
    interest_amount: Decimal
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class AccrualOutcome:
    """Interest credited to a single account during a run"""

    account_id: str
    interest: Decimal
    balance_after: Decimal


@dataclass
class AccrualSummary:
    """Aggregate result of one daily interest run"""

    run_date: date
    accrual_date: date
    credited: List[AccrualOutcome] = field(default_factory=list)
    skipped: dict = field(default_factory=dict)  # account_id -> reason
    failed: dict = field(default_factory=dict)  # account_id -> error message

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total_interest(self) -> Decimal:
        return sum((o.interest for o in self.credited), Decimal("0"))

    @property
    def accounts_processed(self) -> int:
        return len(self.credited) + len(self.skipped) + len(self.failed)

"""SQLAlchemy ORM models for users, profiles, accounts and the interest ledger"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

MONEY = Numeric(20, 3)
RATE = Numeric(5, 2)


class UserRecord(Base):
    """Registered user; password and auth fields live with the auth service"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(Text, nullable=False, unique=True)
    email = Column(Text, nullable=False, unique=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class ProfileRecord(Base):
    """Completed user profile"""

    __tablename__ = "profiles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    display_name = Column(Text, nullable=False)
    phone_number = Column(Text, nullable=False)
    national_id = Column(Text, nullable=False)
    birth_year = Column(Integer, nullable=False)
    gender = Column(Text, nullable=False, default="")
    team = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class AccountRecord(Base):
    """Wallet account; interest_rate and fixed_term_months only for fixed savings"""

    __tablename__ = "accounts"
    __table_args__ = (
        # One payment account per user, enforced by storage to close the check-then-act race
        Index(
            "uq_accounts_user_payment",
            "user_id",
            unique=True,
            postgresql_where=text("account_type = 'payment'"),
            sqlite_where=text("account_type = 'payment'"),
        ),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    account_type = Column(Text, nullable=False, index=True)
    account_number = Column(Text, nullable=False, unique=True)
    balance = Column(MONEY, nullable=False, default=0)
    interest_rate = Column(RATE, nullable=True)
    fixed_term_months = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class TransactionRecord(Base):
    """Append-only ledger entry"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    transaction_type = Column(Text, nullable=False)
    amount = Column(MONEY, nullable=False)
    status = Column(Text, nullable=False, default="success")
    balance_after = Column(MONEY, nullable=False)
    related_account_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class InterestHistoryRecord(Base):
    """Daily interest credited per account; one row per (account, date)"""

    __tablename__ = "interest_history"
    __table_args__ = (UniqueConstraint("account_id", "date", name="uq_interest_history_account_date"),)

    id = Column(String(36), primary_key=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    interest_amount = Column(MONEY, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

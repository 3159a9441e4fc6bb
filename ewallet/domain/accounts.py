"""Account factories with product defaults"""

import secrets
import uuid
from decimal import Decimal

from ewallet.domain.models import Account, AccountType, FixedTerm, utcnow

PAYMENT_PREFIX = "PAY"
SAVINGS_PREFIX = "SAV"
ACCOUNT_NUMBER_DIGITS = 10


def new_id() -> str:
    return str(uuid.uuid4())


def generate_account_number(account_type: AccountType | str) -> str:
    """
    Product prefix plus 10 random digits, e.g. "SAV0492817365".

    Uniqueness is guaranteed by the unique index on accounts.account_number,
    not here. Unknown types fall back to the payment prefix.
    """
    try:
        is_savings = AccountType(account_type).is_savings
    except ValueError:
        is_savings = False
    prefix = SAVINGS_PREFIX if is_savings else PAYMENT_PREFIX
    digits = secrets.randbelow(10**ACCOUNT_NUMBER_DIGITS)
    return f"{prefix}{digits:0{ACCOUNT_NUMBER_DIGITS}d}"


def _new_account(user_id: str, account_type: AccountType, fixed_term: FixedTerm | None = None) -> Account:
    now = utcnow()
    return Account(
        id=new_id(),
        user_id=user_id,
        account_type=account_type,
        account_number=generate_account_number(account_type),
        balance=Decimal("0"),
        fixed_term=fixed_term,
        created_at=now,
        updated_at=now,
    )


def new_payment_account(user_id: str) -> Account:
    return _new_account(user_id, AccountType.PAYMENT)


def new_flexible_savings_account(user_id: str) -> Account:
    """Rate is not stored; it is recomputed from the tier table at each accrual"""
    return _new_account(user_id, AccountType.FLEXIBLE_SAVINGS)


def new_fixed_savings_account(user_id: str, term_months: int, interest_rate: Decimal) -> Account:
    return _new_account(
        user_id,
        AccountType.FIXED_SAVINGS,
        FixedTerm(term_months=term_months, interest_rate=Decimal(str(interest_rate))),
    )

"""Ledger entries recorded when a balance changes"""

from datetime import date
from decimal import Decimal

from ewallet.domain.accounts import new_id
from ewallet.domain.models import InterestHistory, Transaction, TransactionStatus, TransactionType


def new_interest_transaction(account_id: str, amount: Decimal, balance_after: Decimal) -> Transaction:
    """Ledger entry for credited interest; balance_after is a snapshot, never recomputed"""
    return Transaction(
        id=new_id(),
        account_id=account_id,
        transaction_type=TransactionType.INTEREST,
        amount=amount,
        balance_after=balance_after,
        status=TransactionStatus.SUCCESS,
    )


def new_interest_history(account_id: str, accrual_date: date, interest_amount: Decimal) -> InterestHistory:
    return InterestHistory(
        id=new_id(),
        account_id=account_id,
        date=accrual_date,
        interest_amount=interest_amount,
    )

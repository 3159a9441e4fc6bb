"""Tiered daily interest for flexible savings accounts"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from ewallet.utils.date_utils import days_between

DAYS_PER_YEAR = Decimal("365")
INTEREST_QUANTUM = Decimal("0.001")

PROMOTIONAL_WINDOW_DAYS = 30
PROMOTIONAL_RATE = Decimal("0.008")  # 0.8%

# (upper balance bound exclusive, annual rate); None means no upper bound
BALANCE_TIERS = [
    (Decimal("10000000"), Decimal("0.003")),  # 0.3%
    (Decimal("50000000"), Decimal("0.004")),  # 0.4%
    (None, Decimal("0.005")),  # 0.5%
]


def annual_rate_for(balance: Decimal, age_days: int) -> Decimal:
    """
    Annual rate (as a fraction) for a flexible savings balance.

    Tiers:
    - Account younger than 30 days: 0.8% promotional, regardless of balance
    - Balance below 10M: 0.3%
    - Balance from 10M to below 50M: 0.4%
    - Balance of 50M and above: 0.5%
    """
    if age_days < PROMOTIONAL_WINDOW_DAYS:
        return PROMOTIONAL_RATE

    for upper_bound, rate in BALANCE_TIERS:
        if upper_bound is None or balance < upper_bound:
            return rate

    raise AssertionError("unreachable: last tier is unbounded")


def calculate_daily_interest(balance: Decimal, created_at: datetime, as_of: datetime) -> Decimal:
    """
    Daily interest for a flexible savings account.

    daily = balance * annual_rate / 365, rounded half-up to 0.001.

    Returns Decimal("0") for an empty balance so the caller can skip the
    account without writing a zero-value ledger entry.

    Example:
        5,000,000 at 10 days old -> 5,000,000 * 0.008 / 365 = 109.589
        60,000,000 at 40 days old -> 60,000,000 * 0.005 / 365 = 821.918
    """
    balance = Decimal(balance)
    if balance <= 0:
        return Decimal("0")

    rate = annual_rate_for(balance, days_between(created_at, as_of))
    daily = balance * rate / DAYS_PER_YEAR
    return daily.quantize(INTEREST_QUANTUM, rounding=ROUND_HALF_UP)

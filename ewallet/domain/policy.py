"""Account opening rules: per-user limits and fixed savings terms"""

from decimal import Decimal
from typing import Dict

from ewallet.domain.exceptions import InvalidTermMonthsError

# Annual percent rate offered for each fixed savings term (months)
FIXED_TERM_RATES: Dict[int, Decimal] = {
    1: Decimal("0.6"),
    3: Decimal("1.8"),
    6: Decimal("3.6"),
    8: Decimal("4.8"),
    12: Decimal("7.2"),
}

MAX_PAYMENT_ACCOUNTS = 1
MAX_SAVINGS_ACCOUNTS = 5


class AccountPolicy:
    """Stateless rule set checked before any account is persisted"""

    def __init__(
        self,
        max_payment_accounts: int = MAX_PAYMENT_ACCOUNTS,
        max_savings_accounts: int = MAX_SAVINGS_ACCOUNTS,
    ):
        self.max_payment_accounts = max_payment_accounts
        self.max_savings_accounts = max_savings_accounts

    def can_create_payment(self, existing_payment_count: int) -> bool:
        return existing_payment_count < self.max_payment_accounts

    def can_create_savings(self, existing_savings_count: int) -> bool:
        """Fixed and flexible savings share one limit"""
        return existing_savings_count < self.max_savings_accounts

    def interest_rate_for_term(self, term_months: int) -> Decimal:
        """
        Resolve the annual rate for a fixed savings term.

        Raises:
            InvalidTermMonthsError: term is not one of 1, 3, 6, 8 or 12 months
        """
        # bool is an int subclass; True must not resolve to the 1-month term
        if isinstance(term_months, bool) or not isinstance(term_months, int):
            raise InvalidTermMonthsError(f"Invalid term months: {term_months!r}")
        try:
            return FIXED_TERM_RATES[term_months]
        except KeyError:
            raise InvalidTermMonthsError(f"Invalid term months: {term_months}") from None

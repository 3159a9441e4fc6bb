"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced user, profile or account does not exist"""

    pass


class UserNotFoundError(NotFoundError):
    pass


class ProfileNotFoundError(NotFoundError):
    pass


class AccountNotFoundError(NotFoundError):
    pass


class ProfileIncompleteError(DomainException):
    """User must complete their profile before opening accounts"""

    pass


class AccountLimitError(DomainException):
    """Per-user account limit reached"""

    pass


class LimitPaymentAccountError(AccountLimitError):
    """User already owns a payment account"""

    pass


class LimitSavingsAccountError(AccountLimitError):
    """User already owns the maximum number of savings accounts"""

    pass


class InvalidTermMonthsError(DomainException):
    """Fixed savings term is not one of the offered terms"""

    pass


class InvalidAccountError(DomainException):
    """Account fields violate an entity invariant"""

    pass


class RepositoryError(DomainException):
    """Underlying persistence failure"""

    pass


class DuplicateAccrualError(RepositoryError):
    """Interest was already recorded for this account and date"""

    pass

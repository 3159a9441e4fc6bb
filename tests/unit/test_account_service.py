"""Unit tests for account opening flows"""

from decimal import Decimal

import pytest

from ewallet.domain.exceptions import (
    InvalidTermMonthsError,
    LimitPaymentAccountError,
    LimitSavingsAccountError,
    ProfileIncompleteError,
    RepositoryError,
    UserNotFoundError,
)
from ewallet.domain.models import AccountType


def test_create_payment_account(store, service):
    store.add_user("user-1")

    acc = service.create_payment_account("user-1")

    assert acc.account_type == AccountType.PAYMENT
    assert acc.account_number.startswith("PAY")
    assert store.accounts[acc.id] == acc


def test_second_payment_account_rejected(store, service):
    store.add_user("user-1")
    service.create_payment_account("user-1")

    with pytest.raises(LimitPaymentAccountError):
        service.create_payment_account("user-1")

    payment = [a for a in store.accounts.values() if a.account_type == AccountType.PAYMENT]
    assert len(payment) == 1


def test_create_fixed_savings_locks_rate_and_term(store, service):
    """Term of 3 months yields a 1.8% rate on the persisted account"""
    store.add_user("user-1")

    acc = service.create_fixed_savings_account("user-1", 3)

    assert acc.interest_rate == Decimal("1.8")
    assert acc.fixed_term_months == 3
    assert store.accounts[acc.id].interest_rate == Decimal("1.8")
    assert store.accounts[acc.id].fixed_term_months == 3


def test_create_fixed_savings_invalid_term_makes_no_repository_calls(store, service):
    """Unknown terms are rejected before the user is even looked up"""
    with pytest.raises(InvalidTermMonthsError):
        service.create_fixed_savings_account("no-such-user", 2)

    assert store.write_calls == 0


def test_create_flexible_savings_account(store, service):
    store.add_user("user-1")

    acc = service.create_flexible_savings_account("user-1")

    assert acc.account_type == AccountType.FLEXIBLE_SAVINGS
    assert acc.interest_rate is None
    assert acc.fixed_term_months is None


def test_savings_limit_shared_by_fixed_and_flexible(store, service):
    """Five savings accounts of any mix; the sixth fails"""
    store.add_user("user-1")
    service.create_fixed_savings_account("user-1", 1)
    service.create_fixed_savings_account("user-1", 12)
    service.create_flexible_savings_account("user-1")
    service.create_flexible_savings_account("user-1")
    service.create_fixed_savings_account("user-1", 6)

    with pytest.raises(LimitSavingsAccountError):
        service.create_flexible_savings_account("user-1")
    with pytest.raises(LimitSavingsAccountError):
        service.create_fixed_savings_account("user-1", 3)

    assert sum(1 for a in store.accounts.values() if a.account_type.is_savings) == 5


def test_payment_account_does_not_count_toward_savings_limit(store, service):
    store.add_user("user-1")
    service.create_payment_account("user-1")
    for _ in range(5):
        service.create_flexible_savings_account("user-1")

    assert len(store.accounts) == 6


def test_limits_are_per_user(store, service):
    store.add_user("user-1")
    store.add_user("user-2")
    service.create_payment_account("user-1")

    acc = service.create_payment_account("user-2")

    assert acc.user_id == "user-2"


@pytest.mark.parametrize(
    "create",
    [
        lambda s: s.create_payment_account("user-1"),
        lambda s: s.create_fixed_savings_account("user-1", 3),
        lambda s: s.create_flexible_savings_account("user-1"),
    ],
)
def test_incomplete_profile_blocks_creation_before_any_write(store, service, create):
    store.add_user("user-1", with_profile=False)

    with pytest.raises(ProfileIncompleteError):
        create(service)

    assert store.write_calls == 0
    assert store.accounts == {}


@pytest.mark.parametrize(
    "create",
    [
        lambda s: s.create_payment_account("ghost"),
        lambda s: s.create_fixed_savings_account("ghost", 3),
        lambda s: s.create_flexible_savings_account("ghost"),
    ],
)
def test_unknown_user_not_found(store, service, create):
    with pytest.raises(UserNotFoundError):
        create(service)

    assert store.write_calls == 0


def test_repository_error_propagates_unchanged(store, service):
    store.add_user("user-1")
    error = RepositoryError("connection reset")
    store.fail("create_account", "user-1", error)

    with pytest.raises(RepositoryError) as exc_info:
        service.create_flexible_savings_account("user-1")

    assert exc_info.value is error
    assert store.accounts == {}


def test_list_accounts(store, service):
    store.add_user("user-1")
    store.add_user("user-2")
    payment = service.create_payment_account("user-1")
    savings = service.create_flexible_savings_account("user-1")
    service.create_flexible_savings_account("user-2")

    accounts = service.list_accounts("user-1")

    assert {a.id for a in accounts} == {payment.id, savings.id}


def test_list_accounts_unknown_user(service):
    with pytest.raises(UserNotFoundError):
        service.list_accounts("ghost")

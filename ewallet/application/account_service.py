"""Account opening flows and the daily interest accrual job"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from ewallet.domain.accounts import (
    new_fixed_savings_account,
    new_flexible_savings_account,
    new_payment_account,
)
from ewallet.domain.exceptions import (
    AccountNotFoundError,
    DuplicateAccrualError,
    InvalidTermMonthsError,
    LimitPaymentAccountError,
    LimitSavingsAccountError,
    ProfileIncompleteError,
    ProfileNotFoundError,
)
from ewallet.domain.interest import calculate_daily_interest
from ewallet.domain.ledger import new_interest_history, new_interest_transaction
from ewallet.domain.models import Account, AccrualOutcome, AccrualSummary, utcnow
from ewallet.domain.policy import AccountPolicy
from ewallet.domain.ports import UnitOfWork
from ewallet.infrastructure.observability.logging import log_account_created, log_accrual_summary
from ewallet.infrastructure.observability.metrics import (
    accrual_duration_histogram,
    record_account_created,
    record_account_rejected,
    record_accrual,
)
from ewallet.utils.date_utils import previous_day, start_of_day_utc

logger = logging.getLogger(__name__)

SKIP_ALREADY_ACCRUED = "already_accrued"
SKIP_ZERO_INTEREST = "zero_interest"


class AccountService:
    """
    Orchestrates account creation and interest accrual over a unit of work.

    Args:
        uow_factory: Returns a fresh UnitOfWork per call; each account opening
            and each account's accrual runs in its own one.
        policy: Account limits and fixed savings terms
        clock: Current UTC time, injectable for tests
        max_workers: Parallel accrual workers; 1 processes accounts in order
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccountPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
        max_workers: int = 1,
    ):
        self.uow_factory = uow_factory
        self.policy = policy or AccountPolicy()
        self.clock = clock
        self.max_workers = max(1, max_workers)

    # Account opening

    def create_payment_account(self, user_id: str) -> Account:
        with self.uow_factory() as uow:
            self._check_prerequisites(uow, user_id)

            try:
                uow.accounts.get_payment_account_by_user_id(user_id)
                existing = 1
            except AccountNotFoundError:
                existing = 0

            if not self.policy.can_create_payment(existing):
                record_account_rejected("payment_limit")
                raise LimitPaymentAccountError(f"User {user_id} already has a payment account")

            return self._persist(uow, new_payment_account(user_id))

    def create_fixed_savings_account(self, user_id: str, term_months: int) -> Account:
        # Resolve the term before touching storage
        try:
            rate = self.policy.interest_rate_for_term(term_months)
        except InvalidTermMonthsError:
            record_account_rejected("invalid_term")
            raise

        with self.uow_factory() as uow:
            self._check_prerequisites(uow, user_id)
            self._check_savings_limit(uow, user_id)
            return self._persist(uow, new_fixed_savings_account(user_id, term_months, rate))

    def create_flexible_savings_account(self, user_id: str) -> Account:
        with self.uow_factory() as uow:
            self._check_prerequisites(uow, user_id)
            self._check_savings_limit(uow, user_id)
            return self._persist(uow, new_flexible_savings_account(user_id))

    def list_accounts(self, user_id: str) -> List[Account]:
        with self.uow_factory() as uow:
            uow.users.get_by_id(user_id)
            return uow.accounts.list_by_user_id(user_id)

    def _check_prerequisites(self, uow: UnitOfWork, user_id: str) -> None:
        """User must exist (UserNotFoundError) and have a completed profile"""
        uow.users.get_by_id(user_id)
        try:
            uow.profiles.get_by_user_id(user_id)
        except ProfileNotFoundError as e:
            record_account_rejected("profile_incomplete")
            raise ProfileIncompleteError(
                f"User {user_id} must complete their profile before opening accounts"
            ) from e

    def _check_savings_limit(self, uow: UnitOfWork, user_id: str) -> None:
        count = uow.accounts.count_savings_accounts(user_id)
        if not self.policy.can_create_savings(count):
            record_account_rejected("savings_limit")
            raise LimitSavingsAccountError(
                f"User {user_id} already has {count} savings accounts"
            )

    def _persist(self, uow: UnitOfWork, account: Account) -> Account:
        created = uow.accounts.create(account)
        uow.commit()

        record_account_created(created.account_type.value)
        log_account_created(created)
        return created

    # Interest accrual

    def calculate_daily_interest(self, run_date: Optional[date] = None) -> AccrualSummary:
        """
        Credit one day of interest to every flexible savings account.

        Flow per account, inside its own unit of work:
        1. Skip if interest is already recorded for the accrual date
        2. Re-read the balance and compute the tiered daily interest
        3. Skip if the interest is zero (no ledger noise)
        4. Update balance, append ledger transaction, append interest history
        5. Commit; any failure rolls back all three writes

        A failing account is logged and reported in the summary; the rest of
        the run continues.

        Args:
            run_date: Day the job runs for (default: today). Interest is
                attributed to the day before.
        """
        start_time = time.time()
        now = self.clock()
        if run_date is None:
            run_date = now.date()
            as_of = now
        else:
            as_of = start_of_day_utc(run_date)
        accrual_date = previous_day(run_date)

        with self.uow_factory() as uow:
            account_ids = [a.id for a in uow.accounts.get_flexible_savings_accounts()]

        logger.info(
            "Interest accrual started",
            extra={
                "step": "accrual_start",
                "accrual_date": accrual_date.isoformat(),
                "accounts": len(account_ids),
                "workers": self.max_workers,
            },
        )

        summary = AccrualSummary(run_date=run_date, accrual_date=accrual_date)
        for account_id, status, detail in self._run_accruals(account_ids, accrual_date, as_of):
            if status == "credited":
                summary.credited.append(detail)
            elif status == "skipped":
                summary.skipped[account_id] = detail
            else:
                summary.failed[account_id] = detail

        duration = time.time() - start_time
        accrual_duration_histogram.observe(duration)
        record_accrual(len(summary.credited), len(summary.skipped), len(summary.failed), summary.total_interest)
        log_accrual_summary(summary, duration * 1000)
        return summary

    def _run_accruals(self, account_ids: List[str], accrual_date: date, as_of: datetime):
        if self.max_workers == 1:
            for account_id in account_ids:
                yield self._accrue_safely(account_id, accrual_date, as_of)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="accrual") as pool:
            futures = [
                pool.submit(self._accrue_safely, account_id, accrual_date, as_of)
                for account_id in account_ids
            ]
            for future in as_completed(futures):
                yield future.result()

    def _accrue_safely(self, account_id: str, accrual_date: date, as_of: datetime) -> Tuple[str, str, object]:
        try:
            status, detail = self._accrue_account(account_id, accrual_date, as_of)
        except Exception as e:
            logger.exception(
                "Interest accrual failed",
                extra={"step": "accrual_failed", "account_id": account_id, "accrual_date": accrual_date.isoformat()},
            )
            return account_id, "failed", f"{type(e).__name__}: {e}"
        return account_id, status, detail

    def _accrue_account(self, account_id: str, accrual_date: date, as_of: datetime):
        with self.uow_factory() as uow:
            if uow.interest_history.exists(account_id, accrual_date):
                return "skipped", SKIP_ALREADY_ACCRUED

            account = uow.accounts.get_by_id(account_id)
            interest = calculate_daily_interest(account.balance, account.created_at, as_of)
            if interest == 0:
                return "skipped", SKIP_ZERO_INTEREST

            new_balance = account.balance + interest
            uow.accounts.update_balance(account.id, new_balance)
            uow.transactions.create(new_interest_transaction(account.id, interest, new_balance))
            try:
                uow.interest_history.create(new_interest_history(account.id, accrual_date, interest))
            except DuplicateAccrualError:
                # A concurrent run recorded this date first
                uow.rollback()
                return "skipped", SKIP_ALREADY_ACCRUED

            uow.commit()

        logger.debug(
            "Interest credited",
            extra={"account_id": account_id, "interest": str(interest), "balance_after": str(new_balance)},
        )
        return "credited", AccrualOutcome(account_id=account_id, interest=interest, balance_after=new_balance)

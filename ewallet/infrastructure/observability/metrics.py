"""Prometheus metrics for account openings and interest accrual"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Account metrics
accounts_created_counter = Counter(
    "ewallet_accounts_created_total",
    "Accounts opened",
    ["account_type"],  # payment | savings_fixed | savings_flexible
)

account_rejections_counter = Counter(
    "ewallet_account_rejections_total",
    "Account opening requests refused by policy or prerequisites",
    ["reason"],
)

# Accrual metrics
accrual_outcome_counter = Counter(
    "ewallet_interest_accrual_accounts_total",
    "Accounts visited by the daily interest run",
    ["outcome"],  # credited | skipped | failed
)

interest_credited_counter = Counter(
    "ewallet_interest_credited_total",
    "Interest credited to flexible savings accounts",
)

accrual_duration_histogram = Histogram(
    "ewallet_interest_accrual_duration_seconds",
    "Wall time of one daily interest run",
    buckets=[1, 5, 15, 30, 60, 120, 300, 600],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_account_created(account_type: str) -> None:
    accounts_created_counter.labels(account_type=account_type).inc()


def record_account_rejected(reason: str) -> None:
    account_rejections_counter.labels(reason=reason).inc()


def record_accrual(credited: int, skipped: int, failed: int, total_interest: Decimal) -> None:
    """Record per-run accrual counts and the interest paid out"""
    accrual_outcome_counter.labels(outcome="credited").inc(credited)
    accrual_outcome_counter.labels(outcome="skipped").inc(skipped)
    accrual_outcome_counter.labels(outcome="failed").inc(failed)
    interest_credited_counter.inc(float(total_interest))

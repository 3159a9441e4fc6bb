"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from ewallet.config import settings
from ewallet.domain.models import Account, AccrualSummary

logger = logging.getLogger(__name__)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO", format_type: str = "json") -> None:
    """Configure root logging; "json" for production, "standard" for terminals"""
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format_type == "json":
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # Reduce noise from external libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def log_account_created(account: Account) -> None:
    logger.info(
        "Account created",
        extra={
            "step": "account_created",
            "user_id": account.user_id,
            "account_id": account.id,
            "account_type": account.account_type.value,
        },
    )


def log_accrual_summary(summary: AccrualSummary, duration_ms: float) -> None:
    """Log the outcome of a daily interest run for operator follow-up"""
    level = logging.INFO if summary.ok else logging.ERROR
    logger.log(
        level,
        "Interest accrual completed",
        extra={
            "step": "accrual_complete",
            "run_date": summary.run_date.isoformat(),
            "accrual_date": summary.accrual_date.isoformat(),
            "credited": len(summary.credited),
            "skipped": len(summary.skipped),
            "failed": len(summary.failed),
            "failed_account_ids": sorted(summary.failed),
            "total_interest": str(summary.total_interest),
            "duration_ms": duration_ms,
        },
    )

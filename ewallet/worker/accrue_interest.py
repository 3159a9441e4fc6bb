"""Daily interest worker: run one accrual pass and exit non-zero on any failure"""

import argparse
import logging
import sys
from datetime import date
from typing import Callable, List, Optional

from ewallet.application.account_service import AccountService
from ewallet.config import settings
from ewallet.domain.ports import UnitOfWork
from ewallet.infrastructure.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Credit one day of interest to flexible savings accounts")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Run date (YYYY-MM-DD); interest is attributed to the day before. Default: today",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.accrual_max_workers,
        help="Parallel accrual workers (default: %(default)s)",
    )
    return parser.parse_args(argv)


def run(
    argv: Optional[List[str]] = None,
    uow_factory: Optional[Callable[[], UnitOfWork]] = None,
) -> int:
    """Returns the process exit code"""
    args = parse_args(argv)

    if uow_factory is None:
        from ewallet.infrastructure.database.unit_of_work import SqlAlchemyUnitOfWork

        uow_factory = SqlAlchemyUnitOfWork

    service = AccountService(uow_factory, max_workers=args.workers)
    try:
        summary = service.calculate_daily_interest(run_date=args.date)
    except Exception:
        logger.exception("Interest accrual aborted")
        return 1

    if not summary.ok:
        logger.error(
            "Interest accrual finished with failures",
            extra={"failed_account_ids": sorted(summary.failed)},
        )
        return 1

    logger.info("Interest calculation completed successfully")
    return 0


def main() -> None:
    setup_logging(settings.log_level, settings.log_format)
    sys.exit(run())


if __name__ == "__main__":
    main()

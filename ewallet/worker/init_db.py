"""Create the wallet schema on the configured database"""

import logging

from sqlalchemy.engine import Engine

from ewallet.config import settings
from ewallet.infrastructure.database.models import Base
from ewallet.infrastructure.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def init_db(bind: Engine) -> None:
    """Create missing tables, indexes and constraints (existing ones are left alone)"""
    Base.metadata.create_all(bind=bind)
    logger.info("Schema ready", extra={"tables": sorted(Base.metadata.tables)})


def main() -> None:
    from ewallet.infrastructure.database.session import engine

    setup_logging(settings.log_level, settings.log_format)
    init_db(engine)


if __name__ == "__main__":
    main()

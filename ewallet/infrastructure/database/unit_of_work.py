"""SQLAlchemy-backed unit of work: one session, one database transaction"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ewallet.domain.exceptions import RepositoryError
from ewallet.infrastructure.database.repositories import (
    AccountRepository,
    InterestHistoryRepository,
    ProfileRepository,
    TransactionRepository,
    UserRepository,
)
from ewallet.infrastructure.database.session import SessionLocal


class SqlAlchemyUnitOfWork:
    """
    Repositories bound to a single session.

    Uncommitted writes are discarded when the block exits, and rolled back
    explicitly when it exits with an exception.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.users = UserRepository(self.session)
        self.profiles = ProfileRepository(self.session)
        self.accounts = AccountRepository(self.session)
        self.transactions = TransactionRepository(self.session)
        self.interest_history = InterestHistoryRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryError(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        self.session.rollback()

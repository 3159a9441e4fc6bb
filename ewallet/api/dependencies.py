"""Dependency injection for FastAPI endpoints"""

from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request

from ewallet.application.account_service import AccountService
from ewallet.config import settings
from ewallet.domain.ports import UnitOfWork
from ewallet.infrastructure.database.unit_of_work import SqlAlchemyUnitOfWork


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Authenticated caller, set by the auth gateway in front of this service"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-ID header")
    return x_user_id


def get_uow_factory() -> Callable[[], UnitOfWork]:
    """Provide the unit-of-work factory bound to the configured database"""
    return SqlAlchemyUnitOfWork


def get_account_service(uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory)) -> AccountService:
    return AccountService(uow_factory, max_workers=settings.accrual_max_workers)

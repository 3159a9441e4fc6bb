"""Account endpoints: open payment/savings accounts and list a user's accounts"""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request

from ewallet.api.dependencies import get_account_service, get_request_id, get_user_id
from ewallet.api.v1.schemas import AccountListResponse, AccountResponse, CreateFixedSavingsRequest
from ewallet.application.account_service import AccountService
from ewallet.domain.exceptions import (
    AccountLimitError,
    DomainException,
    InvalidTermMonthsError,
    NotFoundError,
    ProfileIncompleteError,
    RepositoryError,
)

router = APIRouter()


def raise_http_error(e: DomainException, request_id: str) -> NoReturn:
    """Translate a domain failure into the matching HTTP status"""
    if isinstance(e, NotFoundError):
        logging.warning(f"Not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e)) from e
    if isinstance(e, ProfileIncompleteError):
        logging.warning(f"Profile incomplete: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail=str(e)) from e
    if isinstance(e, AccountLimitError):
        logging.warning(f"Account limit reached: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e)) from e
    if isinstance(e, InvalidTermMonthsError):
        raise HTTPException(status_code=400, detail=str(e)) from e
    if isinstance(e, RepositoryError):
        logging.error(f"Repository error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error") from e
    logging.error(f"Unexpected domain error: {e}", extra={"request_id": request_id})
    raise HTTPException(status_code=500, detail="Internal server error") from e


@router.post("/accounts/payment", response_model=AccountResponse, status_code=201)
def create_payment_account(
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AccountService = Depends(get_account_service),
):
    """Open the user's single payment account"""
    try:
        account = service.create_payment_account(user_id)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return AccountResponse.from_domain(account)


@router.post("/accounts/savings/fixed", response_model=AccountResponse, status_code=201)
def create_fixed_savings_account(
    request_body: CreateFixedSavingsRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AccountService = Depends(get_account_service),
):
    """
    Open a fixed-term savings account.

    The annual rate is locked in from the term: 1→0.6%, 3→1.8%, 6→3.6%,
    8→4.8%, 12→7.2%.
    """
    try:
        account = service.create_fixed_savings_account(user_id, request_body.term_months)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return AccountResponse.from_domain(account)


@router.post("/accounts/savings/flexible", response_model=AccountResponse, status_code=201)
def create_flexible_savings_account(
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AccountService = Depends(get_account_service),
):
    """Open a flexible savings account with tiered daily interest"""
    try:
        account = service.create_flexible_savings_account(user_id)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return AccountResponse.from_domain(account)


@router.get("/accounts", response_model=AccountListResponse)
def list_accounts(
    request: Request,
    user_id: str = Depends(get_user_id),
    service: AccountService = Depends(get_account_service),
):
    try:
        accounts = service.list_accounts(user_id)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return AccountListResponse(
        user_id=user_id,
        accounts=[AccountResponse.from_domain(a) for a in accounts],
    )

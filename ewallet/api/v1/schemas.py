"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt

from ewallet.domain.models import Account


class CreateFixedSavingsRequest(BaseModel):
    """Request body for POST /v1/accounts/savings/fixed"""

    # JSON true, "3" and 3.0 are not terms
    term_months: StrictInt = Field(..., description="Term in months: 1, 3, 6, 8 or 12")


class AccountResponse(BaseModel):
    """Account as returned to clients"""

    id: str
    user_id: str
    account_type: str
    account_number: str
    balance: Decimal
    interest_rate: Optional[Decimal] = None
    fixed_term_months: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            user_id=account.user_id,
            account_type=account.account_type.value,
            account_number=account.account_number,
            balance=account.balance,
            interest_rate=account.interest_rate,
            fixed_term_months=account.fixed_term_months,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class AccountListResponse(BaseModel):
    """Response for GET /v1/accounts"""

    user_id: str
    accounts: List[AccountResponse]

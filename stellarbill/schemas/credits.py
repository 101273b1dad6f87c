"""Credit ledger schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stellarbill.core.shared_models import CreditTransactionKind


class CreditBalanceResponse(BaseModel):
    """Balance of one (customer, product)."""

    customer_id: str
    product_id: str
    balance: int


class CreditTransactionCreate(BaseModel):
    """Schema for recording a credit movement.

    For a ``debit`` the amount is raw usage, converted to credits with the
    product's unit divisor and units per credit. For a ``grant`` it is a
    whole number of credits.
    """

    kind: CreditTransactionKind = CreditTransactionKind.DEBIT
    amount: Decimal = Field(..., gt=0)


class CreditTransactionResponse(BaseModel):
    """Schema for a credit transaction returned by the API."""

    id: str
    customer_id: str
    product_id: str
    amount: int
    kind: CreditTransactionKind
    checkout_id: Optional[str] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CreditTransactionResult(BaseModel):
    """Outcome of recording a credit movement.

    ``transaction`` is None when the usage rounded to zero credits.
    """

    transaction: Optional[CreditTransactionResponse] = None
    balance: int

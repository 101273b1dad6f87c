"""Checkout schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stellarbill.core.shared_models import CheckoutStatus, Network


class CheckoutCreate(BaseModel):
    """Schema for creating a checkout."""

    product_id: str
    customer_id: str
    amount: Optional[Decimal] = Field(
        default=None, description="Amount to charge; defaults to the product price"
    )
    expires_at: Optional[datetime] = None
    wallet_address: Optional[str] = Field(
        default=None, description="Customer wallet, remembered for recurring charges"
    )


class CheckoutResponse(BaseModel):
    """Schema for a checkout returned by the API."""

    id: str
    organization_id: str
    environment: Network
    product_id: str
    customer_id: str
    amount: Decimal
    status: CheckoutStatus
    transaction_hash: Optional[str] = None
    wallet_address: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CheckoutStatusResponse(BaseModel):
    """Current status of a checkout, as seen by the polling checkout page."""

    status: CheckoutStatus

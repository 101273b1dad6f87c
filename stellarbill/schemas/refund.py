"""Refund schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from stellarbill.core.shared_models import Network, RefundStatus
from stellarbill.domains.refunds.types import RefundRequest

__all__ = ["RefundRequest", "RefundResponse", "RefundSettlementUpdate"]


class RefundSettlementUpdate(BaseModel):
    """Settlement reported by the external refund processor."""

    status: RefundStatus
    transaction_hash: Optional[str] = None


class RefundResponse(BaseModel):
    """Schema for a refund returned by the API."""

    id: str
    organization_id: str
    environment: Network
    payment_id: str
    customer_id: str
    amount: Decimal
    wallet_address: str
    reason: Optional[str] = None
    status: RefundStatus
    transaction_hash: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

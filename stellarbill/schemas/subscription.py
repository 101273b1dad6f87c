"""Subscription schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from stellarbill.core.shared_models import Network, SubscriptionStatus


class SubscriptionResponse(BaseModel):
    """Schema for a subscription returned by the API."""

    id: str
    organization_id: str
    environment: Network
    customer_id: str
    product_id: str
    wallet_address: Optional[str] = None
    status: SubscriptionStatus
    current_period_end: datetime
    failed_charge_count: int = 0

    model_config = ConfigDict(from_attributes=True)

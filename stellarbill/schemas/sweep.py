"""Cron sweep report schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from stellarbill.core.shared_models import CheckoutStatus
from stellarbill.domains.subscriptions.types import ChargeOutcomeKind


class ChargeOutcomeSchema(BaseModel):
    """What the charge sweep did with one subscription."""

    subscription_id: str
    kind: ChargeOutcomeKind
    transaction_hash: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ChargeSweepResponse(BaseModel):
    """Report of one ``/cron/charge`` run."""

    processed: int
    summary: dict[str, int]
    outcomes: list[ChargeOutcomeSchema]


class CheckoutSweepOutcomeSchema(BaseModel):
    """Result of refreshing one open checkout."""

    checkout_id: str
    status: Optional[CheckoutStatus] = None
    error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CheckoutSweepResponse(BaseModel):
    """Report of one ``/cron/sweep-checkouts`` run."""

    total: int
    succeeded: int
    failed: int
    outcomes: list[CheckoutSweepOutcomeSchema]

    model_config = ConfigDict(from_attributes=True)

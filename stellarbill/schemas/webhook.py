"""Inbound chain webhook schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stellarbill.core.shared_models import CheckoutStatus


class StellarWebhookPayload(BaseModel):
    """Body of a ``/stellar-webhook`` notification.

    Field names follow the notifier's camelCase wire format.
    """

    api_key: str = Field(..., alias="apiKey")
    checkout_id: str = Field(..., alias="checkoutId")
    transaction_hash: Optional[str] = Field(default=None, alias="transactionHash")
    public_key: Optional[str] = Field(
        default=None,
        alias="publicKey",
        description="Stellar account the notification claims to be signed for",
    )

    model_config = ConfigDict(populate_by_name=True)


class StellarWebhookResponse(BaseModel):
    """Acknowledgement of an applied notification."""

    received: bool = True
    checkout_id: str
    status: CheckoutStatus

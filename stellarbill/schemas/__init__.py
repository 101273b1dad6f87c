"""Request and response schemas of the HTTP surface."""

from stellarbill.schemas.checkout import (
    CheckoutCreate,
    CheckoutResponse,
    CheckoutStatusResponse,
)
from stellarbill.schemas.credits import (
    CreditBalanceResponse,
    CreditTransactionCreate,
    CreditTransactionResponse,
    CreditTransactionResult,
)
from stellarbill.schemas.payout import (
    PayoutRequest,
    PayoutResponse,
    PayoutSettlementUpdate,
)
from stellarbill.schemas.refund import (
    RefundRequest,
    RefundResponse,
    RefundSettlementUpdate,
)
from stellarbill.schemas.subscription import SubscriptionResponse
from stellarbill.schemas.sweep import (
    ChargeOutcomeSchema,
    ChargeSweepResponse,
    CheckoutSweepOutcomeSchema,
    CheckoutSweepResponse,
)
from stellarbill.schemas.webhook import StellarWebhookPayload, StellarWebhookResponse

__all__ = [
    "ChargeOutcomeSchema",
    "ChargeSweepResponse",
    "CheckoutCreate",
    "CheckoutResponse",
    "CheckoutStatusResponse",
    "CheckoutSweepOutcomeSchema",
    "CheckoutSweepResponse",
    "CreditBalanceResponse",
    "CreditTransactionCreate",
    "CreditTransactionResponse",
    "CreditTransactionResult",
    "PayoutRequest",
    "PayoutResponse",
    "PayoutSettlementUpdate",
    "RefundRequest",
    "RefundResponse",
    "RefundSettlementUpdate",
    "StellarWebhookPayload",
    "StellarWebhookResponse",
    "SubscriptionResponse",
]

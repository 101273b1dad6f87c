"""Shared models for the backend."""

from enum import Enum


class Network(str, Enum):
    """Chain network an organization operates on.

    Together with the organization id this forms the isolation boundary:
    no row or query ever crosses networks.
    """

    TESTNET = "testnet"
    MAINNET = "mainnet"


class CheckoutStatus(str, Enum):
    """Checkout status enum."""

    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed."""
        return self in (CheckoutStatus.SUCCEEDED, CheckoutStatus.FAILED, CheckoutStatus.EXPIRED)


class SubscriptionStatus(str, Enum):
    """Subscription status enum."""

    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    PAUSED = "paused"


class PayoutStatus(str, Enum):
    """Payout status enum."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RefundStatus(str, Enum):
    """Refund status enum."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentStatus(str, Enum):
    """Status of a recorded payment (checkout settlement or recurring charge)."""

    CONFIRMED = "confirmed"
    FAILED = "failed"


class CreditTransactionKind(str, Enum):
    """Credit ledger entry kind."""

    GRANT = "grant"
    DEBIT = "debit"


class ChainObservation(str, Enum):
    """What the chain reports for a transaction hash.

    UNKNOWN is an ambiguous read (timeout, malformed response) and must never
    be treated as FAILED.
    """

    UNSEEN = "unseen"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    UNKNOWN = "unknown"

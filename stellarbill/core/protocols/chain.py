"""Chain client protocol.

The core consumes the Stellar network as an opaque capability: read the
status of a transaction hash, and drive subscriptions through the
subscription-engine contract. Concrete clients live in adapters/chain.

Failures are raised as ``ChainError`` subclasses from core.exceptions:
- ChainUnavailableError / ChainTimeoutError: transient, retry on a later sweep
- ChainRejectedError: terminal for this attempt
- PeriodNotEndedError: the contract says the period is already paid
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from stellarbill.core.shared_models import ChainObservation, Network

SubmitHook = Callable[[str], Awaitable[None]]
"""Called with the signed transaction hash right before it is sent."""


@dataclass(frozen=True)
class ChargeReceipt:
    """Successful contract charge.

    ``period_end`` and ``amount`` are taken from the contract's payment event
    when it emits one; either may be None.
    """

    transaction_hash: str
    amount: Optional[Decimal] = None
    period_end: Optional[datetime] = None


class SubscriptionAction(str, Enum):
    """Contract functions changing a subscription's on-chain state."""

    PAUSE = "pause"
    RESUME = "resume"
    CANCEL = "cancel"


@runtime_checkable
class ChainClient(Protocol):
    """Read transaction state and drive subscriptions on one network."""

    async def get_transaction_status(self, transaction_hash: str) -> ChainObservation:
        """Return what the chain currently reports for ``transaction_hash``.

        Ambiguous reads return ChainObservation.UNKNOWN rather than raising.
        """
        ...

    async def charge_subscription(
        self,
        wallet_address: str,
        product_id: str,
        idempotency_key: str,
        on_submit: Optional[SubmitHook] = None,
    ) -> ChargeReceipt:
        """Charge ``wallet_address`` for ``product_id`` through the contract.

        ``on_submit`` receives the transaction hash before anything is sent;
        if it raises, nothing is sent. A caller that persists that hash can
        resolve an attempt whose outcome it never saw with get_charge_receipt.
        """
        ...

    async def get_charge_receipt(self, transaction_hash: str) -> Optional[ChargeReceipt]:
        """Outcome of a previously submitted charge.

        Returns None when the chain has no record of the transaction.

        Raises:
            ChainRejectedError: the transaction landed and failed.
        """
        ...

    async def set_subscription_state(
        self, wallet_address: str, product_id: str, action: SubscriptionAction
    ) -> str:
        """Pause, resume or cancel a subscription on chain; returns the tx hash."""
        ...

    @property
    def can_charge(self) -> bool:
        """Whether this client holds a signing key able to submit contract calls."""
        ...


@runtime_checkable
class ChainClientRegistry(Protocol):
    """Resolve the chain client for a network."""

    def for_network(self, network: Network) -> ChainClient:
        """Return the client bound to ``network``."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the clients."""
        ...

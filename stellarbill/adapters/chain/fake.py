"""Fake chain client for testing.

Outcomes are scripted per transaction hash (status reads) and per wallet
(charges). Every call is recorded so tests can assert what reached the chain.
"""

import asyncio
import itertools
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from stellarbill.core.exceptions import ChainError, ChainRejectedError
from stellarbill.core.protocols.chain import ChargeReceipt, SubmitHook, SubscriptionAction
from stellarbill.core.shared_models import ChainObservation, Network

ChargeOutcome = Union[ChargeReceipt, ChainError]

_tx_counter = itertools.count(1)


class FakeChainClient:
    """In-memory ChainClient.

    A successful charge "lands" before it returns: its receipt stays
    retrievable through get_charge_receipt even when the caller stopped
    waiting (see ``hang_after_submit``).

    Usage:
        chain = FakeChainClient()
        chain.script_status("tx_1", ChainObservation.CONFIRMED)
        chain.script_charge("GWALLET", ChainRejectedError("insufficient balance"))
    """

    def __init__(self, can_charge: bool = True) -> None:
        """Initialize with no scripted outcomes.

        Unscripted hashes read as UNSEEN; unscripted wallets charge successfully.
        """
        self._statuses: dict[str, list[ChainObservation]] = {}
        self._charges: dict[str, list[ChargeOutcome]] = {}
        self._state_errors: dict[str, ChainError] = {}
        self._landed: dict[str, Union[ChargeReceipt, ChainRejectedError]] = {}
        self._can_charge = can_charge
        self._calls: list[tuple] = []
        self.hang_after_submit = False

    @property
    def can_charge(self) -> bool:
        """Whether contract calls are enabled."""
        return self._can_charge

    def script_status(self, transaction_hash: str, *observations: ChainObservation) -> None:
        """Script successive reads; the last one repeats."""
        self._statuses[transaction_hash] = list(observations)

    def script_charge(self, wallet_address: str, *outcomes: ChargeOutcome) -> None:
        """Script successive charge outcomes for a wallet; the last one repeats."""
        self._charges[wallet_address] = list(outcomes)

    def script_state_change(self, wallet_address: str, error: ChainError) -> None:
        """Make pause/resume/cancel for ``wallet_address`` raise ``error``."""
        self._state_errors[wallet_address] = error

    def land(
        self, outcome: Union[ChargeReceipt, ChainRejectedError], transaction_hash: str
    ) -> None:
        """Record ``outcome`` as what the chain holds for ``transaction_hash``."""
        self._landed[transaction_hash] = outcome

    async def get_transaction_status(self, transaction_hash: str) -> ChainObservation:
        """Return the next scripted observation."""
        self._calls.append(("get_transaction_status", transaction_hash))
        return _next(self._statuses.get(transaction_hash), ChainObservation.UNSEEN)

    async def charge_subscription(
        self,
        wallet_address: str,
        product_id: str,
        idempotency_key: str,
        on_submit: Optional[SubmitHook] = None,
    ) -> ChargeReceipt:
        """Return or raise the next scripted outcome for the wallet.

        A scripted ChainRejectedError carrying an amount failed on chain after
        submission; any other scripted error fails before anything is sent.
        """
        outcome = _next(
            self._charges.get(wallet_address),
            ChargeReceipt(transaction_hash=f"tx_{next(_tx_counter)}", amount=Decimal("10")),
        )
        if isinstance(outcome, ChainError) and not _lands(outcome):
            self._calls.append(("charge_subscription", wallet_address, product_id, idempotency_key))
            raise outcome

        tx_hash = (
            outcome.transaction_hash
            if isinstance(outcome, ChargeReceipt)
            else f"tx_{next(_tx_counter)}"
        )
        if on_submit is not None:
            await on_submit(tx_hash)
        self._calls.append(("charge_subscription", wallet_address, product_id, idempotency_key))
        self.land(outcome, tx_hash)

        if self.hang_after_submit:
            await asyncio.Event().wait()
        if isinstance(outcome, ChainError):
            raise outcome
        return outcome

    async def get_charge_receipt(self, transaction_hash: str) -> Optional[ChargeReceipt]:
        """What landed for ``transaction_hash``; None when nothing did."""
        self._calls.append(("get_charge_receipt", transaction_hash))
        landed = self._landed.get(transaction_hash)
        if isinstance(landed, ChainError):
            raise landed
        return landed

    async def set_subscription_state(
        self, wallet_address: str, product_id: str, action: SubscriptionAction
    ) -> str:
        """Record the call; raises what script_state_change set for the wallet."""
        self._calls.append(("set_subscription_state", wallet_address, product_id, action))
        error = self._state_errors.get(wallet_address)
        if error is not None:
            raise error
        return f"tx_{next(_tx_counter)}"

    # Test helpers

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    def charged_wallets(self) -> list[str]:
        """Wallets that reached charge_subscription, in call order."""
        return [c[1] for c in self._calls if c[0] == "charge_subscription"]

    def idempotency_keys(self) -> list[str]:
        """Idempotency keys passed to charge_subscription, in call order."""
        return [c[3] for c in self._calls if c[0] == "charge_subscription"]

    def state_changes(self) -> list[SubscriptionAction]:
        """Actions passed to set_subscription_state, in call order."""
        return [c[3] for c in self._calls if c[0] == "set_subscription_state"]


def _lands(error: ChainError) -> bool:
    """Whether a scripted failure happens on chain rather than before submission."""
    return isinstance(error, ChainRejectedError) and error.amount is not None


def receipt(
    transaction_hash: str,
    amount: Optional[Decimal] = Decimal("10"),
    period_end: Optional[datetime] = None,
) -> ChargeReceipt:
    """Shorthand for scripting a successful charge."""
    return ChargeReceipt(transaction_hash=transaction_hash, amount=amount, period_end=period_end)


def _next(script: Optional[list], default):
    if not script:
        return default
    if len(script) > 1:
        return script.pop(0)
    return script[0]


class FakeChainClientRegistry:
    """Registry returning one FakeChainClient per network."""

    def __init__(self, client: Optional[FakeChainClient] = None) -> None:
        """Share ``client`` across networks unless per-network clients are set."""
        self._default = client or FakeChainClient()
        self._clients: dict[Network, FakeChainClient] = {}
        self.closed = False

    def set(self, network: Network, client: FakeChainClient) -> None:
        """Bind a dedicated client to ``network``."""
        self._clients[network] = client

    def for_network(self, network: Network) -> FakeChainClient:
        """Return the client for ``network``."""
        return self._clients.get(Network(network), self._default)

    async def aclose(self) -> None:
        """Record the close; nothing to release."""
        self.closed = True

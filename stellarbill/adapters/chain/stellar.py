"""Stellar chain client.

Transaction status is read from Horizon over httpx; charges go through
the Soroban subscription contract (see soroban.py). One client is bound
to one network; the registry hands out the client for a network.
"""

import logging
from typing import Optional

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from stellarbill.adapters.chain.soroban import SorobanSubscriptionContract
from stellarbill.core.config import Settings
from stellarbill.core.exceptions import ChainRejectedError
from stellarbill.core.protocols.chain import (
    ChainClient,
    ChargeReceipt,
    SubmitHook,
    SubscriptionAction,
)
from stellarbill.core.shared_models import ChainObservation, Network

logger = logging.getLogger(__name__)


def _is_transient(exception: BaseException) -> bool:
    """Timeouts, connection failures, 429 and 5xx are worth another attempt."""
    if isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        return status == 429 or status >= 500
    return isinstance(exception, (httpx.TimeoutException, httpx.TransportError))


class StellarChainClient(ChainClient):
    """Chain client for a single Stellar network."""

    def __init__(
        self,
        network: Network,
        horizon_url: str,
        http_client: httpx.AsyncClient,
        contract: Optional[SorobanSubscriptionContract] = None,
    ) -> None:
        """Initialize with a Horizon endpoint and an optional contract adapter."""
        self._network = network
        self._horizon_url = horizon_url.rstrip("/")
        self._http = http_client
        self._contract = contract

    @property
    def can_charge(self) -> bool:
        """Charges need a keeper secret and a contract id."""
        return self._contract is not None

    @retry(
        stop=stop_after_attempt(3),
        retry=retry_if_exception(_is_transient),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    async def _fetch_transaction(self, transaction_hash: str) -> httpx.Response:
        response = await self._http.get(f"{self._horizon_url}/transactions/{transaction_hash}")
        if response.status_code == 429 or response.status_code >= 500:
            response.raise_for_status()
        return response

    async def get_transaction_status(self, transaction_hash: str) -> ChainObservation:
        """Read a transaction from Horizon.

        Horizon only serves transactions included in a closed ledger; a 404
        is UNSEEN, so a checkout whose hash never lands still expires.
        Transport failures yield UNKNOWN.
        """
        try:
            response = await self._fetch_transaction(transaction_hash)
        except (httpx.HTTPStatusError, httpx.TimeoutException, httpx.TransportError) as e:
            logger.warning(
                "Horizon read failed for %s on %s: %s", transaction_hash, self._network.value, e
            )
            return ChainObservation.UNKNOWN

        if response.status_code == 404:
            return ChainObservation.UNSEEN
        if response.status_code != 200:
            logger.warning(
                "Horizon returned %s for %s", response.status_code, transaction_hash
            )
            return ChainObservation.UNKNOWN

        successful = response.json().get("successful")
        if successful is True:
            return ChainObservation.CONFIRMED
        if successful is False:
            return ChainObservation.FAILED
        return ChainObservation.UNKNOWN

    def _require_contract(self) -> SorobanSubscriptionContract:
        if self._contract is None:
            raise ChainRejectedError(
                f"Contract calls are not configured for {self._network.value} "
                "(missing keeper secret or contract id)"
            )
        return self._contract

    async def charge_subscription(
        self,
        wallet_address: str,
        product_id: str,
        idempotency_key: str,
        on_submit: Optional[SubmitHook] = None,
    ) -> ChargeReceipt:
        """Charge through the subscription contract."""
        return await self._require_contract().charge(
            wallet_address, product_id, idempotency_key, on_submit=on_submit
        )

    async def get_charge_receipt(self, transaction_hash: str) -> Optional[ChargeReceipt]:
        """Look up a charge submitted earlier."""
        return await self._require_contract().lookup_charge(transaction_hash)

    async def set_subscription_state(
        self, wallet_address: str, product_id: str, action: SubscriptionAction
    ) -> str:
        """Invoke the contract's pause, resume or cancel function."""
        return await self._require_contract().invoke(
            SubscriptionAction(action).value, wallet_address, product_id
        )


class StellarChainClientRegistry:
    """Builds and caches one StellarChainClient per network."""

    def __init__(self, settings: Settings) -> None:
        """Initialize from settings; clients are created on first use."""
        self._settings = settings
        self._clients: dict[Network, StellarChainClient] = {}
        self._http = httpx.AsyncClient(timeout=settings.CHAIN_REQUEST_TIMEOUT_SECONDS)

    def for_network(self, network: Network) -> StellarChainClient:
        """Return the client bound to ``network``."""
        network = Network(network)
        if network not in self._clients:
            self._clients[network] = StellarChainClient(
                network=network,
                horizon_url=self._settings.horizon_url(network.value),
                http_client=self._http,
                contract=self._build_contract(network),
            )
        return self._clients[network]

    def _build_contract(self, network: Network) -> Optional[SorobanSubscriptionContract]:
        contract_id = self._settings.subscription_contract_id(network.value)
        if not self._settings.KEEPER_SECRET or not contract_id:
            logger.info("Subscription contract calls disabled on %s", network.value)
            return None
        return SorobanSubscriptionContract(
            network=network,
            rpc_url=self._settings.soroban_rpc_url(network.value),
            contract_id=contract_id,
            keeper_secret=self._settings.KEEPER_SECRET,
            confirm_timeout_seconds=self._settings.CHARGE_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        await self._http.aclose()

"""Subscription contract calls over Soroban RPC.

The stellar-sdk Soroban server is synchronous, so calls run in worker
threads. A charge hands its hash to the caller before sending it, so a
charge whose confirmation was never seen can be looked up later instead
of being submitted again.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from stellar_sdk import Keypair, SorobanServer, TransactionBuilder, TransactionEnvelope, scval
from stellar_sdk import Network as StellarNetwork
from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.exceptions import AccountNotFoundException, PrepareTransactionException
from stellar_sdk.exceptions import ConnectionError as StellarConnectionError
from stellar_sdk.exceptions import SorobanRpcErrorResponse
from stellar_sdk.soroban_rpc import (
    GetTransactionResponse,
    GetTransactionStatus,
    SendTransactionStatus,
)

from stellarbill.core.exceptions import (
    ChainRejectedError,
    ChainTimeoutError,
    ChainUnavailableError,
    PeriodNotEndedError,
)
from stellarbill.core.protocols.chain import ChargeReceipt, SubmitHook
from stellarbill.core.shared_models import Network

logger = logging.getLogger(__name__)

PAYMENT_EVENT_TOPIC = "sub_pay"
BASE_FEE = 100
TX_TIMEOUT_SECONDS = 30
POLL_INTERVAL_SECONDS = 1.0
PERIOD_NOT_ENDED = "Period not ended"


def network_passphrase(network: Network) -> str:
    """Stellar network passphrase for ``network``."""
    if network == Network.TESTNET:
        return StellarNetwork.TESTNET_NETWORK_PASSPHRASE
    return StellarNetwork.PUBLIC_NETWORK_PASSPHRASE


def parse_payment_event(
    result_meta_xdr: Optional[str],
) -> tuple[Optional[Decimal], Optional[datetime]]:
    """Extract (amount, period_end) from the contract's ``sub_pay`` event, if emitted."""
    if not result_meta_xdr:
        return None, None

    meta = stellar_xdr.TransactionMeta.from_xdr(result_meta_xdr)
    soroban_meta = meta.v3.soroban_meta if meta.v3 is not None else None
    if soroban_meta is None:
        return None, None

    for event in soroban_meta.events:
        body = event.body.v0
        if not body.topics or scval.to_native(body.topics[0]) != PAYMENT_EVENT_TOPIC:
            continue
        data: Any = scval.to_native(body.data)
        if not isinstance(data, dict):
            return None, None
        amount = data.get("amount")
        period_end = data.get("period_end", data.get("periodEnd"))
        return (
            Decimal(str(amount)) if amount is not None else None,
            datetime.fromtimestamp(int(period_end), tz=timezone.utc) if period_end else None,
        )
    return None, None


class SorobanSubscriptionContract:
    """Signs and submits subscription-engine calls with the keeper key.

    Every call is simulated, signed and sent from a worker thread; the
    transaction carries a ``TX_TIMEOUT_SECONDS`` time bound, so a hash the
    network has not seen once that bound has passed will never land.
    """

    def __init__(
        self,
        network: Network,
        rpc_url: str,
        contract_id: str,
        keeper_secret: str,
        confirm_timeout_seconds: float,
    ) -> None:
        """Bind to one network, contract and keeper account."""
        self._network = network
        self._server = SorobanServer(rpc_url)
        self._contract_id = contract_id
        self._keypair = Keypair.from_secret(keeper_secret)
        self._max_polls = max(1, int(confirm_timeout_seconds / POLL_INTERVAL_SECONDS))

    async def charge(
        self,
        wallet_address: str,
        product_id: str,
        idempotency_key: str,
        on_submit: Optional[SubmitHook] = None,
    ) -> ChargeReceipt:
        """Submit ``charge(wallet, product_id)`` and wait for its ledger.

        ``on_submit`` runs between signing and sending; the contract refuses a
        second charge inside one billing period.
        """
        tx = await asyncio.to_thread(self._prepare, "charge", wallet_address, product_id)
        tx_hash = tx.hash_hex()
        if on_submit is not None:
            await on_submit(tx_hash)
        logger.info("Submitting charge %s as %s", idempotency_key, tx_hash)

        result = await asyncio.to_thread(self._send_and_confirm, tx)
        amount, period_end = parse_payment_event(result.result_meta_xdr)
        return ChargeReceipt(transaction_hash=tx_hash, amount=amount, period_end=period_end)

    async def lookup_charge(self, transaction_hash: str) -> Optional[ChargeReceipt]:
        """One read of a charge submitted earlier. None when RPC has no record of it."""
        try:
            result = await asyncio.to_thread(self._server.get_transaction, transaction_hash)
        except (StellarConnectionError, SorobanRpcErrorResponse) as e:
            raise ChainUnavailableError(str(e)) from e

        if result.status == GetTransactionStatus.NOT_FOUND:
            return None
        amount, period_end = parse_payment_event(result.result_meta_xdr)
        if result.status == GetTransactionStatus.SUCCESS:
            return ChargeReceipt(
                transaction_hash=transaction_hash, amount=amount, period_end=period_end
            )
        raise ChainRejectedError(
            f"Charge transaction {transaction_hash} failed on chain", amount=amount
        )

    async def invoke(self, function_name: str, wallet_address: str, product_id: str) -> str:
        """Call a ``(customer, product_id)`` contract function; returns the tx hash."""
        tx = await asyncio.to_thread(self._prepare, function_name, wallet_address, product_id)
        await asyncio.to_thread(self._send_and_confirm, tx)
        return tx.hash_hex()

    def _prepare(
        self, function_name: str, wallet_address: str, product_id: str
    ) -> TransactionEnvelope:
        try:
            source = self._server.load_account(self._keypair.public_key)
            tx = (
                TransactionBuilder(
                    source_account=source,
                    network_passphrase=network_passphrase(self._network),
                    base_fee=BASE_FEE,
                )
                .set_timeout(TX_TIMEOUT_SECONDS)
                .append_invoke_contract_function_op(
                    contract_id=self._contract_id,
                    function_name=function_name,
                    parameters=[scval.to_address(wallet_address), scval.to_symbol(product_id)],
                )
                .build()
            )
            tx = self._server.prepare_transaction(tx)
        except PrepareTransactionException as e:
            error = e.simulate_transaction_response.error or ""
            if PERIOD_NOT_ENDED in error:
                raise PeriodNotEndedError(f"{function_name}: {PERIOD_NOT_ENDED}") from e
            raise ChainRejectedError(f"Contract simulation failed: {error}") from e
        except AccountNotFoundException as e:
            raise ChainRejectedError("Keeper account not found on chain") from e
        except (StellarConnectionError, SorobanRpcErrorResponse) as e:
            raise ChainUnavailableError(str(e)) from e

        tx.sign(self._keypair)
        return tx

    def _send_and_confirm(self, tx: TransactionEnvelope) -> GetTransactionResponse:
        try:
            sent = self._server.send_transaction(tx)
        except (StellarConnectionError, SorobanRpcErrorResponse) as e:
            # The transaction may or may not have reached the network.
            raise ChainTimeoutError(f"Submission outcome unknown: {e}") from e

        if sent.status == SendTransactionStatus.ERROR:
            raise ChainRejectedError(f"Transaction rejected: {sent.error_result_xdr}")
        if sent.status == SendTransactionStatus.TRY_AGAIN_LATER:
            raise ChainUnavailableError("Soroban RPC asked to try again later")

        for _ in range(self._max_polls):
            try:
                result = self._server.get_transaction(sent.hash)
            except (StellarConnectionError, SorobanRpcErrorResponse) as e:
                logger.warning("Polling %s failed: %s", sent.hash, e)
                time.sleep(POLL_INTERVAL_SECONDS)
                continue

            if result.status == GetTransactionStatus.NOT_FOUND:
                time.sleep(POLL_INTERVAL_SECONDS)
                continue
            if result.status == GetTransactionStatus.SUCCESS:
                return result
            amount, _ = parse_payment_event(result.result_meta_xdr)
            raise ChainRejectedError(f"Transaction {sent.hash} failed on chain", amount=amount)

        raise ChainTimeoutError(f"Transaction {sent.hash} not confirmed in time")

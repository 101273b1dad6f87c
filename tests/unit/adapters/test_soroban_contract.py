"""Unit tests for SorobanSubscriptionContract.

The Soroban RPC server is replaced by a MagicMock; transactions are built
and signed with the real SDK.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from stellar_sdk import Account, Keypair, StrKey
from stellar_sdk.exceptions import ConnectionError as StellarConnectionError
from stellar_sdk.exceptions import PrepareTransactionException
from stellar_sdk.soroban_rpc import GetTransactionStatus, SendTransactionStatus

from stellarbill.adapters.chain.soroban import SorobanSubscriptionContract
from stellarbill.core.exceptions import (
    ChainRejectedError,
    ChainUnavailableError,
    PeriodNotEndedError,
)
from stellarbill.core.shared_models import Network

KEEPER = Keypair.random()
WALLET = Keypair.random().public_key
CONTRACT_ID = StrKey.encode_contract(bytes(32))


def _make_contract(server: MagicMock) -> SorobanSubscriptionContract:
    contract = SorobanSubscriptionContract(
        network=Network.TESTNET,
        rpc_url="https://soroban.test",
        contract_id=CONTRACT_ID,
        keeper_secret=KEEPER.secret,
        confirm_timeout_seconds=5,
    )
    contract._server = server
    return contract


def _server(events: list, tx_status=GetTransactionStatus.SUCCESS) -> MagicMock:
    server = MagicMock()
    server.load_account.return_value = Account(KEEPER.public_key, 1)
    server.prepare_transaction.side_effect = lambda tx: tx

    def send(tx):
        events.append(("send", tx.hash_hex()))
        return SimpleNamespace(status=SendTransactionStatus.PENDING, hash=tx.hash_hex())

    server.send_transaction.side_effect = send
    server.get_transaction.return_value = SimpleNamespace(
        status=tx_status, result_meta_xdr=None
    )
    return server


class TestCharge:
    @pytest.mark.asyncio
    async def test_hash_is_handed_over_before_sending(self):
        events: list = []
        contract = _make_contract(_server(events))

        async def on_submit(tx_hash):
            events.append(("persist", tx_hash))

        receipt = await contract.charge(WALLET, "prod_1", "sub_1:1700000000", on_submit=on_submit)

        assert [kind for kind, _ in events] == ["persist", "send"]
        assert events[0][1] == events[1][1] == receipt.transaction_hash

    @pytest.mark.asyncio
    async def test_failing_hook_sends_nothing(self):
        events: list = []
        server = _server(events)
        contract = _make_contract(server)

        async def on_submit(tx_hash):
            raise RuntimeError("database down")

        with pytest.raises(RuntimeError):
            await contract.charge(WALLET, "prod_1", "sub_1:1700000000", on_submit=on_submit)

        server.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_period_not_ended_simulation_is_distinguished(self):
        server = _server([])
        server.prepare_transaction.side_effect = PrepareTransactionException(
            "simulation failed",
            SimpleNamespace(error='HostError: Error(WasmVm, InvalidAction) "Period not ended"'),
        )

        with pytest.raises(PeriodNotEndedError):
            await _make_contract(server).charge(WALLET, "prod_1", "sub_1:1700000000")

        server.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_transaction_is_rejected(self):
        contract = _make_contract(_server([], tx_status=GetTransactionStatus.FAILED))

        with pytest.raises(ChainRejectedError) as exc_info:
            await contract.charge(WALLET, "prod_1", "sub_1:1700000000")

        assert not isinstance(exc_info.value, PeriodNotEndedError)


class TestLookup:
    @pytest.mark.asyncio
    async def test_unknown_hash_is_none(self):
        server = _server([], tx_status=GetTransactionStatus.NOT_FOUND)

        assert await _make_contract(server).lookup_charge("ab" * 32) is None

    @pytest.mark.asyncio
    async def test_landed_hash_is_a_receipt(self):
        receipt = await _make_contract(_server([])).lookup_charge("ab" * 32)

        assert receipt.transaction_hash == "ab" * 32

    @pytest.mark.asyncio
    async def test_rpc_failure_is_unavailable(self):
        server = _server([])
        server.get_transaction.side_effect = StellarConnectionError("refused")

        with pytest.raises(ChainUnavailableError):
            await _make_contract(server).lookup_charge("ab" * 32)


@pytest.mark.asyncio
async def test_invoke_calls_the_named_function():
    events: list = []
    server = _server(events)

    tx_hash = await _make_contract(server).invoke("pause", WALLET, "prod_1")

    assert events == [("send", tx_hash)]
    built = server.prepare_transaction.call_args.args[0]
    op = built.transaction.operations[0]
    assert op.host_function.invoke_contract.function_name.sc_symbol == b"pause"

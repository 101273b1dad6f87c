"""Unit tests for the Horizon-backed StellarChainClient.

Horizon is replaced by an ``httpx.MockTransport``; retries run without
waiting.
"""

import httpx
import pytest
from tenacity import wait_none

from stellarbill.adapters.chain.stellar import StellarChainClient, StellarChainClientRegistry
from stellarbill.core.config import Settings
from stellarbill.core.exceptions import ChainRejectedError
from stellarbill.core.protocols.chain import SubscriptionAction
from stellarbill.core.shared_models import ChainObservation, Network

HORIZON = "https://horizon.test"


@pytest.fixture(autouse=True)
def _no_retry_wait(monkeypatch):
    monkeypatch.setattr(StellarChainClient._fetch_transaction.retry, "wait", wait_none())


def _client(handler) -> StellarChainClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StellarChainClient(network=Network.TESTNET, horizon_url=HORIZON, http_client=http)


def _json(status: int, body: dict):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body)

    return handler


class TestGetTransactionStatus:
    @pytest.mark.asyncio
    async def test_successful_transaction_is_confirmed(self):
        client = _client(_json(200, {"hash": "tx_1", "successful": True}))

        assert await client.get_transaction_status("tx_1") == ChainObservation.CONFIRMED

    @pytest.mark.asyncio
    async def test_unsuccessful_transaction_is_failed(self):
        client = _client(_json(200, {"hash": "tx_1", "successful": False}))

        assert await client.get_transaction_status("tx_1") == ChainObservation.FAILED

    @pytest.mark.asyncio
    async def test_missing_success_flag_is_unknown(self):
        client = _client(_json(200, {"hash": "tx_1"}))

        assert await client.get_transaction_status("tx_1") == ChainObservation.UNKNOWN

    @pytest.mark.asyncio
    async def test_not_found_is_unseen(self):
        client = _client(_json(404, {"status": 404}))

        assert await client.get_transaction_status("tx_1") == ChainObservation.UNSEEN

    @pytest.mark.asyncio
    async def test_requests_the_transaction_resource(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json={"successful": True})

        await _client(handler).get_transaction_status("abc123")

        assert paths == ["/transactions/abc123"]

    @pytest.mark.asyncio
    async def test_server_errors_are_retried_then_unknown(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, json={})

        observation = await _client(handler).get_transaction_status("tx_1")

        assert observation == ChainObservation.UNKNOWN
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_transient_error_then_success(self):
        responses = [httpx.Response(500, json={}), httpx.Response(200, json={"successful": True})]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        assert await _client(handler).get_transaction_status("tx_1") == ChainObservation.CONFIRMED

    @pytest.mark.asyncio
    async def test_transport_failure_is_unknown_never_failed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        assert await _client(handler).get_transaction_status("tx_1") == ChainObservation.UNKNOWN


class TestCharging:
    @pytest.mark.asyncio
    async def test_contract_calls_without_keeper_are_rejected(self):
        client = _client(_json(200, {}))

        assert client.can_charge is False
        with pytest.raises(ChainRejectedError):
            await client.charge_subscription("GWALLET", "prod_1", "sub_1:1700000000")
        with pytest.raises(ChainRejectedError):
            await client.get_charge_receipt("tx_1")
        with pytest.raises(ChainRejectedError):
            await client.set_subscription_state("GWALLET", "prod_1", SubscriptionAction.PAUSE)


class TestRegistry:
    @pytest.mark.asyncio
    async def test_one_client_per_network_without_keeper(self):
        registry = StellarChainClientRegistry(Settings(KEEPER_SECRET=None))
        try:
            testnet = registry.for_network(Network.TESTNET)

            assert registry.for_network("testnet") is testnet
            assert registry.for_network(Network.MAINNET) is not testnet
            assert testnet.can_charge is False
        finally:
            await registry.aclose()

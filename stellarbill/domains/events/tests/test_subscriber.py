"""Unit tests for EventLogSubscriber."""

from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from stellarbill.adapters.event_bus.in_memory import InMemoryEventBus
from stellarbill.core.events import PaymentEvent, PayoutEvent, PayoutEventType
from stellarbill.core.shared_models import Network
from stellarbill.domains.events.fakes.repository import FakeEventRepository
from stellarbill.domains.events.subscriber import EventLogSubscriber


@asynccontextmanager
async def _session():
    yield AsyncMock()


def _make_subscriber() -> tuple[EventLogSubscriber, FakeEventRepository]:
    repo = FakeEventRepository()
    return EventLogSubscriber(event_repo=repo, session_factory=_session), repo


class TestEventLogSubscriber:
    @pytest.mark.asyncio
    async def test_appends_payment_event_with_payload(self):
        subscriber, repo = _make_subscriber()
        event = PaymentEvent.completed(
            organization_id="org_a",
            environment=Network.TESTNET,
            customer_id="cus_1",
            payment_id="pay_1",
            amount=Decimal("25"),
            product_id="prod_1",
            checkout_id="ck_1",
        )

        await subscriber.handle(event)

        [row] = repo.rows()
        assert row.id == event.event_id
        assert row.type == "payment::completed"
        assert row.customer_id == "cus_1"
        assert row.data["checkout_id"] == "ck_1"
        assert row.data["payment_id"] == "pay_1"
        assert "organization_id" not in row.data

    @pytest.mark.asyncio
    async def test_registered_for_every_event_type(self):
        subscriber, repo = _make_subscriber()
        bus = InMemoryEventBus()
        subscriber.register(bus)

        await bus.publish(
            PayoutEvent(
                event_type=PayoutEventType.REQUESTED,
                organization_id="org_a",
                environment=Network.MAINNET,
                payout_id="po_1",
                amount=Decimal("5"),
                wallet_address="GABC",
            )
        )

        assert [r.type for r in repo.rows()] == ["payout::requested"]

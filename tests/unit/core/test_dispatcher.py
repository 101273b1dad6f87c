"""Unit tests for the EventDispatcher.

Events are published only after the wrapped unit of work returns; a
failing unit of work publishes nothing and its exception propagates.
"""

from decimal import Decimal

import pytest

from stellarbill.adapters.event_bus.fake import FakeEventBus
from stellarbill.core.events import EventDispatcher, EventSpec
from stellarbill.core.events.checkout import CheckoutLifecycleEvent
from stellarbill.core.events.enums import CheckoutEventType
from stellarbill.core.shared_models import CheckoutStatus, Network


def _event(checkout_id: str = "ck_1", event_type=CheckoutEventType.CREATED):
    return CheckoutLifecycleEvent(
        event_type=event_type,
        organization_id="org_1",
        environment=Network.TESTNET,
        checkout_id=checkout_id,
        product_id="prod_1",
        amount=Decimal("10"),
        status=CheckoutStatus.PENDING,
    )


@pytest.fixture
def bus():
    return FakeEventBus()


@pytest.fixture
def dispatcher(bus):
    return EventDispatcher(bus)


class TestWithEvent:
    @pytest.mark.asyncio
    async def test_publishes_after_work_and_returns_result(self, dispatcher, bus):
        async def work():
            assert bus.events == []
            return "ck_1"

        result = await dispatcher.with_event(work, EventSpec(map=lambda cid: _event(cid)))

        assert result == "ck_1"
        assert bus.published_types == ["checkout::created"]
        assert bus.get_event("checkout::created").checkout_id == "ck_1"

    @pytest.mark.asyncio
    async def test_failed_work_publishes_nothing(self, dispatcher, bus):
        async def work():
            raise RuntimeError("insert failed")

        with pytest.raises(RuntimeError, match="insert failed"):
            await dispatcher.with_event(work, EventSpec(map=lambda _: _event()))

        assert bus.events == []

    @pytest.mark.asyncio
    async def test_list_mapping_publishes_in_order(self, dispatcher, bus):
        async def work():
            return ["ck_1", "ck_2", "ck_3"]

        await dispatcher.with_event(
            work, EventSpec(map=lambda ids: [_event(cid) for cid in ids])
        )

        assert [e.checkout_id for e in bus.events] == ["ck_1", "ck_2", "ck_3"]

    @pytest.mark.asyncio
    async def test_none_mapping_is_a_no_op(self, dispatcher, bus):
        async def work():
            return None

        await dispatcher.with_event(work, EventSpec(map=lambda _: None))

        assert bus.events == []


class TestEmit:
    @pytest.mark.asyncio
    async def test_returns_number_published(self, dispatcher, bus):
        count = await dispatcher.emit(
            [_event("ck_1"), _event("ck_1", CheckoutEventType.EXPIRED)]
        )

        assert count == 2
        assert bus.published_types == ["checkout::created", "checkout::expired"]

    @pytest.mark.asyncio
    async def test_single_event(self, dispatcher, bus):
        assert await dispatcher.emit(_event()) == 1


class TestDomainEvent:
    def test_frozen(self):
        event = _event()
        with pytest.raises(Exception):
            event.checkout_id = "ck_2"

    def test_data_excludes_envelope_but_names_merchant(self):
        data = _event().data()

        assert data["merchant_id"] == "org_1"

        assert data["checkout_id"] == "ck_1"
        assert data["status"] == "pending"
        assert "event_id" not in data
        assert "organization_id" not in data

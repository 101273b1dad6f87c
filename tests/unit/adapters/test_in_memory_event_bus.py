"""Unit tests for InMemoryEventBus routing and subscriber isolation."""

from decimal import Decimal

import pytest

from stellarbill.adapters.event_bus.in_memory import InMemoryEventBus
from stellarbill.core.events import PaymentEvent, PaymentEventType
from stellarbill.core.shared_models import Network


def _payment_event(event_type=PaymentEventType.COMPLETED, organization_id="org_1") -> PaymentEvent:
    return PaymentEvent(
        event_type=event_type,
        organization_id=organization_id,
        environment=Network.TESTNET,
        customer_id="cus_1",
        payment_id="pay_1",
        product_id="prod_1",
        checkout_id="ck_1",
        amount=Decimal("25"),
    )


@pytest.mark.asyncio
async def test_domain_and_exact_patterns_route_events():
    bus = InMemoryEventBus()
    seen: dict[str, list[str]] = {"all": [], "payment": [], "failed": [], "payout": []}

    def record(key):
        async def handler(event):
            seen[key].append(event.event_type.value)

        return handler

    bus.subscribe("*", record("all"))
    bus.subscribe("payment::*", record("payment"))
    bus.subscribe("payment::failed", record("failed"))
    bus.subscribe("payout::*", record("payout"))

    await bus.publish(_payment_event())

    assert seen == {
        "all": ["payment::completed"],
        "payment": ["payment::completed"],
        "failed": [],
        "payout": [],
    }


@pytest.mark.parametrize(
    "pattern", ["payments::*", "payment::refunded", "payment", "pay*", "*::completed"]
)
def test_unknown_patterns_are_rejected_at_subscribe(pattern):
    async def handler(event):
        pass

    with pytest.raises(ValueError):
        InMemoryEventBus().subscribe(pattern, handler)


@pytest.mark.asyncio
async def test_merchant_scoped_subscription_only_sees_that_merchant():
    bus = InMemoryEventBus()
    delivered = []

    async def handler(event):
        delivered.append(event.organization_id)

    bus.subscribe("payment::*", handler, organization_id="org_2")

    await bus.publish(_payment_event(organization_id="org_1"))
    await bus.publish(_payment_event(organization_id="org_2"))

    assert delivered == ["org_2"]


@pytest.mark.asyncio
async def test_subscribers_run_in_registration_order():
    bus = InMemoryEventBus()
    order = []

    async def first(event):
        order.append("event_log")

    async def second(event):
        order.append("notifier")

    bus.subscribe("*", first)
    bus.subscribe("payment::completed", second)

    await bus.publish(_payment_event())

    assert order == ["event_log", "notifier"]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_affect_others_or_publisher():
    bus = InMemoryEventBus()
    delivered = []

    async def broken(event):
        raise RuntimeError("subscriber down")

    async def healthy(event):
        delivered.append(event.event_id)

    bus.subscribe("*", broken)
    bus.subscribe("*", healthy)

    event = _payment_event(PaymentEventType.FAILED)
    await bus.publish(event)

    assert delivered == [event.event_id]


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_a_no_op():
    await InMemoryEventBus().publish(_payment_event())

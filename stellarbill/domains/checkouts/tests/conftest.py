"""Checkout domain test fixtures and helpers.

The tracker is wired to in-memory fakes for every collaborator; tests
script chain observations per transaction hash on ``fakes.chain``.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from stellarbill.adapters.chain.fake import FakeChainClient, FakeChainClientRegistry
from stellarbill.adapters.event_bus.fake import FakeEventBus
from stellarbill.core.context import BaseContext
from stellarbill.core.events import EventDispatcher
from stellarbill.core.shared_models import CheckoutStatus, Network
from stellarbill.domains.checkouts.fakes.repository import FakeCheckoutRepository
from stellarbill.domains.checkouts.service import CheckoutService
from stellarbill.domains.checkouts.tracker import CheckoutSettlementTracker
from stellarbill.domains.credits.fakes.repository import FakeCreditTransactionRepository
from stellarbill.domains.credits.ledger import CreditLedger
from stellarbill.domains.payments.fakes.repository import FakePaymentRepository
from stellarbill.domains.plans.fakes.repository import FakePlanRepository
from stellarbill.domains.plans.gate import PlanLimitGate
from stellarbill.domains.products.fakes.repository import FakeProductRepository
from stellarbill.domains.subscriptions.fakes.repository import FakeSubscriptionRepository
from stellarbill.models import Checkout, Product, Subscription

DEFAULT_ORG_ID = "org_test"
DEFAULT_CUSTOMER_ID = "cus_1"
DEFAULT_PRODUCT_ID = "prod_1"
DEFAULT_WALLET = "GCUSTOMERWALLET"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_ctx(org_id: str = DEFAULT_ORG_ID, network: Network = Network.TESTNET) -> BaseContext:
    return BaseContext(organization_id=org_id, environment=network)


def _make_checkout(
    checkout_id: str = "ck_1",
    status: CheckoutStatus = CheckoutStatus.PENDING,
    transaction_hash: Optional[str] = "tx_1",
    **overrides: Any,
) -> Checkout:
    defaults = dict(
        id=checkout_id,
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        product_id=DEFAULT_PRODUCT_ID,
        customer_id=DEFAULT_CUSTOMER_ID,
        amount=Decimal("25"),
        status=status.value,
        transaction_hash=transaction_hash,
        wallet_address=DEFAULT_WALLET,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=30),
    )
    defaults.update(overrides)
    return Checkout(**defaults)


def _make_product(**overrides: Any) -> Product:
    defaults = dict(
        id=DEFAULT_PRODUCT_ID,
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        name="API calls",
        amount=Decimal("25"),
        billing_interval_days=None,
        credits_granted=1000,
        unit_divisor=None,
        units_per_credit=None,
    )
    defaults.update(overrides)
    return Product(**defaults)


def _make_subscription(**overrides: Any) -> Subscription:
    defaults = dict(
        id="sub_1",
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        customer_id=DEFAULT_CUSTOMER_ID,
        product_id=DEFAULT_PRODUCT_ID,
        status="active",
        current_period_end=datetime.now(timezone.utc) + timedelta(days=3),
        wallet_address=DEFAULT_WALLET,
        failed_charge_count=0,
    )
    defaults.update(overrides)
    return Subscription(**defaults)


@dataclass
class TrackerFakes:
    checkouts: FakeCheckoutRepository
    products: FakeProductRepository
    payments: FakePaymentRepository
    subscriptions: FakeSubscriptionRepository
    credits: FakeCreditTransactionRepository
    chain: FakeChainClient
    event_bus: FakeEventBus


@asynccontextmanager
async def _fake_session():
    yield AsyncMock()


def _make_tracker(
    *,
    product: Optional[Product] = None,
    sweep_concurrency: int = 10,
    chain_client: Optional[Any] = None,
) -> tuple[CheckoutSettlementTracker, TrackerFakes]:
    """Build a tracker wired to fakes. The default product is metered.

    ``chain_client`` replaces the fake chain (e.g. a Horizon client on a mock
    transport); ``fakes.chain`` is then unused.
    """
    fakes = TrackerFakes(
        checkouts=FakeCheckoutRepository(),
        products=FakeProductRepository(),
        payments=FakePaymentRepository(),
        subscriptions=FakeSubscriptionRepository(),
        credits=FakeCreditTransactionRepository(),
        chain=FakeChainClient(),
        event_bus=FakeEventBus(),
    )
    fakes.products.seed(product or _make_product())
    tracker = CheckoutSettlementTracker(
        checkout_repo=fakes.checkouts,
        product_repo=fakes.products,
        payment_repo=fakes.payments,
        subscription_repo=fakes.subscriptions,
        credit_ledger=CreditLedger(credit_repo=fakes.credits),
        chain_registry=FakeChainClientRegistry(chain_client or fakes.chain),
        event_dispatcher=EventDispatcher(fakes.event_bus),
        session_factory=_fake_session,
        sweep_concurrency=sweep_concurrency,
    )
    return tracker, fakes


def _make_checkout_service(
    product: Optional[Product] = None,
) -> tuple[CheckoutService, FakeCheckoutRepository, FakePlanRepository, FakeEventBus]:
    checkout_repo = FakeCheckoutRepository()
    product_repo = FakeProductRepository()
    product_repo.seed(product or _make_product())
    plan_repo = FakePlanRepository()
    bus = FakeEventBus()
    service = CheckoutService(
        checkout_repo=checkout_repo,
        product_repo=product_repo,
        plan_gate=PlanLimitGate(plan_repo=plan_repo),
        event_dispatcher=EventDispatcher(bus),
    )
    return service, checkout_repo, plan_repo, bus


@pytest.fixture
def ctx():
    return _make_ctx()


@pytest.fixture
def db():
    return AsyncMock()

"""Subscription domain test fixtures and helpers."""

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
from stellarbill.core.shared_models import Network, SubscriptionStatus
from stellarbill.domains.payments.fakes.repository import FakePaymentRepository
from stellarbill.domains.products.fakes.repository import FakeProductRepository
from stellarbill.domains.subscriptions.fakes.repository import FakeSubscriptionRepository
from stellarbill.domains.subscriptions.scheduler import SubscriptionChargeScheduler
from stellarbill.domains.subscriptions.service import SubscriptionService
from stellarbill.domains.subscriptions.types import DunningPolicy
from stellarbill.models import Product, Subscription

DEFAULT_ORG_ID = "org_test"
DEFAULT_PRODUCT_ID = "prod_monthly"


def _make_product(**overrides: Any) -> Product:
    defaults = dict(
        id=DEFAULT_PRODUCT_ID,
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        name="Pro plan",
        amount=Decimal("10"),
        billing_interval_days=30,
    )
    defaults.update(overrides)
    return Product(**defaults)


def _make_subscription(subscription_id: str = "sub_1", **overrides: Any) -> Subscription:
    """A subscription whose period ended an hour ago."""
    defaults = dict(
        id=subscription_id,
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        customer_id=f"cus_{subscription_id}",
        product_id=DEFAULT_PRODUCT_ID,
        status=SubscriptionStatus.ACTIVE.value,
        current_period_end=datetime.now(timezone.utc) - timedelta(hours=1),
        wallet_address=f"GWALLET_{subscription_id.upper()}",
        failed_charge_count=0,
        charge_claimed_for=None,
        charge_claim_expires_at=None,
        charge_transaction_hash=None,
        charge_submitted_for=None,
    )
    defaults.update(overrides)
    return Subscription(**defaults)


@dataclass
class SchedulerFakes:
    subscriptions: FakeSubscriptionRepository
    products: FakeProductRepository
    payments: FakePaymentRepository
    chain: FakeChainClient
    event_bus: FakeEventBus


@asynccontextmanager
async def _fake_session():
    yield AsyncMock()


def _make_scheduler(
    *,
    policy: Optional[DunningPolicy] = None,
    chain: Optional[FakeChainClient] = None,
    charge_timeout_seconds: float = 30.0,
    concurrency: int = 1,
) -> tuple[SubscriptionChargeScheduler, SchedulerFakes]:
    """Build a scheduler wired to fakes with the default product seeded."""
    fakes = SchedulerFakes(
        subscriptions=FakeSubscriptionRepository(),
        products=FakeProductRepository(),
        payments=FakePaymentRepository(),
        chain=chain or FakeChainClient(),
        event_bus=FakeEventBus(),
    )
    fakes.products.seed(_make_product())
    scheduler = SubscriptionChargeScheduler(
        subscription_repo=fakes.subscriptions,
        product_repo=fakes.products,
        payment_repo=fakes.payments,
        chain_registry=FakeChainClientRegistry(fakes.chain),
        event_dispatcher=EventDispatcher(fakes.event_bus),
        dunning_policy=policy,
        session_factory=_fake_session,
        charge_timeout_seconds=charge_timeout_seconds,
        claim_ttl_seconds=900,
        concurrency=concurrency,
    )
    return scheduler, fakes


def _make_ctx(org_id: str = DEFAULT_ORG_ID, network: Network = Network.TESTNET) -> BaseContext:
    return BaseContext(organization_id=org_id, environment=network)


def _make_service(
    chain: Optional[FakeChainClient] = None,
) -> tuple[SubscriptionService, FakeSubscriptionRepository, FakeChainClient, FakeEventBus]:
    repo = FakeSubscriptionRepository()
    chain = chain or FakeChainClient()
    bus = FakeEventBus()
    service = SubscriptionService(
        subscription_repo=repo,
        chain_registry=FakeChainClientRegistry(chain),
        event_dispatcher=EventDispatcher(bus),
    )
    return service, repo, chain, bus


@pytest.fixture
def ctx():
    return _make_ctx()


@pytest.fixture
def db():
    return AsyncMock()

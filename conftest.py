"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before both testpaths (tests/ and stellarbill/domains/),
making its fixtures available to centralized tests AND colocated domain tests.
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any stellarbill module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("RUN_ALEMBIC_MIGRATIONS", "false")


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_event_bus():
    """Fake EventBus that records published events."""
    from stellarbill.adapters.event_bus.fake import FakeEventBus

    return FakeEventBus()


@pytest.fixture
def fake_chain_client():
    """Fake ChainClient with scripted observations and charge outcomes."""
    from stellarbill.adapters.chain.fake import FakeChainClient

    return FakeChainClient()


@pytest.fixture
def fake_chain_registry(fake_chain_client):
    """Fake ChainClientRegistry serving ``fake_chain_client`` on every network."""
    from stellarbill.adapters.chain.fake import FakeChainClientRegistry

    return FakeChainClientRegistry(fake_chain_client)


@pytest.fixture
def fake_signature_verifier():
    """Fake WebhookSignatureVerifier trusting only allowed secrets."""
    from stellarbill.adapters.webhooks.fake import FakeWebhookSignatureVerifier

    return FakeWebhookSignatureVerifier()


@pytest.fixture
def fake_org_repo():
    """Fake OrganizationRepository (API keys and signing secrets)."""
    from stellarbill.domains.organizations.fakes.repository import FakeOrganizationRepository

    return FakeOrganizationRepository()


@pytest.fixture
def fake_product_repo():
    """Fake ProductRepository."""
    from stellarbill.domains.products.fakes.repository import FakeProductRepository

    return FakeProductRepository()


@pytest.fixture
def fake_checkout_repo():
    """Fake CheckoutRepository with a conditional compare-and-set."""
    from stellarbill.domains.checkouts.fakes.repository import FakeCheckoutRepository

    return FakeCheckoutRepository()


@pytest.fixture
def fake_credit_repo():
    """Fake CreditTransactionRepository."""
    from stellarbill.domains.credits.fakes.repository import FakeCreditTransactionRepository

    return FakeCreditTransactionRepository()


@pytest.fixture
def fake_payout_repo():
    """Fake PayoutRepository."""
    from stellarbill.domains.payouts.fakes.repository import FakePayoutRepository

    return FakePayoutRepository()


@pytest.fixture
def fake_payment_repo():
    """Fake PaymentRepository."""
    from stellarbill.domains.payments.fakes.repository import FakePaymentRepository

    return FakePaymentRepository()


@pytest.fixture
def fake_subscription_repo():
    """Fake SubscriptionRepository with a conditional compare-and-set."""
    from stellarbill.domains.subscriptions.fakes.repository import FakeSubscriptionRepository

    return FakeSubscriptionRepository()


@pytest.fixture
def fake_refund_repo():
    """Fake RefundRepository."""
    from stellarbill.domains.refunds.fakes.repository import FakeRefundRepository

    return FakeRefundRepository()


@asynccontextmanager
async def _mock_session():
    yield AsyncMock()


# ---------------------------------------------------------------------------
# Composite fixture: full Container with fakes behind real services
# ---------------------------------------------------------------------------


@pytest.fixture
def test_container(
    fake_event_bus,
    fake_chain_registry,
    fake_signature_verifier,
    fake_org_repo,
    fake_product_repo,
    fake_checkout_repo,
    fake_credit_repo,
    fake_payout_repo,
    fake_payment_repo,
    fake_subscription_repo,
    fake_refund_repo,
):
    """A Container whose services run over in-memory fakes.

    Use this when testing code that receives a Container or individual
    protocols via dependency injection.

    For partial overrides, use container.replace():
        modified = test_container.replace(charge_scheduler=my_scheduler)
    """
    from stellarbill.core.container import Container
    from stellarbill.core.events.dispatcher import EventDispatcher
    from stellarbill.domains.checkouts.service import CheckoutService
    from stellarbill.domains.checkouts.tracker import CheckoutSettlementTracker
    from stellarbill.domains.credits.ledger import CreditLedger
    from stellarbill.domains.organizations.resolver import OrganizationResolver
    from stellarbill.domains.payouts.pipeline import PayoutPipeline
    from stellarbill.domains.plans.fakes.repository import FakePlanRepository
    from stellarbill.domains.plans.gate import PlanLimitGate
    from stellarbill.domains.refunds.service import RefundService
    from stellarbill.domains.subscriptions.scheduler import SubscriptionChargeScheduler
    from stellarbill.domains.subscriptions.service import SubscriptionService
    from stellarbill.domains.webhooks.applier import WebhookEventApplier

    dispatcher = EventDispatcher(fake_event_bus)
    org_resolver = OrganizationResolver(fake_org_repo)
    plan_gate = PlanLimitGate(FakePlanRepository())
    credit_ledger = CreditLedger(fake_credit_repo)

    tracker = CheckoutSettlementTracker(
        checkout_repo=fake_checkout_repo,
        product_repo=fake_product_repo,
        payment_repo=fake_payment_repo,
        subscription_repo=fake_subscription_repo,
        credit_ledger=credit_ledger,
        chain_registry=fake_chain_registry,
        event_dispatcher=dispatcher,
        session_factory=_mock_session,
    )

    return Container(
        event_bus=fake_event_bus,
        event_dispatcher=dispatcher,
        chain_registry=fake_chain_registry,
        signature_verifier=fake_signature_verifier,
        org_resolver=org_resolver,
        product_repo=fake_product_repo,
        credit_ledger=credit_ledger,
        plan_gate=plan_gate,
        checkout_service=CheckoutService(
            checkout_repo=fake_checkout_repo,
            product_repo=fake_product_repo,
            plan_gate=plan_gate,
            event_dispatcher=dispatcher,
        ),
        checkout_tracker=tracker,
        webhook_applier=WebhookEventApplier(
            org_resolver=org_resolver,
            signature_verifier=fake_signature_verifier,
            checkout_repo=fake_checkout_repo,
            tracker=tracker,
        ),
        charge_scheduler=SubscriptionChargeScheduler(
            subscription_repo=fake_subscription_repo,
            product_repo=fake_product_repo,
            payment_repo=fake_payment_repo,
            chain_registry=fake_chain_registry,
            event_dispatcher=dispatcher,
            session_factory=_mock_session,
        ),
        subscription_service=SubscriptionService(
            subscription_repo=fake_subscription_repo,
            chain_registry=fake_chain_registry,
            event_dispatcher=dispatcher,
        ),
        payout_pipeline=PayoutPipeline(payout_repo=fake_payout_repo, event_dispatcher=dispatcher),
        refund_service=RefundService(
            refund_repo=fake_refund_repo,
            payment_repo=fake_payment_repo,
            event_dispatcher=dispatcher,
        ),
    )

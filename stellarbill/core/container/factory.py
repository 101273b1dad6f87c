"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container with the production implementations.

Design principles:
- Single place for all wiring decisions
- Fail fast: broken wiring crashes at startup, not at 3am
- Testable: can unit test factory logic with mock settings
"""

from stellarbill.adapters.chain.stellar import StellarChainClientRegistry
from stellarbill.adapters.event_bus.in_memory import InMemoryEventBus
from stellarbill.adapters.webhooks.svix import SvixSignatureVerifier
from stellarbill.core.config import Settings
from stellarbill.core.container.container import Container
from stellarbill.core.events.dispatcher import EventDispatcher
from stellarbill.core.logging import logger
from stellarbill.core.protocols.event_bus import EventBus
from stellarbill.domains.checkouts.repository import CheckoutRepository
from stellarbill.domains.checkouts.service import CheckoutService
from stellarbill.domains.checkouts.tracker import CheckoutSettlementTracker
from stellarbill.domains.credits.ledger import CreditLedger
from stellarbill.domains.credits.repository import CreditTransactionRepository
from stellarbill.domains.events.repository import EventRepository
from stellarbill.domains.events.subscriber import EventLogSubscriber
from stellarbill.domains.organizations.repository import OrganizationRepository
from stellarbill.domains.organizations.resolver import OrganizationResolver
from stellarbill.domains.payments.repository import PaymentRepository
from stellarbill.domains.payouts.pipeline import PayoutPipeline
from stellarbill.domains.payouts.repository import PayoutRepository
from stellarbill.domains.plans.gate import PlanLimitGate
from stellarbill.domains.plans.repository import PlanRepository
from stellarbill.domains.products.repository import ProductRepository
from stellarbill.domains.refunds.repository import RefundRepository
from stellarbill.domains.refunds.service import RefundService
from stellarbill.domains.subscriptions.repository import SubscriptionRepository
from stellarbill.domains.subscriptions.scheduler import SubscriptionChargeScheduler
from stellarbill.domains.subscriptions.service import SubscriptionService
from stellarbill.domains.subscriptions.types import DunningPolicy
from stellarbill.domains.webhooks.applier import WebhookEventApplier


def create_container(settings: Settings) -> Container:
    """Build container with the production implementations.

    This is the single source of truth for dependency wiring.

    Args:
        settings: Application settings (from core/config)

    Returns:
        Fully constructed Container ready for use

    Example:
        # In main.py
        from stellarbill.core.config import settings
        from stellarbill.core.container import create_container

        container = create_container(settings)
    """
    # -----------------------------------------------------------------
    # Event Bus + Dispatcher
    # The dispatcher publishes only after the unit of work it wraps
    # succeeded; the bus fans events out to the event log.
    # -----------------------------------------------------------------
    event_bus = _create_event_bus()
    event_dispatcher = EventDispatcher(event_bus)

    # -----------------------------------------------------------------
    # Chain access
    # One Horizon/Soroban client per network, created lazily.
    # -----------------------------------------------------------------
    chain_registry = StellarChainClientRegistry(settings)
    if not settings.KEEPER_SECRET:
        logger.warning("KEEPER_SECRET is not set; the subscription charge sweep is disabled")

    # -----------------------------------------------------------------
    # Repositories (thin wrappers around crud singletons)
    # -----------------------------------------------------------------
    checkout_repo = CheckoutRepository()
    product_repo = ProductRepository()
    payment_repo = PaymentRepository()
    subscription_repo = SubscriptionRepository()
    payout_repo = PayoutRepository()

    # -----------------------------------------------------------------
    # Organization resolution, quotas, credits
    # -----------------------------------------------------------------
    org_resolver = OrganizationResolver(OrganizationRepository())
    plan_gate = PlanLimitGate(PlanRepository())
    credit_ledger = CreditLedger(
        CreditTransactionRepository(), balance_floor=settings.CREDIT_BALANCE_FLOOR
    )

    # -----------------------------------------------------------------
    # Checkouts: creation, settlement tracking, inbound notifications
    # -----------------------------------------------------------------
    checkout_service = CheckoutService(
        checkout_repo=checkout_repo,
        product_repo=product_repo,
        plan_gate=plan_gate,
        event_dispatcher=event_dispatcher,
    )
    checkout_tracker = CheckoutSettlementTracker(
        checkout_repo=checkout_repo,
        product_repo=product_repo,
        payment_repo=payment_repo,
        subscription_repo=subscription_repo,
        credit_ledger=credit_ledger,
        chain_registry=chain_registry,
        event_dispatcher=event_dispatcher,
        sweep_concurrency=settings.CHECKOUT_SWEEP_CONCURRENCY,
    )
    signature_verifier = SvixSignatureVerifier()
    webhook_applier = WebhookEventApplier(
        org_resolver=org_resolver,
        signature_verifier=signature_verifier,
        checkout_repo=checkout_repo,
        tracker=checkout_tracker,
    )

    # -----------------------------------------------------------------
    # Subscriptions, payouts and refunds
    # -----------------------------------------------------------------
    charge_scheduler = SubscriptionChargeScheduler(
        subscription_repo=subscription_repo,
        product_repo=product_repo,
        payment_repo=payment_repo,
        chain_registry=chain_registry,
        event_dispatcher=event_dispatcher,
        dunning_policy=DunningPolicy.from_settings(settings),
        charge_timeout_seconds=settings.CHARGE_TIMEOUT_SECONDS,
        claim_ttl_seconds=settings.CHARGE_CLAIM_TTL_SECONDS,
        concurrency=settings.CHARGE_SWEEP_CONCURRENCY,
    )
    subscription_service = SubscriptionService(
        subscription_repo=subscription_repo,
        chain_registry=chain_registry,
        event_dispatcher=event_dispatcher,
    )
    payout_pipeline = PayoutPipeline(
        payout_repo=payout_repo,
        event_dispatcher=event_dispatcher,
        plan_gate=plan_gate,
    )
    refund_service = RefundService(
        refund_repo=RefundRepository(),
        payment_repo=payment_repo,
        event_dispatcher=event_dispatcher,
    )

    return Container(
        event_bus=event_bus,
        event_dispatcher=event_dispatcher,
        chain_registry=chain_registry,
        signature_verifier=signature_verifier,
        org_resolver=org_resolver,
        product_repo=product_repo,
        credit_ledger=credit_ledger,
        plan_gate=plan_gate,
        checkout_service=checkout_service,
        checkout_tracker=checkout_tracker,
        webhook_applier=webhook_applier,
        charge_scheduler=charge_scheduler,
        subscription_service=subscription_service,
        payout_pipeline=payout_pipeline,
        refund_service=refund_service,
    )


def _create_event_bus() -> EventBus:
    """Create event bus with subscribers wired up.

    The event bus fans out domain events to:
    - EventLogSubscriber: append-only ``event`` table (all events)
    """
    bus = InMemoryEventBus()

    event_log = EventLogSubscriber(EventRepository())
    event_log.register(bus)

    return bus

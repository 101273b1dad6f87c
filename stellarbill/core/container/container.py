"""Dependency Injection Container.

The container is a simple immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.

Design principles:
- Container serves, factory builds
- Fail fast: all construction at startup
- Type safety: fields are protocol types
- Testing: construct directly with fakes
"""

from dataclasses import dataclass, replace
from typing import Any

from stellarbill.core.events.dispatcher import EventDispatcher
from stellarbill.core.protocols import ChainClientRegistry, EventBus, WebhookSignatureVerifier
from stellarbill.domains.checkouts.protocols import (
    CheckoutServiceProtocol,
    CheckoutSettlementTrackerProtocol,
)
from stellarbill.domains.credits.protocols import CreditLedgerProtocol
from stellarbill.domains.organizations.protocols import OrganizationResolverProtocol
from stellarbill.domains.payouts.protocols import PayoutPipelineProtocol
from stellarbill.domains.plans.protocols import PlanLimitGateProtocol
from stellarbill.domains.products.repository import ProductRepositoryProtocol
from stellarbill.domains.refunds.protocols import RefundServiceProtocol
from stellarbill.domains.subscriptions.protocols import (
    SubscriptionChargeSchedulerProtocol,
    SubscriptionServiceProtocol,
)
from stellarbill.domains.webhooks.protocols import WebhookEventApplierProtocol


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # Production: use the global container built by factory
        from stellarbill.core.container import container
        report = await container.charge_scheduler.run_due_charges()

        # Testing: construct directly with fakes (see the root conftest.py
        # for the full test_container fixture)
        test_container = Container(event_bus=FakeEventBus(), ...)

        # FastAPI endpoints: use Inject() to pull individual protocols
        from stellarbill.api.deps import Inject
        async def my_endpoint(ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol)):
            ...
    """

    # Event bus for domain event fan-out, and the dispatcher that feeds it
    event_bus: EventBus
    event_dispatcher: EventDispatcher

    # Chain access (Horizon reads, Soroban charges) per network
    chain_registry: ChainClientRegistry

    # Inbound notification verification
    signature_verifier: WebhookSignatureVerifier

    # API key / signing secret resolution
    org_resolver: OrganizationResolverProtocol

    # Read-only product catalog
    product_repo: ProductRepositoryProtocol

    # Credits and plan quotas
    credit_ledger: CreditLedgerProtocol
    plan_gate: PlanLimitGateProtocol

    # Checkout domain
    checkout_service: CheckoutServiceProtocol
    checkout_tracker: CheckoutSettlementTrackerProtocol
    webhook_applier: WebhookEventApplierProtocol

    # Recurring charges and the merchant-driven subscription lifecycle
    charge_scheduler: SubscriptionChargeSchedulerProtocol
    subscription_service: SubscriptionServiceProtocol

    # Merchant withdrawals and customer refunds
    payout_pipeline: PayoutPipelineProtocol
    refund_service: RefundServiceProtocol

    # -----------------------------------------------------------------
    # Convenience methods
    # -----------------------------------------------------------------

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Useful for testing when you want to override specific dependencies:

            modified = container.replace(chain_registry=FakeChainClientRegistry())

        Args:
            **changes: Field names and their new values

        Returns:
            New Container with specified dependencies replaced
        """
        return replace(self, **changes)

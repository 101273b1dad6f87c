"""Checkout settlement tracker.

One state machine per checkout, driven from two entry points (status polls
and verified webhooks) that both call ``sweep_and_refresh_status``. Every
transition is a compare-and-set on the stored status, so concurrent callers
converge on one winner and the loser's call is a no-op.

Side effects of a successful settlement (payment row, credit grant,
subscription activation) commit in the same transaction as the status
change; events are emitted only after that commit.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.events import (
    CheckoutEventType,
    CheckoutLifecycleEvent,
    EventDispatcher,
    EventSpec,
    PaymentEvent,
    SubscriptionEventType,
    SubscriptionLifecycleEvent,
)
from stellarbill.core.exceptions import ConcurrentModificationError
from stellarbill.core.logging import ContextualLogger
from stellarbill.core.protocols.chain import ChainClientRegistry
from stellarbill.core.protocols.session import SessionFactory
from stellarbill.core.shared_models import (
    ChainObservation,
    CheckoutStatus,
    Network,
    PaymentStatus,
    SubscriptionStatus,
)
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.domains.checkouts.exceptions import CheckoutNotFoundError
from stellarbill.domains.checkouts.protocols import CheckoutSettlementTrackerProtocol
from stellarbill.domains.checkouts.repository import CheckoutRepositoryProtocol
from stellarbill.domains.checkouts.types import (
    CheckoutSweepOutcome,
    CheckoutSweepReport,
    is_expired,
    next_checkout_status,
)
from stellarbill.domains.credits.protocols import CreditLedgerProtocol
from stellarbill.domains.payments.repository import PaymentRepositoryProtocol
from stellarbill.domains.products.exceptions import ProductNotFoundError
from stellarbill.domains.products.repository import ProductRepositoryProtocol
from stellarbill.domains.subscriptions.repository import SubscriptionRepositoryProtocol
from stellarbill.models.checkout import Checkout
from stellarbill.models.payment import Payment
from stellarbill.models.product import Product
from stellarbill.models.subscription import Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Settlement:
    """Rows committed by one settlement. ``checkout`` is None when the race was lost."""

    ctx: BaseContext
    checkout: Optional[Checkout]
    payment: Optional[Payment] = None
    subscription: Optional[Subscription] = None
    subscription_created: bool = False


class CheckoutSettlementTracker(CheckoutSettlementTrackerProtocol):
    """Advances checkouts from chain observations."""

    def __init__(
        self,
        checkout_repo: CheckoutRepositoryProtocol,
        product_repo: ProductRepositoryProtocol,
        payment_repo: PaymentRepositoryProtocol,
        subscription_repo: SubscriptionRepositoryProtocol,
        credit_ledger: CreditLedgerProtocol,
        chain_registry: ChainClientRegistry,
        event_dispatcher: EventDispatcher,
        session_factory: Optional[SessionFactory] = None,
        sweep_concurrency: int = 10,
    ) -> None:
        """Initialize with repositories, the chain registry and the dispatcher."""
        self._checkout_repo = checkout_repo
        self._product_repo = product_repo
        self._payment_repo = payment_repo
        self._subscription_repo = subscription_repo
        self._credit_ledger = credit_ledger
        self._chain_registry = chain_registry
        self._dispatcher = event_dispatcher
        self._session_factory = session_factory
        self._sweep_concurrency = sweep_concurrency

    # ------------------------------------------------------------------
    # Single checkout
    # ------------------------------------------------------------------

    async def sweep_and_refresh_status(self, db: AsyncSession, checkout_id: str) -> Checkout:
        """Advance ``checkout_id`` from what the chain reports for its transaction.

        Terminal checkouts are returned untouched, without a chain read.

        Raises:
            CheckoutNotFoundError: no such checkout.
        """
        checkout = await self._checkout_repo.get_unscoped(db, id=checkout_id)
        if checkout is None:
            raise CheckoutNotFoundError(f"Checkout {checkout_id} not found")

        current = CheckoutStatus(checkout.status)
        if current.is_terminal:
            return checkout

        ctx = BaseContext(
            organization_id=checkout.organization_id, environment=Network(checkout.environment)
        )
        log = ctx.logger.with_context(checkout_id=checkout.id)

        observation = await self._observe(checkout, ctx)
        target = next_checkout_status(current, observation, expired=is_expired(checkout.expires_at))
        log.debug(f"Chain reports {observation.value}: {current.value} -> {target.value}")
        if target == current:
            return checkout

        if target == CheckoutStatus.SUCCEEDED:
            return await self._settle_succeeded(db, ctx, checkout, current, log)
        if target == CheckoutStatus.FAILED:
            return await self._settle_failed(db, ctx, checkout, current, log)
        return await self._advance(db, ctx, checkout, current, target, log)

    async def _observe(self, checkout: Checkout, ctx: BaseContext) -> ChainObservation:
        if not checkout.transaction_hash:
            return ChainObservation.UNSEEN
        client = self._chain_registry.for_network(ctx.environment)
        return await client.get_transaction_status(checkout.transaction_hash)

    async def _advance(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        checkout: Checkout,
        current: CheckoutStatus,
        target: CheckoutStatus,
        log: ContextualLogger,
    ) -> Checkout:
        """Non-settling transitions: pending -> processing and pending -> expired."""
        event_type = (
            CheckoutEventType.EXPIRED
            if target == CheckoutStatus.EXPIRED
            else CheckoutEventType.UPDATED
        )

        async def work() -> Optional[Checkout]:
            return await self._checkout_repo.compare_and_set(
                db,
                id=checkout.id,
                expected={"status": current.value},
                values={"status": target.value},
            )

        updated = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda row: (
                    self._checkout_event(ctx, row, event_type) if row is not None else None
                )
            ),
        )
        if updated is None:
            return await self._reload(db, checkout, current, target)

        log.info(f"Checkout {current.value} -> {target.value}")
        return updated

    async def _settle_succeeded(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        checkout: Checkout,
        current: CheckoutStatus,
        log: ContextualLogger,
    ) -> Checkout:
        product = await self._product_repo.get(db, id=checkout.product_id, ctx=ctx)
        if product is None:
            raise ProductNotFoundError(f"Product {checkout.product_id} not found")

        async def work() -> _Settlement:
            async with UnitOfWork(db) as uow:
                won = await self._checkout_repo.compare_and_set(
                    db,
                    id=checkout.id,
                    expected={"status": current.value},
                    values={"status": CheckoutStatus.SUCCEEDED.value},
                    uow=uow,
                )
                if won is None:
                    return _Settlement(ctx=ctx, checkout=None)

                payment = await self._record_payment(db, ctx, won, PaymentStatus.CONFIRMED, uow)
                if product.is_metered:
                    await self._credit_ledger.grant(
                        db,
                        ctx,
                        customer_id=won.customer_id,
                        product_id=product.id,
                        credits=product.credits_granted,
                        checkout_id=won.id,
                        uow=uow,
                    )
                subscription, created = None, False
                if product.is_recurring:
                    subscription, created = await self._activate_subscription(
                        db, ctx, won, product, uow
                    )
                await uow.commit()

            return _Settlement(
                ctx=ctx,
                checkout=won,
                payment=payment,
                subscription=subscription,
                subscription_created=created,
            )

        settlement = await self._dispatcher.with_event(
            work, EventSpec(map=self._settlement_events)
        )
        if settlement.checkout is None:
            return await self._reload(db, checkout, current, CheckoutStatus.SUCCEEDED)

        log.info(f"Checkout settled: {checkout.transaction_hash}")
        return settlement.checkout

    async def _settle_failed(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        checkout: Checkout,
        current: CheckoutStatus,
        log: ContextualLogger,
    ) -> Checkout:
        async def work() -> _Settlement:
            async with UnitOfWork(db) as uow:
                lost = await self._checkout_repo.compare_and_set(
                    db,
                    id=checkout.id,
                    expected={"status": current.value},
                    values={"status": CheckoutStatus.FAILED.value},
                    uow=uow,
                )
                if lost is None:
                    return _Settlement(ctx=ctx, checkout=None)
                payment = await self._record_payment(db, ctx, lost, PaymentStatus.FAILED, uow)
                await uow.commit()
            return _Settlement(ctx=ctx, checkout=lost, payment=payment)

        settlement = await self._dispatcher.with_event(
            work, EventSpec(map=self._settlement_events)
        )
        if settlement.checkout is None:
            return await self._reload(db, checkout, current, CheckoutStatus.FAILED)

        log.warning(f"Checkout transaction failed on chain: {checkout.transaction_hash}")
        return settlement.checkout

    async def _record_payment(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        checkout: Checkout,
        status: PaymentStatus,
        uow: UnitOfWork,
    ) -> Payment:
        return await self._payment_repo.create(
            db,
            obj_in={
                "checkout_id": checkout.id,
                "customer_id": checkout.customer_id,
                "amount": checkout.amount,
                "transaction_hash": checkout.transaction_hash,
                "status": status.value,
            },
            ctx=ctx,
            uow=uow,
        )

    async def _activate_subscription(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        checkout: Checkout,
        product: Product,
        uow: UnitOfWork,
    ) -> tuple[Subscription, bool]:
        """Start a subscription, or renew the customer's existing one.

        Returns the row and whether it was created.
        """
        now = datetime.now(timezone.utc)
        interval = timedelta(days=product.billing_interval_days)
        existing = await self._subscription_repo.get_for_customer(
            db,
            organization_id=ctx.organization_id,
            environment=ctx.environment.value,
            customer_id=checkout.customer_id,
            product_id=product.id,
        )
        if existing is None:
            created = await self._subscription_repo.create(
                db,
                obj_in={
                    "customer_id": checkout.customer_id,
                    "product_id": product.id,
                    "status": SubscriptionStatus.ACTIVE.value,
                    "current_period_end": now + interval,
                    "wallet_address": checkout.wallet_address,
                },
                ctx=ctx,
                uow=uow,
            )
            return created, True

        period_start = max(existing.current_period_end, now)
        renewed = await self._subscription_repo.compare_and_set(
            db,
            id=existing.id,
            expected={"status": existing.status},
            values={
                "status": SubscriptionStatus.ACTIVE.value,
                "current_period_end": period_start + interval,
                "wallet_address": checkout.wallet_address or existing.wallet_address,
                "failed_charge_count": 0,
            },
            uow=uow,
        )
        if renewed is None:
            raise ConcurrentModificationError("subscription", existing.id, existing.status)
        return renewed, False

    async def _reload(
        self,
        db: AsyncSession,
        checkout: Checkout,
        expected: CheckoutStatus,
        intended: CheckoutStatus,
    ) -> Checkout:
        """Re-read after a lost compare-and-set; the winner's state is returned."""
        fresh = await self._checkout_repo.get_unscoped(db, id=checkout.id)
        if fresh is None:
            raise CheckoutNotFoundError(f"Checkout {checkout.id} not found")
        logger.debug(
            f"Checkout {checkout.id} left {expected.value} concurrently "
            f"(now {fresh.status}, wanted {intended.value})"
        )
        return fresh

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @staticmethod
    def _checkout_event(
        ctx: BaseContext, checkout: Checkout, event_type: CheckoutEventType
    ) -> CheckoutLifecycleEvent:
        return CheckoutLifecycleEvent(
            event_type=event_type,
            organization_id=ctx.organization_id,
            environment=ctx.environment,
            customer_id=checkout.customer_id,
            checkout_id=checkout.id,
            product_id=checkout.product_id,
            amount=checkout.amount,
            status=CheckoutStatus(checkout.status),
        )

    @staticmethod
    def _settlement_events(settlement: _Settlement) -> list:
        checkout = settlement.checkout
        if checkout is None:
            return []

        ctx = settlement.ctx
        factory = (
            PaymentEvent.completed
            if checkout.status == CheckoutStatus.SUCCEEDED.value
            else PaymentEvent.failed
        )
        events: list = [
            factory(
                organization_id=ctx.organization_id,
                environment=ctx.environment,
                customer_id=checkout.customer_id,
                payment_id=settlement.payment.id,
                amount=checkout.amount,
                product_id=checkout.product_id,
                checkout_id=checkout.id,
                transaction_hash=checkout.transaction_hash,
            )
        ]
        subscription = settlement.subscription
        if subscription is not None:
            events.append(
                SubscriptionLifecycleEvent(
                    event_type=(
                        SubscriptionEventType.CREATED
                        if settlement.subscription_created
                        else SubscriptionEventType.UPDATED
                    ),
                    organization_id=ctx.organization_id,
                    environment=ctx.environment,
                    customer_id=subscription.customer_id,
                    subscription_id=subscription.id,
                    product_id=subscription.product_id,
                    status=SubscriptionStatus(subscription.status),
                    current_period_end=subscription.current_period_end,
                )
            )
        return events

    # ------------------------------------------------------------------
    # Open-checkout sweep
    # ------------------------------------------------------------------

    async def sweep_open_checkouts(self, limit: int = 500) -> CheckoutSweepReport:
        """Refresh every pending/processing checkout with bounded concurrency.

        Each checkout gets its own session; a failure is logged and recorded
        in the report, never raised.
        """
        session_factory = self._sessions()
        async with session_factory() as db:
            open_checkouts = await self._checkout_repo.get_open(db, limit=limit)
        checkout_ids = [c.id for c in open_checkouts]
        if not checkout_ids:
            return CheckoutSweepReport.from_outcomes([])

        semaphore = asyncio.Semaphore(self._sweep_concurrency)

        async def refresh(checkout_id: str) -> CheckoutSweepOutcome:
            async with semaphore:
                try:
                    async with session_factory() as db:
                        checkout = await self.sweep_and_refresh_status(db, checkout_id)
                    return CheckoutSweepOutcome(
                        checkout_id=checkout_id, status=CheckoutStatus(checkout.status)
                    )
                except Exception as e:
                    logger.error(f"Failed to refresh checkout {checkout_id}: {e}", exc_info=True)
                    return CheckoutSweepOutcome(checkout_id=checkout_id, error=str(e))

        outcomes = await asyncio.gather(*[refresh(cid) for cid in checkout_ids])
        report = CheckoutSweepReport.from_outcomes(outcomes)
        logger.info(
            f"Checkout sweep finished: {report.total} open, "
            f"{report.succeeded} refreshed, {report.failed} failed"
        )
        return report

    def _sessions(self) -> SessionFactory:
        if self._session_factory is not None:
            return self._session_factory
        from stellarbill.db.session import get_db_context

        return get_db_context

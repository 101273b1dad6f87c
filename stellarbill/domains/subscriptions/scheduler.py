"""Subscription charge scheduler.

Invoked periodically (``GET /cron/charge``). Each due subscription is
charged independently: a missing wallet, a chain rejection, a timeout or an
unexpected error is recorded as that subscription's outcome and the sweep
moves on.

Before the chain call the sweep claims the subscription's current period
with a compare-and-set, so a concurrent sweep skips it. The signed charge's
hash is stored on the subscription before it is sent; a later sweep that
finds a hash looks its outcome up instead of charging again, so a crash or
a timeout never pays for the same period twice and never turns a landed
charge into a dunning failure.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.events import (
    EventDispatcher,
    EventSpec,
    PaymentEvent,
    SubscriptionEventType,
    SubscriptionLifecycleEvent,
)
from stellarbill.core.exceptions import (
    ChainError,
    ChainRejectedError,
    ConcurrentModificationError,
    PeriodNotEndedError,
)
from stellarbill.core.logging import ContextualLogger
from stellarbill.core.protocols.chain import ChainClient, ChainClientRegistry, ChargeReceipt
from stellarbill.core.protocols.session import SessionFactory
from stellarbill.core.shared_models import Network, PaymentStatus, SubscriptionStatus
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.domains.payments.repository import PaymentRepositoryProtocol
from stellarbill.domains.products.exceptions import ProductNotFoundError
from stellarbill.domains.products.repository import ProductRepositoryProtocol
from stellarbill.domains.subscriptions.protocols import SubscriptionChargeSchedulerProtocol
from stellarbill.domains.subscriptions.repository import SubscriptionRepositoryProtocol
from stellarbill.domains.subscriptions.types import (
    ChargeOutcome,
    ChargeOutcomeKind,
    ChargeSweepReport,
    DunningPolicy,
    charge_idempotency_key,
    next_period_end,
)
from stellarbill.models.payment import Payment
from stellarbill.models.product import Product
from stellarbill.models.subscription import Subscription

logger = logging.getLogger(__name__)

_CLEAR_SUBMISSION = {"charge_transaction_hash": None, "charge_submitted_for": None}
_CLEAR_CLAIM = {
    "charge_claimed_for": None,
    "charge_claim_expires_at": None,
    **_CLEAR_SUBMISSION,
}


class SubscriptionChargeScheduler(SubscriptionChargeSchedulerProtocol):
    """Periodic sweep charging due subscriptions through the subscription contract."""

    def __init__(
        self,
        subscription_repo: SubscriptionRepositoryProtocol,
        product_repo: ProductRepositoryProtocol,
        payment_repo: PaymentRepositoryProtocol,
        chain_registry: ChainClientRegistry,
        event_dispatcher: EventDispatcher,
        dunning_policy: Optional[DunningPolicy] = None,
        session_factory: Optional[SessionFactory] = None,
        charge_timeout_seconds: float = 30.0,
        claim_ttl_seconds: int = 900,
        concurrency: int = 1,
    ) -> None:
        """Initialize with repositories, the chain registry and the sweep limits.

        ``claim_ttl_seconds`` must exceed ``charge_timeout_seconds``: a claim
        that lapses while its charge is in flight would let another sweep in.
        """
        if claim_ttl_seconds <= charge_timeout_seconds:
            raise ValueError("claim_ttl_seconds must exceed charge_timeout_seconds")
        self._subscription_repo = subscription_repo
        self._product_repo = product_repo
        self._payment_repo = payment_repo
        self._chain_registry = chain_registry
        self._dispatcher = event_dispatcher
        self._policy = dunning_policy or DunningPolicy()
        self._session_factory = session_factory
        self._charge_timeout = charge_timeout_seconds
        self._claim_ttl = timedelta(seconds=claim_ttl_seconds)
        self._concurrency = concurrency

    async def run_due_charges(self) -> ChargeSweepReport:
        """Charge every due subscription and report per-subscription outcomes.

        Never raises for a single subscription. Subscriptions on a network
        whose client holds no keeper key are left for a later sweep.
        """
        now = datetime.now(timezone.utc)
        sessions = self._sessions()
        async with sessions() as db:
            due = await self._subscription_repo.get_due(
                db, now=now, statuses=self._policy.sweep_statuses()
            )

        chargeable = [
            s for s in due if self._chain_registry.for_network(Network(s.environment)).can_charge
        ]
        if len(chargeable) < len(due):
            logger.warning(
                f"No keeper key configured: leaving {len(due) - len(chargeable)} due "
                f"subscription(s) uncharged"
            )
        if not chargeable:
            return ChargeSweepReport.from_outcomes([])

        semaphore = asyncio.Semaphore(self._concurrency)

        async def charge(subscription: Subscription) -> ChargeOutcome:
            async with semaphore:
                try:
                    async with sessions() as db:
                        return await self._charge_one(db, subscription, now)
                except Exception as e:
                    logger.error(
                        f"Charge of subscription {subscription.id} failed unexpectedly: {e}",
                        exc_info=True,
                    )
                    return ChargeOutcome(
                        subscription_id=subscription.id,
                        kind=ChargeOutcomeKind.ERROR,
                        error=str(e),
                    )

        outcomes = await asyncio.gather(*[charge(s) for s in chargeable])
        report = ChargeSweepReport.from_outcomes(outcomes)
        logger.info(f"Charge sweep finished: {report.processed} processed {report.summary()}")
        return report

    # ------------------------------------------------------------------
    # One subscription
    # ------------------------------------------------------------------

    async def _charge_one(
        self, db: AsyncSession, subscription: Subscription, now: datetime
    ) -> ChargeOutcome:
        ctx = BaseContext(
            organization_id=subscription.organization_id,
            environment=Network(subscription.environment),
        )
        log = ctx.logger.with_context(subscription_id=subscription.id)

        if not subscription.wallet_address:
            log.warning("No wallet on file, skipping charge")
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.SKIPPED_NO_WALLET)

        product = await self._product_repo.get(db, id=subscription.product_id, ctx=ctx)
        if product is None:
            raise ProductNotFoundError(f"Product {subscription.product_id} not found")

        period_end = subscription.current_period_end
        previous_status = SubscriptionStatus(subscription.status)
        claimed = await self._subscription_repo.claim_for_charge(
            db,
            id=subscription.id,
            status=previous_status.value,
            period_end=period_end,
            now=now,
            claim_expires_at=now + self._claim_ttl,
        )
        if claimed is None:
            log.info("Subscription claimed by another sweep")
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.LOST_RACE)

        client = self._chain_registry.for_network(ctx.environment)
        if claimed.charge_transaction_hash:
            resolved = await self._resolve_submitted(
                db, ctx, client, claimed, product, period_end, previous_status, log
            )
            if resolved is not None:
                return resolved

        key = charge_idempotency_key(subscription.id, period_end)

        async def persist_submission(transaction_hash: str) -> None:
            persisted = await self._subscription_repo.compare_and_set(
                db,
                id=subscription.id,
                expected={"current_period_end": period_end, "charge_claimed_for": period_end},
                values={
                    "charge_transaction_hash": transaction_hash,
                    "charge_submitted_for": period_end,
                },
            )
            if persisted is None:
                raise ConcurrentModificationError(
                    "subscription", subscription.id, f"claimed for {period_end.isoformat()}"
                )
            log.info(f"Sending charge {key} as {transaction_hash}")

        try:
            receipt = await asyncio.wait_for(
                client.charge_subscription(
                    claimed.wallet_address, product.id, key, on_submit=persist_submission
                ),
                timeout=self._charge_timeout,
            )
        except asyncio.TimeoutError:
            log.warning(
                f"Charge not confirmed within {self._charge_timeout}s; "
                "a later sweep resolves it by transaction hash"
            )
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.DEFERRED, error="timeout")
        except PeriodNotEndedError as e:
            return await self._record_period_already_paid(
                db, ctx, claimed, product, period_end, previous_status, e, log
            )
        except ChainRejectedError as e:
            return await self._record_failure(
                db, ctx, claimed, product, period_end, previous_status, e, log
            )
        except ChainError as e:
            log.warning(f"Chain unavailable, charge deferred: {e}")
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.DEFERRED, error=str(e))

        return await self._record_success(
            db, ctx, claimed, product, period_end, previous_status, receipt, log
        )

    async def _resolve_submitted(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        client: ChainClient,
        subscription: Subscription,
        product: Product,
        period_end: datetime,
        previous_status: SubscriptionStatus,
        log: ContextualLogger,
    ) -> Optional[ChargeOutcome]:
        """Settle a charge an earlier sweep sent but never saw confirmed.

        Returns None when a new charge should be sent for ``period_end``.
        Charge transactions expire long before a claim does, so a hash the
        chain does not know by the time its claim lapsed never landed.
        """
        tx_hash = subscription.charge_transaction_hash
        same_period = subscription.charge_submitted_for == period_end
        try:
            receipt = await asyncio.wait_for(
                client.get_charge_receipt(tx_hash), timeout=self._charge_timeout
            )
        except asyncio.TimeoutError:
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.DEFERRED, error="timeout")
        except ChainRejectedError as e:
            if same_period:
                return await self._record_failure(
                    db, ctx, subscription, product, period_end, previous_status, e, log
                )
            await self._subscription_repo.compare_and_set(
                db,
                id=subscription.id,
                expected={"charge_transaction_hash": tx_hash},
                values=_CLEAR_SUBMISSION,
            )
            return None
        except ChainError as e:
            log.warning(f"Could not look up earlier charge {tx_hash}: {e}")
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.DEFERRED, error=str(e))

        if receipt is None:
            log.warning(f"Earlier charge {tx_hash} never landed; charging again")
            return None
        if same_period:
            log.info(f"Earlier charge {tx_hash} landed")
            return await self._record_success(
                db, ctx, subscription, product, period_end, previous_status, receipt, log
            )

        # Landed for a period another writer has since moved past.
        outcome = await self._record_unapplied_payment(
            db, ctx, subscription, product, receipt, _CLEAR_SUBMISSION, log
        )
        if outcome.kind == ChargeOutcomeKind.LOST_RACE:
            return outcome
        return None

    async def _record_success(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription: Subscription,
        product: Product,
        period_end: datetime,
        previous_status: SubscriptionStatus,
        receipt: ChargeReceipt,
        log: ContextualLogger,
    ) -> ChargeOutcome:
        new_period_end = next_period_end(
            period_end, product.billing_interval_days, receipt.period_end
        )
        amount = _charged_amount(receipt, product)

        async def work() -> Optional[tuple[Subscription, Payment]]:
            async with UnitOfWork(db) as uow:
                updated = await self._subscription_repo.compare_and_set(
                    db,
                    id=subscription.id,
                    expected={
                        "status": previous_status.value,
                        "current_period_end": period_end,
                        "charge_claimed_for": period_end,
                    },
                    values={
                        "status": SubscriptionStatus.ACTIVE.value,
                        "current_period_end": new_period_end,
                        "failed_charge_count": 0,
                        **_CLEAR_CLAIM,
                    },
                    uow=uow,
                )
                if updated is None:
                    return None
                payment = await self._record_payment(
                    db, ctx, updated, amount, receipt.transaction_hash, PaymentStatus.CONFIRMED, uow
                )
                await uow.commit()
            return updated, payment

        result = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda result: (
                    [
                        self._payment_event(ctx, result[0], result[1], product, completed=True),
                        self._subscription_event(ctx, result[0]),
                    ]
                    if result
                    else None
                )
            ),
        )
        if result is None:
            log.warning(
                f"Subscription changed while charge {receipt.transaction_hash} was in flight "
                f"for period {period_end.isoformat()}; recording the payment only"
            )
            return await self._record_unapplied_payment(
                db, ctx, subscription, product, receipt, _CLEAR_CLAIM, log
            )

        log.info(
            f"Charged {amount} ({receipt.transaction_hash}) from {previous_status.value}; "
            f"period ends {new_period_end.isoformat()}"
        )
        return ChargeOutcome(
            subscription.id, ChargeOutcomeKind.CHARGED, transaction_hash=receipt.transaction_hash
        )

    async def _record_unapplied_payment(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription: Subscription,
        product: Product,
        receipt: ChargeReceipt,
        clear: dict,
        log: ContextualLogger,
    ) -> ChargeOutcome:
        """Record a landed charge without touching the billing period.

        Keyed on the persisted transaction hash, so the payment is written once
        however many sweeps get here.
        """
        amount = _charged_amount(receipt, product)

        async def work() -> Optional[tuple[Subscription, Payment]]:
            async with UnitOfWork(db) as uow:
                updated = await self._subscription_repo.compare_and_set(
                    db,
                    id=subscription.id,
                    expected={"charge_transaction_hash": receipt.transaction_hash},
                    values=clear,
                    uow=uow,
                )
                if updated is None:
                    return None
                payment = await self._record_payment(
                    db, ctx, updated, amount, receipt.transaction_hash, PaymentStatus.CONFIRMED, uow
                )
                await uow.commit()
            return updated, payment

        result = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda result: (
                    self._payment_event(ctx, result[0], result[1], product, completed=True)
                    if result
                    else None
                )
            ),
        )
        if result is None:
            log.info(f"Charge {receipt.transaction_hash} already recorded")
            return ChargeOutcome(subscription.id, ChargeOutcomeKind.LOST_RACE)
        return ChargeOutcome(
            subscription.id, ChargeOutcomeKind.CHARGED, transaction_hash=receipt.transaction_hash
        )

    async def _record_period_already_paid(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription: Subscription,
        product: Product,
        period_end: datetime,
        previous_status: SubscriptionStatus,
        error: PeriodNotEndedError,
        log: ContextualLogger,
    ) -> ChargeOutcome:
        """The contract already holds a payment for this period.

        When that payment is our earlier submission (its record aged out of
        RPC history) it is recorded; otherwise the period was paid outside
        the sweep and is left for reconciliation, never marked as a failure.
        """
        if subscription.charge_transaction_hash and subscription.charge_submitted_for == period_end:
            log.info(
                f"Period already paid by earlier charge {subscription.charge_transaction_hash}"
            )
            return await self._record_success(
                db,
                ctx,
                subscription,
                product,
                period_end,
                previous_status,
                ChargeReceipt(transaction_hash=subscription.charge_transaction_hash),
                log,
            )
        log.error(f"Contract reports period {period_end.isoformat()} already paid: {error.message}")
        return ChargeOutcome(subscription.id, ChargeOutcomeKind.DEFERRED, error=error.message)

    async def _record_failure(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription: Subscription,
        product: Product,
        period_end: datetime,
        previous_status: SubscriptionStatus,
        error: ChainRejectedError,
        log: ContextualLogger,
    ) -> ChargeOutcome:
        failed_count = (subscription.failed_charge_count or 0) + 1
        new_status = self._policy.status_after_failure(failed_count)

        async def work() -> tuple[Subscription, Optional[Payment]]:
            async with UnitOfWork(db) as uow:
                updated = await self._subscription_repo.compare_and_set(
                    db,
                    id=subscription.id,
                    expected={
                        "status": previous_status.value,
                        "current_period_end": period_end,
                        "charge_claimed_for": period_end,
                    },
                    values={
                        "status": new_status.value,
                        "failed_charge_count": failed_count,
                        **_CLEAR_CLAIM,
                    },
                    uow=uow,
                )
                if updated is None:
                    raise ConcurrentModificationError(
                        "subscription", subscription.id, f"claimed for {period_end.isoformat()}"
                    )
                payment = None
                if error.amount is not None:
                    payment = await self._record_payment(
                        db, ctx, updated, error.amount, None, PaymentStatus.FAILED, uow
                    )
                await uow.commit()
            return updated, payment

        def events(result: tuple[Subscription, Optional[Payment]]) -> list:
            updated, payment = result
            batch: list = []
            if payment is not None:
                batch.append(self._payment_event(ctx, updated, payment, product, completed=False))
            batch.append(self._subscription_event(ctx, updated))
            return batch

        await self._dispatcher.with_event(work, EventSpec(map=events))
        log.warning(
            f"Charge rejected ({error.message}); {previous_status.value} -> {new_status.value} "
            f"after {failed_count} consecutive failure(s)"
        )
        return ChargeOutcome(subscription.id, ChargeOutcomeKind.FAILED, error=error.message)

    async def _record_payment(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription: Subscription,
        amount: Decimal,
        transaction_hash: Optional[str],
        status: PaymentStatus,
        uow: UnitOfWork,
    ) -> Payment:
        return await self._payment_repo.create(
            db,
            obj_in={
                "subscription_id": subscription.id,
                "customer_id": subscription.customer_id,
                "amount": amount,
                "transaction_hash": transaction_hash,
                "status": status.value,
            },
            ctx=ctx,
            uow=uow,
        )

    @staticmethod
    def _payment_event(
        ctx: BaseContext,
        subscription: Subscription,
        payment: Payment,
        product: Product,
        completed: bool,
    ) -> PaymentEvent:
        factory = PaymentEvent.completed if completed else PaymentEvent.failed
        return factory(
            organization_id=ctx.organization_id,
            environment=ctx.environment,
            customer_id=subscription.customer_id,
            payment_id=payment.id,
            amount=payment.amount,
            product_id=product.id,
            subscription_id=subscription.id,
            transaction_hash=payment.transaction_hash,
        )

    @staticmethod
    def _subscription_event(
        ctx: BaseContext, subscription: Subscription
    ) -> SubscriptionLifecycleEvent:
        return SubscriptionLifecycleEvent(
            event_type=SubscriptionEventType.UPDATED,
            organization_id=ctx.organization_id,
            environment=ctx.environment,
            customer_id=subscription.customer_id,
            subscription_id=subscription.id,
            product_id=subscription.product_id,
            status=SubscriptionStatus(subscription.status),
            current_period_end=subscription.current_period_end,
        )

    def _sessions(self) -> SessionFactory:
        if self._session_factory is not None:
            return self._session_factory
        from stellarbill.db.session import get_db_context

        return get_db_context


def _charged_amount(receipt: ChargeReceipt, product: Product) -> Decimal:
    return receipt.amount if receipt.amount is not None else product.amount

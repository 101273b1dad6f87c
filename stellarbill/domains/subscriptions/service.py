"""Subscription lifecycle service: pause, resume and cancel.

The contract is the source of truth for whether a wallet can be charged, so
a state change is sent on chain first and only then recorded. Networks
without a keeper key record the change locally.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.events import (
    EventDispatcher,
    EventSpec,
    SubscriptionEventType,
    SubscriptionLifecycleEvent,
)
from stellarbill.core.exceptions import ChainRejectedError, ConcurrentModificationError
from stellarbill.core.protocols.chain import ChainClientRegistry, SubscriptionAction
from stellarbill.core.shared_models import SubscriptionStatus
from stellarbill.domains.subscriptions.exceptions import (
    SubscriptionNotFoundError,
    SubscriptionTransitionError,
)
from stellarbill.domains.subscriptions.protocols import SubscriptionServiceProtocol
from stellarbill.domains.subscriptions.repository import SubscriptionRepositoryProtocol
from stellarbill.domains.subscriptions.types import status_after
from stellarbill.models.subscription import Subscription


class SubscriptionService(SubscriptionServiceProtocol):
    """Merchant-driven subscription lifecycle."""

    def __init__(
        self,
        subscription_repo: SubscriptionRepositoryProtocol,
        chain_registry: ChainClientRegistry,
        event_dispatcher: EventDispatcher,
    ) -> None:
        """Initialize with the repository, the chain registry and the dispatcher."""
        self._subscription_repo = subscription_repo
        self._chain_registry = chain_registry
        self._dispatcher = event_dispatcher

    async def get(self, db: AsyncSession, ctx: BaseContext, subscription_id: str) -> Subscription:
        """Subscription by id.

        Raises:
            SubscriptionNotFoundError: unknown in the caller's organization and network.
        """
        subscription = await self._subscription_repo.get(db, id=subscription_id, ctx=ctx)
        if subscription is None:
            raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
        return subscription

    async def change_state(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription_id: str,
        action: SubscriptionAction,
    ) -> Subscription:
        """Apply ``action`` and emit ``subscription::updated``.

        Asking for the status a subscription already has is a no-op. A
        cancel also emits ``subscription::canceled``.

        Raises:
            SubscriptionNotFoundError: unknown subscription.
            SubscriptionTransitionError: not allowed from the current status,
                or the contract refused it.
            ChainUnavailableError / ChainTimeoutError: the chain call did not
                complete; nothing is recorded.
        """
        action = SubscriptionAction(action)
        subscription = await self.get(db, ctx, subscription_id)
        current = SubscriptionStatus(subscription.status)
        target = status_after(current, action)
        if target is None:
            if _already(current, action):
                return subscription
            raise SubscriptionTransitionError(
                f"Cannot {action.value} subscription {subscription_id} while {current.value}"
            )

        log = ctx.logger.with_context(subscription_id=subscription_id)
        client = self._chain_registry.for_network(ctx.environment)
        if client.can_charge and subscription.wallet_address:
            try:
                tx_hash = await client.set_subscription_state(
                    subscription.wallet_address, subscription.product_id, action
                )
            except ChainRejectedError as e:
                raise SubscriptionTransitionError(
                    f"Contract refused to {action.value} subscription {subscription_id}: "
                    f"{e.message}"
                ) from e
            log.info(f"Contract {action.value} submitted as {tx_hash}")
        else:
            log.warning(f"No contract call for {action.value}; recording the change locally")

        async def work() -> Optional[Subscription]:
            return await self._subscription_repo.compare_and_set(
                db,
                id=subscription_id,
                expected={"status": current.value},
                values={"status": target.value},
            )

        updated = await self._dispatcher.with_event(
            work,
            EventSpec(map=lambda row: self._events(ctx, row, target) if row else None),
        )
        if updated is None:
            raise ConcurrentModificationError("subscription", subscription_id, current.value)

        log.info(f"Subscription {current.value} -> {target.value}")
        return updated

    @staticmethod
    def _events(
        ctx: BaseContext, subscription: Subscription, target: SubscriptionStatus
    ) -> list[SubscriptionLifecycleEvent]:
        event_types = [SubscriptionEventType.UPDATED]
        if target == SubscriptionStatus.CANCELED:
            event_types.append(SubscriptionEventType.CANCELED)
        return [
            SubscriptionLifecycleEvent(
                event_type=event_type,
                organization_id=ctx.organization_id,
                environment=ctx.environment,
                customer_id=subscription.customer_id,
                subscription_id=subscription.id,
                product_id=subscription.product_id,
                status=SubscriptionStatus(subscription.status),
                current_period_end=subscription.current_period_end,
            )
            for event_type in event_types
        ]


def _already(current: SubscriptionStatus, action: SubscriptionAction) -> bool:
    return (
        (action == SubscriptionAction.PAUSE and current == SubscriptionStatus.PAUSED)
        or (action == SubscriptionAction.RESUME and current == SubscriptionStatus.ACTIVE)
        or (action == SubscriptionAction.CANCEL and current == SubscriptionStatus.CANCELED)
    )

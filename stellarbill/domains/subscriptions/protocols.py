"""Subscription domain protocols."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.protocols.chain import SubscriptionAction
from stellarbill.domains.subscriptions.types import ChargeSweepReport
from stellarbill.models.subscription import Subscription


class SubscriptionChargeSchedulerProtocol(Protocol):
    """Charges due subscriptions through the chain."""

    async def run_due_charges(self) -> ChargeSweepReport:
        """Charge every due subscription; per-subscription failures never abort the sweep."""
        ...


class SubscriptionServiceProtocol(Protocol):
    """Merchant-driven subscription lifecycle."""

    async def get(self, db: AsyncSession, ctx: BaseContext, subscription_id: str) -> Subscription:
        """Subscription by id within the caller's organization and network."""
        ...

    async def change_state(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        subscription_id: str,
        action: SubscriptionAction,
    ) -> Subscription:
        """Pause, resume or cancel a subscription, on chain first."""
        ...

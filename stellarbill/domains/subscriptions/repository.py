"""Subscription repository."""

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models.subscription import Subscription


class SubscriptionRepositoryProtocol(Protocol):
    """Access to subscriptions for settlement and the charge sweep."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Subscription]:
        """Subscription by id within the context."""
        ...

    async def get_for_customer(
        self,
        db: AsyncSession,
        *,
        organization_id: str,
        environment: str,
        customer_id: str,
        product_id: str,
    ) -> Optional[Subscription]:
        """The customer's subscription to a product, if any."""
        ...

    async def get_due(
        self, db: AsyncSession, *, now: datetime, statuses: Sequence[str]
    ) -> Sequence[Subscription]:
        """Subscriptions due for charge across all organizations."""
        ...

    async def claim_for_charge(
        self,
        db: AsyncSession,
        *,
        id: str,
        status: str,
        period_end: datetime,
        now: datetime,
        claim_expires_at: datetime,
    ) -> Optional[Subscription]:
        """Claim the current period for charging. None when another sweep holds it."""
        ...

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Subscription]:
        """Conditional update. None when ``expected`` no longer holds."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Subscription:
        """Insert a subscription."""
        ...


class SubscriptionRepository(SubscriptionRepositoryProtocol):
    """Delegates to the crud.subscription singleton."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Subscription]:
        """Subscription by id within the context."""
        return await crud.subscription.get(db, id=id, ctx=ctx)

    async def get_for_customer(
        self,
        db: AsyncSession,
        *,
        organization_id: str,
        environment: str,
        customer_id: str,
        product_id: str,
    ) -> Optional[Subscription]:
        """The customer's subscription to a product, if any."""
        return await crud.subscription.get_for_customer(
            db,
            organization_id=organization_id,
            environment=environment,
            customer_id=customer_id,
            product_id=product_id,
        )

    async def get_due(
        self, db: AsyncSession, *, now: datetime, statuses: Sequence[str]
    ) -> Sequence[Subscription]:
        """Subscriptions due for charge across all organizations."""
        return await crud.subscription.get_due(db, now=now, statuses=statuses)

    async def claim_for_charge(
        self,
        db: AsyncSession,
        *,
        id: str,
        status: str,
        period_end: datetime,
        now: datetime,
        claim_expires_at: datetime,
    ) -> Optional[Subscription]:
        """Claim the current period for charging."""
        return await crud.subscription.claim_for_charge(
            db,
            id=id,
            status=status,
            period_end=period_end,
            now=now,
            claim_expires_at=claim_expires_at,
        )

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Subscription]:
        """Conditional update."""
        return await crud.subscription.compare_and_set(
            db, id=id, expected=expected, values=values, uow=uow
        )

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Subscription:
        """Insert a subscription."""
        return await crud.subscription.create(db, obj_in=obj_in, ctx=ctx, uow=uow)

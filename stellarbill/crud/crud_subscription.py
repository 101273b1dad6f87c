"""CRUD operations for subscriptions."""

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.subscription import Subscription


class CRUDSubscription(CRUDOrganization[Subscription]):
    """CRUD for subscriptions."""

    async def get_due(
        self, db: AsyncSession, *, now: datetime, statuses: Sequence[str]
    ) -> Sequence[Subscription]:
        """Subscriptions whose period has ended and that no live claim holds."""
        query = (
            select(Subscription)
            .where(
                Subscription.status.in_(list(statuses)),
                Subscription.current_period_end <= now,
                or_(
                    Subscription.charge_claim_expires_at.is_(None),
                    Subscription.charge_claim_expires_at <= now,
                ),
            )
            .order_by(Subscription.current_period_end.asc())
        )
        result = await db.execute(query)
        return result.scalars().all()

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
        query = select(Subscription).where(
            and_(
                Subscription.organization_id == organization_id,
                Subscription.environment == environment,
                Subscription.customer_id == customer_id,
                Subscription.product_id == product_id,
            )
        )
        result = await db.execute(query)
        return result.scalars().first()

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
        """Claim a due subscription for charging its current period.

        The update only matches while the subscription is still due, status and
        period end are unchanged, and no unexpired claim exists, so two sweeps cannot both win.
        """
        stmt = (
            update(Subscription)
            .where(
                Subscription.id == id,
                Subscription.status == status,
                Subscription.current_period_end == period_end,
                Subscription.current_period_end <= now,
                or_(
                    Subscription.charge_claim_expires_at.is_(None),
                    Subscription.charge_claim_expires_at <= now,
                ),
            )
            .values(charge_claimed_for=period_end, charge_claim_expires_at=claim_expires_at)
            .returning(Subscription)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        row = result.scalar_one_or_none()
        await db.commit()
        return row


subscription = CRUDSubscription(Subscription)

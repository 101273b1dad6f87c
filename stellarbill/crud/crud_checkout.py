"""CRUD operations for checkouts."""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.shared_models import CheckoutStatus
from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.checkout import Checkout


class CRUDCheckout(CRUDOrganization[Checkout]):
    """CRUD for checkouts."""

    async def get_open(self, db: AsyncSession, *, limit: int = 500) -> Sequence[Checkout]:
        """Pending/processing checkouts across all organizations, oldest first."""
        query = (
            select(Checkout)
            .where(
                Checkout.status.in_(
                    [CheckoutStatus.PENDING.value, CheckoutStatus.PROCESSING.value]
                )
            )
            .order_by(Checkout.created_at.asc())
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()


checkout = CRUDCheckout(Checkout)

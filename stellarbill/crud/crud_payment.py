"""CRUD operations for payments."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.payment import Payment


class CRUDPayment(CRUDOrganization[Payment]):
    """CRUD for payments."""

    async def get_by_checkout(self, db: AsyncSession, *, checkout_id: str) -> Optional[Payment]:
        """The payment recorded for a checkout, if any."""
        result = await db.execute(select(Payment).where(Payment.checkout_id == checkout_id))
        return result.scalar_one_or_none()


payment = CRUDPayment(Payment)

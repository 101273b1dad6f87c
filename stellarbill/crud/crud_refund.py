"""CRUD operations for refunds."""

from decimal import Decimal

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.shared_models import RefundStatus
from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.refund import Refund


class CRUDRefund(CRUDOrganization[Refund]):
    """CRUD for refunds."""

    async def sum_refunded(self, db: AsyncSession, *, payment_id: str) -> Decimal:
        """Amount pending or refunded against a payment."""
        query = select(func.coalesce(func.sum(Refund.amount), 0)).where(
            Refund.payment_id == payment_id,
            Refund.status != RefundStatus.FAILED.value,
        )
        result = await db.execute(query)
        return Decimal(result.scalar_one())

    async def lock_payment(self, db: AsyncSession, *, payment_id: str) -> None:
        """Serialize refund requests against one payment until the transaction ends."""
        await db.execute(
            text("SELECT pg_advisory_xact_lock(hashtextextended(:key, 0))"),
            {"key": f"refunds:{payment_id}"},
        )


refund = CRUDRefund(Refund)

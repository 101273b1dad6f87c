"""CRUD operations for the credit ledger."""

from typing import Sequence

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.credit_transaction import CreditTransaction


class CRUDCreditTransaction(CRUDOrganization[CreditTransaction]):
    """CRUD for credit transactions. Rows are never updated or deleted."""

    async def sum_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> int:
        """Sum of signed amounts for (customer, product); 0 without history."""
        query = select(func.coalesce(func.sum(CreditTransaction.amount), 0)).where(
            CreditTransaction.organization_id == ctx.organization_id,
            CreditTransaction.environment == ctx.environment.value,
            CreditTransaction.customer_id == customer_id,
            CreditTransaction.product_id == product_id,
        )
        result = await db.execute(query)
        return int(result.scalar_one())

    async def list_for(
        self,
        db: AsyncSession,
        *,
        customer_id: str,
        product_id: str,
        ctx: BaseContext,
        limit: int = 100,
    ) -> Sequence[CreditTransaction]:
        """Newest-first transactions for (customer, product)."""
        query = (
            select(CreditTransaction)
            .where(
                CreditTransaction.organization_id == ctx.organization_id,
                CreditTransaction.environment == ctx.environment.value,
                CreditTransaction.customer_id == customer_id,
                CreditTransaction.product_id == product_id,
            )
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def lock_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> None:
        """Serialize writers of one balance until the current transaction ends."""
        key = f"credits:{ctx.organization_id}:{ctx.environment.value}:{customer_id}:{product_id}"
        await db.execute(
            text("SELECT pg_advisory_xact_lock(hashtextextended(:key, 0))"), {"key": key}
        )


credit_transaction = CRUDCreditTransaction(CreditTransaction)

"""Credit transaction repository and protocol."""

from typing import Any, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models.credit_transaction import CreditTransaction


class CreditTransactionRepositoryProtocol(Protocol):
    """Append-only access to credit transactions."""

    async def sum_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> int:
        """Sum of signed amounts for (customer, product)."""
        ...

    async def list_for(
        self,
        db: AsyncSession,
        *,
        customer_id: str,
        product_id: str,
        ctx: BaseContext,
        limit: int = 100,
    ) -> Sequence[CreditTransaction]:
        """Newest-first transactions."""
        ...

    async def lock_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> None:
        """Serialize writers of one balance for the current transaction."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> CreditTransaction:
        """Append a transaction."""
        ...


class CreditTransactionRepository(CreditTransactionRepositoryProtocol):
    """Delegates to the crud.credit_transaction singleton."""

    async def sum_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> int:
        """Sum of signed amounts for (customer, product)."""
        return await crud.credit_transaction.sum_balance(
            db, customer_id=customer_id, product_id=product_id, ctx=ctx
        )

    async def list_for(
        self,
        db: AsyncSession,
        *,
        customer_id: str,
        product_id: str,
        ctx: BaseContext,
        limit: int = 100,
    ) -> Sequence[CreditTransaction]:
        """Newest-first transactions."""
        return await crud.credit_transaction.list_for(
            db, customer_id=customer_id, product_id=product_id, ctx=ctx, limit=limit
        )

    async def lock_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> None:
        """Take the balance's advisory lock."""
        await crud.credit_transaction.lock_balance(
            db, customer_id=customer_id, product_id=product_id, ctx=ctx
        )

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> CreditTransaction:
        """Append a transaction."""
        return await crud.credit_transaction.create(db, obj_in=obj_in, ctx=ctx, uow=uow)

"""Payment repository."""

from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models.payment import Payment


class PaymentRepositoryProtocol(Protocol):
    """Access to recorded payments."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Payment]:
        """Payment by id within the context."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Payment:
        """Record a payment."""
        ...

    async def get_by_checkout(self, db: AsyncSession, *, checkout_id: str) -> Optional[Payment]:
        """The payment recorded for a checkout, if any."""
        ...


class PaymentRepository(PaymentRepositoryProtocol):
    """Delegates to the crud.payment singleton."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Payment]:
        """Payment by id within the context."""
        return await crud.payment.get(db, id=id, ctx=ctx)

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Payment:
        """Record a payment."""
        return await crud.payment.create(db, obj_in=obj_in, ctx=ctx, uow=uow)

    async def get_by_checkout(self, db: AsyncSession, *, checkout_id: str) -> Optional[Payment]:
        """The payment recorded for a checkout, if any."""
        return await crud.payment.get_by_checkout(db, checkout_id=checkout_id)

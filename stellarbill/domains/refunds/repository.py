"""Refund repository."""

from decimal import Decimal
from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models.refund import Refund


class RefundRepositoryProtocol(Protocol):
    """Access to refunds."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Refund]:
        """Refund by id within the context."""
        ...

    async def sum_refunded(self, db: AsyncSession, *, payment_id: str) -> Decimal:
        """Amount pending or refunded against a payment."""
        ...

    async def lock_payment(self, db: AsyncSession, *, payment_id: str) -> None:
        """Serialize refund requests against one payment until the transaction ends."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Refund:
        """Insert a refund."""
        ...

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Refund]:
        """Conditional update. None when ``expected`` no longer holds."""
        ...


class RefundRepository(RefundRepositoryProtocol):
    """Delegates to the crud.refund singleton."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Refund]:
        """Refund by id within the context."""
        return await crud.refund.get(db, id=id, ctx=ctx)

    async def sum_refunded(self, db: AsyncSession, *, payment_id: str) -> Decimal:
        """Amount pending or refunded against a payment."""
        return await crud.refund.sum_refunded(db, payment_id=payment_id)

    async def lock_payment(self, db: AsyncSession, *, payment_id: str) -> None:
        """Serialize refund requests against one payment."""
        await crud.refund.lock_payment(db, payment_id=payment_id)

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Refund:
        """Insert a refund."""
        return await crud.refund.create(db, obj_in=obj_in, ctx=ctx, uow=uow)

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Refund]:
        """Conditional update."""
        return await crud.refund.compare_and_set(
            db, id=id, expected=expected, values=values, uow=uow
        )

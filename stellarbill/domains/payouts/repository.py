"""Payout repository."""

from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models.payout import Payout


class PayoutRepositoryProtocol(Protocol):
    """Access to payouts."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Payout]:
        """Payout by id within the context."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Payout:
        """Insert a payout."""
        ...

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Payout]:
        """Conditional update. None when ``expected`` no longer holds."""
        ...


class PayoutRepository(PayoutRepositoryProtocol):
    """Delegates to the crud.payout singleton."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Payout]:
        """Payout by id within the context."""
        return await crud.payout.get(db, id=id, ctx=ctx)

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Payout:
        """Insert a payout."""
        return await crud.payout.create(db, obj_in=obj_in, ctx=ctx, uow=uow)

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Payout]:
        """Conditional update."""
        return await crud.payout.compare_and_set(
            db, id=id, expected=expected, values=values, uow=uow
        )

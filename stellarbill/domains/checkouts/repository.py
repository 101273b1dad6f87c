"""Checkout repository."""

from typing import Any, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models.checkout import Checkout


class CheckoutRepositoryProtocol(Protocol):
    """Access to checkouts."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Checkout]:
        """Checkout by id within the context."""
        ...

    async def get_unscoped(self, db: AsyncSession, *, id: str) -> Optional[Checkout]:
        """Checkout by id; the caller derives the context from the row."""
        ...

    async def get_open(self, db: AsyncSession, *, limit: int = 500) -> Sequence[Checkout]:
        """Pending/processing checkouts across all organizations."""
        ...

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Checkout]:
        """Conditional update. None when ``expected`` no longer holds."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Checkout:
        """Insert a checkout."""
        ...


class CheckoutRepository(CheckoutRepositoryProtocol):
    """Delegates to the crud.checkout singleton."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Checkout]:
        """Checkout by id within the context."""
        return await crud.checkout.get(db, id=id, ctx=ctx)

    async def get_unscoped(self, db: AsyncSession, *, id: str) -> Optional[Checkout]:
        """Checkout by id."""
        return await crud.checkout.get_unscoped(db, id=id)

    async def get_open(self, db: AsyncSession, *, limit: int = 500) -> Sequence[Checkout]:
        """Pending/processing checkouts across all organizations."""
        return await crud.checkout.get_open(db, limit=limit)

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[Checkout]:
        """Conditional update."""
        return await crud.checkout.compare_and_set(
            db, id=id, expected=expected, values=values, uow=uow
        )

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> Checkout:
        """Insert a checkout."""
        return await crud.checkout.create(db, obj_in=obj_in, ctx=ctx, uow=uow)

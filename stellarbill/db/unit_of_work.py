"""Unit of work over an AsyncSession.

Writes made inside the block are committed by an explicit ``commit()``;
leaving the block by exception (or without committing) rolls back.

    async with UnitOfWork(db) as uow:
        await crud.payout.create(db, obj_in=..., uow=uow)
        await uow.commit()
"""

from sqlalchemy.ext.asyncio import AsyncSession


class UnitOfWork:
    """Transaction boundary shared by several CRUD calls."""

    def __init__(self, session: AsyncSession) -> None:
        """Wrap ``session``."""
        self.session = session
        self.committed = False

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None or not self.committed:
            await self.rollback()

    async def commit(self) -> None:
        """Commit the session."""
        await self.session.commit()
        self.committed = True

    async def rollback(self) -> None:
        """Roll back the session."""
        await self.session.rollback()

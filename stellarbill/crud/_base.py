"""Base CRUD for organization-scoped models.

Every read and write is filtered by (organization_id, environment). Writes
accept an optional UnitOfWork: inside one, rows are only flushed and the
caller commits; without one, each write commits on its own.
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.models._base import OrganizationBase

ModelType = TypeVar("ModelType", bound=OrganizationBase)


class CRUDOrganization(Generic[ModelType]):
    """Generic organization/network-scoped CRUD."""

    def __init__(self, model: Type[ModelType]):
        """Bind to ``model``."""
        self.model = model

    async def get(self, db: AsyncSession, id: str, ctx: BaseContext) -> Optional[ModelType]:
        """Get a row by id within the context's organization and network."""
        query = select(self.model).where(
            self.model.id == id,
            self.model.organization_id == ctx.organization_id,
            self.model.environment == ctx.environment.value,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_unscoped(self, db: AsyncSession, id: str) -> Optional[ModelType]:
        """Get a row by id only. For system sweeps that establish the context from the row."""
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_multi(
        self, db: AsyncSession, ctx: BaseContext, *, skip: int = 0, limit: int = 100
    ) -> Sequence[ModelType]:
        """List rows of the context, newest first."""
        query = (
            select(self.model)
            .where(
                self.model.organization_id == ctx.organization_id,
                self.model.environment == ctx.environment.value,
            )
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: Optional[UnitOfWork] = None,
    ) -> ModelType:
        """Insert a row owned by the context."""
        db_obj = self.model(
            **obj_in, organization_id=ctx.organization_id, environment=ctx.environment.value
        )
        db.add(db_obj)
        if uow is None:
            await db.commit()
        else:
            await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: Optional[UnitOfWork] = None,
    ) -> Optional[ModelType]:
        """Update ``id`` only if every column in ``expected`` still holds its value.

        Returns the updated row, or None when another writer got there first.
        """
        conditions = [self.model.id == id]
        for column, value in expected.items():
            attr = getattr(self.model, column)
            conditions.append(attr.is_(None) if value is None else attr == value)

        stmt = (
            update(self.model)
            .where(*conditions)
            .values(**values)
            .returning(self.model)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        row = result.scalar_one_or_none()
        if uow is None:
            await db.commit()
        return row

"""Product repository."""

from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.core.context import BaseContext
from stellarbill.models.product import Product


class ProductRepositoryProtocol(Protocol):
    """Read access to products."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Product]:
        """Product by id within the context."""
        ...


class ProductRepository(ProductRepositoryProtocol):
    """Delegates to the crud.product singleton."""

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Product]:
        """Product by id within the context."""
        return await crud.product.get(db, id=id, ctx=ctx)

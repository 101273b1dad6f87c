"""Fake product repository for testing."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.models.product import Product


class FakeProductRepository:
    """In-memory fake for ProductRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[str, Product] = {}
        self._calls: list[tuple] = []

    def seed(self, product: Product) -> None:
        """Populate store with test data."""
        self._store[product.id] = product

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Product]:
        """Product by id within the context."""
        self._calls.append(("get", db, id))
        product = self._store.get(id)
        if product is None or not ctx.owns(product.organization_id, product.environment):
            return None
        return product

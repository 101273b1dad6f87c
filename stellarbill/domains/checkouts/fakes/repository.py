"""Fake checkout repository for testing."""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import CheckoutStatus
from stellarbill.models import Checkout, generate_id


class FakeCheckoutRepository:
    """In-memory fake for CheckoutRepositoryProtocol.

    ``compare_and_set`` honours its condition so concurrent refreshes of one
    checkout race the same way they do against Postgres.
    """

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[str, Checkout] = {}
        self._calls: list[tuple] = []

    def seed(self, checkout: Checkout) -> None:
        """Populate store with test data."""
        self._store[checkout.id] = checkout

    def rows(self) -> list[Checkout]:
        """Stored checkouts."""
        return list(self._store.values())

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Checkout]:
        """Checkout by id within the context."""
        self._calls.append(("get", db, id))
        row = self._store.get(id)
        if row is None or not ctx.owns(row.organization_id, row.environment):
            return None
        return row

    async def get_unscoped(self, db: AsyncSession, *, id: str) -> Optional[Checkout]:
        """Checkout by id."""
        self._calls.append(("get_unscoped", db, id))
        return self._store.get(id)

    async def get_open(self, db: AsyncSession, *, limit: int = 500) -> Sequence[Checkout]:
        """Pending/processing checkouts."""
        self._calls.append(("get_open", db, limit))
        open_statuses = (CheckoutStatus.PENDING.value, CheckoutStatus.PROCESSING.value)
        return [c for c in self._store.values() if c.status in open_statuses][:limit]

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: object = None,
    ) -> Optional[Checkout]:
        """Apply ``values`` only if every ``expected`` column matches."""
        self._calls.append(("compare_and_set", db, id, expected, values))
        row = self._store.get(id)
        if row is None or any(getattr(row, k) != v for k, v in expected.items()):
            return None
        for key, value in values.items():
            setattr(row, key, value)
        return row

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: object = None,
    ) -> Checkout:
        """Insert a checkout (fake)."""
        self._calls.append(("create", db, obj_in, uow))
        row = Checkout(
            id=generate_id("ck"),
            created_at=datetime.now(timezone.utc),
            organization_id=ctx.organization_id,
            environment=ctx.environment.value,
            **{"status": CheckoutStatus.PENDING.value, **obj_in},
        )
        self._store[row.id] = row
        return row

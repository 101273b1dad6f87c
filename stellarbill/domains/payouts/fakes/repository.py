"""Fake payout repository for testing."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.models import Payout, generate_id


class FakePayoutRepository:
    """In-memory fake for PayoutRepositoryProtocol.

    ``fail_on_create`` makes the n-th create (1-based) raise, to exercise a
    batch insert failing half way.
    """

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[str, Payout] = {}
        self._calls: list[tuple] = []
        self.fail_on_create: Optional[int] = None

    def seed(self, payout: Payout) -> None:
        """Populate store with test data."""
        self._store[payout.id] = payout

    def rows(self) -> list[Payout]:
        """Stored payouts."""
        return list(self._store.values())

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Payout]:
        """Payout by id within the context."""
        self._calls.append(("get", db, id))
        row = self._store.get(id)
        if row is None or not ctx.owns(row.organization_id, row.environment):
            return None
        return row

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: object = None,
    ) -> Payout:
        """Insert a payout (fake)."""
        self._calls.append(("create", db, obj_in, uow))
        if self.fail_on_create == self.call_count("create"):
            raise RuntimeError("insert failed")
        row = Payout(
            id=generate_id("po"),
            created_at=datetime.now(timezone.utc),
            organization_id=ctx.organization_id,
            environment=ctx.environment.value,
            **obj_in,
        )
        self._store[row.id] = row
        return row

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: object = None,
    ) -> Optional[Payout]:
        """Apply ``values`` only if every ``expected`` column matches."""
        self._calls.append(("compare_and_set", db, id, expected, values))
        row = self._store.get(id)
        if row is None or any(getattr(row, k) != v for k, v in expected.items()):
            return None
        for key, value in values.items():
            setattr(row, key, value)
        return row

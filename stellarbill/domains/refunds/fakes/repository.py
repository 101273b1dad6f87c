"""Fake refund repository for testing."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import RefundStatus
from stellarbill.models import Refund, generate_id


class FakeRefundRepository:
    """In-memory fake for RefundRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[str, Refund] = {}
        self._calls: list[tuple] = []

    def seed(self, refund: Refund) -> None:
        """Populate store with test data."""
        self._store[refund.id] = refund

    def rows(self) -> list[Refund]:
        """Stored refunds."""
        return list(self._store.values())

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Refund]:
        """Refund by id within the context."""
        self._calls.append(("get", db, id))
        row = self._store.get(id)
        if row is None or not ctx.owns(row.organization_id, row.environment):
            return None
        return row

    async def sum_refunded(self, db: AsyncSession, *, payment_id: str) -> Decimal:
        """Sum of non-failed refunds of the payment."""
        self._calls.append(("sum_refunded", db, payment_id))
        return sum(
            (
                r.amount
                for r in self._store.values()
                if r.payment_id == payment_id and r.status != RefundStatus.FAILED.value
            ),
            Decimal("0"),
        )

    async def lock_payment(self, db: AsyncSession, *, payment_id: str) -> None:
        """Record the call; the real lock lives in Postgres."""
        self._calls.append(("lock_payment", db, payment_id))

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: object = None,
    ) -> Refund:
        """Insert a refund (fake)."""
        self._calls.append(("create", db, obj_in, uow))
        row = Refund(
            id=generate_id("rf"),
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
    ) -> Optional[Refund]:
        """Apply ``values`` only if every ``expected`` column matches."""
        self._calls.append(("compare_and_set", db, id, expected, values))
        row = self._store.get(id)
        if row is None or any(getattr(row, k) != v for k, v in expected.items()):
            return None
        for key, value in values.items():
            setattr(row, key, value)
        return row


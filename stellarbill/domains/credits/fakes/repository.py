"""Fake credit transaction repository for testing."""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.models import CreditTransaction, generate_id


class FakeCreditTransactionRepository:
    """In-memory fake for CreditTransactionRepositoryProtocol.

    ``fail_next_create`` makes the next append raise, to exercise rollback paths.
    """

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: list[CreditTransaction] = []
        self._calls: list[tuple] = []
        self.fail_next_create: Optional[Exception] = None

    def seed(self, obj: CreditTransaction) -> None:
        """Populate store with test data."""
        self._store.append(obj)

    def rows(self) -> list[CreditTransaction]:
        """All stored transactions in insertion order."""
        return list(self._store)

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    def _matching(self, customer_id: str, product_id: str, ctx: BaseContext):
        return [
            t
            for t in self._store
            if t.organization_id == ctx.organization_id
            and t.environment == ctx.environment.value
            and t.customer_id == customer_id
            and t.product_id == product_id
        ]

    async def sum_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> int:
        """Sum of signed amounts for (customer, product)."""
        self._calls.append(("sum_balance", db, customer_id, product_id))
        return sum(t.amount for t in self._matching(customer_id, product_id, ctx))

    async def list_for(
        self,
        db: AsyncSession,
        *,
        customer_id: str,
        product_id: str,
        ctx: BaseContext,
        limit: int = 100,
    ) -> Sequence[CreditTransaction]:
        """Newest-first transactions."""
        self._calls.append(("list_for", db, customer_id, product_id))
        return list(reversed(self._matching(customer_id, product_id, ctx)))[:limit]

    async def lock_balance(
        self, db: AsyncSession, *, customer_id: str, product_id: str, ctx: BaseContext
    ) -> None:
        """Record the lock request."""
        self._calls.append(("lock_balance", db, customer_id, product_id))

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: object = None,
    ) -> CreditTransaction:
        """Append a transaction (fake)."""
        self._calls.append(("create", db, obj_in, uow))
        if self.fail_next_create is not None:
            error, self.fail_next_create = self.fail_next_create, None
            raise error
        tx = CreditTransaction(
            id=generate_id("ct"),
            created_at=datetime.now(timezone.utc),
            organization_id=ctx.organization_id,
            environment=ctx.environment.value,
            **obj_in,
        )
        self._store.append(tx)
        return tx

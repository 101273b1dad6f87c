"""Fake payment repository for testing."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.models import Payment, generate_id


class FakePaymentRepository:
    """In-memory fake for PaymentRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: list[Payment] = []
        self._calls: list[tuple] = []

    def seed(self, payment: Payment) -> None:
        """Populate store with test data."""
        self._store.append(payment)

    def rows(self) -> list[Payment]:
        """Recorded payments in insertion order."""
        return list(self._store)

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Payment]:
        """Payment by id within the context."""
        self._calls.append(("get", db, id))
        return next(
            (p for p in self._store if p.id == id and ctx.owns(p.organization_id, p.environment)),
            None,
        )

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        ctx: BaseContext,
        uow: object = None,
    ) -> Payment:
        """Record a payment (fake)."""
        self._calls.append(("create", db, obj_in, uow))
        payment = Payment(
            id=generate_id("pay"),
            created_at=datetime.now(timezone.utc),
            organization_id=ctx.organization_id,
            environment=ctx.environment.value,
            **obj_in,
        )
        self._store.append(payment)
        return payment

    async def get_by_checkout(self, db: AsyncSession, *, checkout_id: str) -> Optional[Payment]:
        """The payment recorded for a checkout, if any."""
        self._calls.append(("get_by_checkout", db, checkout_id))
        return next((p for p in self._store if p.checkout_id == checkout_id), None)

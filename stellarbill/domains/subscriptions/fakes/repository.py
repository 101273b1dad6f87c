"""Fake subscription repository for testing."""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.models import Subscription, generate_id


class FakeSubscriptionRepository:
    """In-memory fake for SubscriptionRepositoryProtocol.

    ``compare_and_set`` and ``claim_for_charge`` honour their conditions so
    tests can race two callers against one row.
    """

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[str, Subscription] = {}
        self._calls: list[tuple] = []

    def seed(self, subscription: Subscription) -> None:
        """Populate store with test data."""
        self._store[subscription.id] = subscription

    def rows(self) -> list[Subscription]:
        """Stored subscriptions."""
        return list(self._store.values())

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for c in self._calls if c[0] == method)

    async def get(self, db: AsyncSession, *, id: str, ctx: BaseContext) -> Optional[Subscription]:
        """Subscription by id within the context."""
        self._calls.append(("get", db, id))
        row = self._store.get(id)
        if row is None or not ctx.owns(row.organization_id, row.environment):
            return None
        return row

    async def get_for_customer(
        self,
        db: AsyncSession,
        *,
        organization_id: str,
        environment: str,
        customer_id: str,
        product_id: str,
    ) -> Optional[Subscription]:
        """The customer's subscription to a product, if any."""
        self._calls.append(("get_for_customer", db, customer_id, product_id))
        for row in self._store.values():
            if (
                row.organization_id == organization_id
                and row.environment == environment
                and row.customer_id == customer_id
                and row.product_id == product_id
            ):
                return row
        return None

    async def get_due(
        self, db: AsyncSession, *, now: datetime, statuses: Sequence[str]
    ) -> Sequence[Subscription]:
        """Due, unclaimed subscriptions ordered by period end."""
        self._calls.append(("get_due", db, now, tuple(statuses)))
        due = [
            s
            for s in self._store.values()
            if s.status in statuses
            and s.current_period_end <= now
            and (s.charge_claim_expires_at is None or s.charge_claim_expires_at <= now)
        ]
        return sorted(due, key=lambda s: s.current_period_end)

    async def claim_for_charge(
        self,
        db: AsyncSession,
        *,
        id: str,
        status: str,
        period_end: datetime,
        now: datetime,
        claim_expires_at: datetime,
    ) -> Optional[Subscription]:
        """Claim the period if it is still due and unclaimed."""
        self._calls.append(("claim_for_charge", db, id, period_end))
        row = self._store.get(id)
        if (
            row is None
            or row.status != status
            or row.current_period_end != period_end
            or row.current_period_end > now
            or (row.charge_claim_expires_at is not None and row.charge_claim_expires_at > now)
        ):
            return None
        row.charge_claimed_for = period_end
        row.charge_claim_expires_at = claim_expires_at
        return row

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        id: str,
        expected: dict[str, Any],
        values: dict[str, Any],
        uow: object = None,
    ) -> Optional[Subscription]:
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
    ) -> Subscription:
        """Insert a subscription (fake)."""
        self._calls.append(("create", db, obj_in, uow))
        defaults: dict[str, Any] = {"failed_charge_count": 0}
        row = Subscription(
            id=generate_id("sub"),
            created_at=datetime.now(timezone.utc),
            organization_id=ctx.organization_id,
            environment=ctx.environment.value,
            **{**defaults, **obj_in},
        )
        self._store[row.id] = row
        return row

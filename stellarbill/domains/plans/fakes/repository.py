"""Fake plan repository for testing."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.models._base import OrganizationBase
from stellarbill.models.organization import Plan


class FakePlanRepository:
    """In-memory fake for PlanRepositoryProtocol.

    Rows are seeded as (model, organization_id, environment, created_at)
    tuples so counting honours the same filters as the real query.
    """

    def __init__(self) -> None:
        """Initialize with empty stores and call log."""
        self._plans: dict[str, Plan] = {}
        self._rows: list[tuple[type, str, str, datetime]] = []
        self._calls: list[tuple] = []

    def seed_plan(self, organization_id: str, plan: Plan) -> None:
        """Attach a plan to an organization."""
        self._plans[organization_id] = plan

    def seed_rows(
        self,
        model: type[OrganizationBase],
        count: int,
        organization_id: str,
        environment: str = "testnet",
        created_at: Optional[datetime] = None,
    ) -> None:
        """Pretend ``count`` rows of ``model`` exist."""
        created_at = created_at or datetime.now(timezone.utc)
        self._rows.extend([(model, organization_id, environment, created_at)] * count)

    async def get_plan_for(self, db: AsyncSession, *, organization_id: str) -> Optional[Plan]:
        """The organization's plan, if any."""
        self._calls.append(("get_plan_for", db, organization_id))
        return self._plans.get(organization_id)

    async def count_rows(
        self,
        db: AsyncSession,
        *,
        model: type[OrganizationBase],
        organization_id: str,
        environment: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count seeded rows matching the filters."""
        self._calls.append(("count_rows", db, model, organization_id, environment, since))
        return sum(
            1
            for m, org, env, created in self._rows
            if m is model
            and org == organization_id
            and (environment is None or env == environment)
            and (since is None or created >= since)
        )

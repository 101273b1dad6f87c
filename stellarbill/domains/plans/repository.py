"""Plan and usage-count repository."""

from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.models._base import OrganizationBase
from stellarbill.models.organization import Plan


class PlanRepositoryProtocol(Protocol):
    """Plan lookup and live row counts."""

    async def get_plan_for(self, db: AsyncSession, *, organization_id: str) -> Optional[Plan]:
        """The organization's plan, if any."""
        ...

    async def count_rows(
        self,
        db: AsyncSession,
        *,
        model: type[OrganizationBase],
        organization_id: str,
        environment: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count an organization's rows of ``model``."""
        ...


class PlanRepository(PlanRepositoryProtocol):
    """Delegates to the crud.organization singleton."""

    async def get_plan_for(self, db: AsyncSession, *, organization_id: str) -> Optional[Plan]:
        """The organization's plan, if any."""
        return await crud.organization.get_plan_for(db, organization_id=organization_id)

    async def count_rows(
        self,
        db: AsyncSession,
        *,
        model: type[OrganizationBase],
        organization_id: str,
        environment: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count an organization's rows of ``model``."""
        return await crud.organization.count_rows(
            db,
            model=model,
            organization_id=organization_id,
            environment=environment,
            since=since,
        )

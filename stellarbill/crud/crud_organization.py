"""CRUD operations for organizations, plans, API keys and secrets."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.models._base import OrganizationBase
from stellarbill.models.organization import APIKey, Organization, OrganizationSecret, Plan


class CRUDOrganizationLookup:
    """Lookups used to resolve request identity and plan limits."""

    async def get_api_key(self, db: AsyncSession, *, key_hash: str) -> Optional[APIKey]:
        """API key row by hash."""
        result = await db.execute(select(APIKey).where(APIKey.key_hash == key_hash))
        return result.scalar_one_or_none()

    async def get_secret(
        self, db: AsyncSession, *, organization_id: str, environment: str
    ) -> Optional[OrganizationSecret]:
        """Chain account and signing secret of an organization on a network."""
        result = await db.execute(
            select(OrganizationSecret).where(
                OrganizationSecret.organization_id == organization_id,
                OrganizationSecret.environment == environment,
            )
        )
        return result.scalar_one_or_none()

    async def get_plan_for(self, db: AsyncSession, *, organization_id: str) -> Optional[Plan]:
        """The plan attached to an organization, if any."""
        query = (
            select(Plan)
            .join(Organization, Organization.plan_id == Plan.id)
            .where(Organization.id == organization_id)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def count_rows(
        self,
        db: AsyncSession,
        *,
        model: type[OrganizationBase],
        organization_id: str,
        environment: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Live count of an organization's rows in ``model``'s table."""
        query = select(func.count()).select_from(model).where(
            model.organization_id == organization_id
        )
        if environment is not None:
            query = query.where(model.environment == environment)
        if since is not None:
            query = query.where(model.created_at >= since)
        result = await db.execute(query)
        return int(result.scalar_one())


organization = CRUDOrganizationLookup()

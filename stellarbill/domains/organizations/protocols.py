"""Organization resolver protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import Network
from stellarbill.models.organization import OrganizationSecret


class OrganizationResolverProtocol(Protocol):
    """Resolve request identity and per-organization secrets."""

    async def resolve_api_key(self, db: AsyncSession, api_key: str) -> BaseContext:
        """API key to (organization, network) context."""
        ...

    async def resolve_secret(
        self, db: AsyncSession, organization_id: str, environment: Network
    ) -> OrganizationSecret:
        """(organization, network) to chain account and signing secret."""
        ...

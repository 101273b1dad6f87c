"""Organization resolver."""

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import Network
from stellarbill.domains.organizations.exceptions import (
    InvalidApiKeyError,
    OrganizationNotFoundError,
)
from stellarbill.domains.organizations.protocols import OrganizationResolverProtocol
from stellarbill.domains.organizations.repository import OrganizationRepositoryProtocol
from stellarbill.domains.organizations.types import hash_api_key
from stellarbill.models.organization import OrganizationSecret


class OrganizationResolver(OrganizationResolverProtocol):
    """Maps API keys to contexts and contexts to secrets."""

    def __init__(self, org_repo: OrganizationRepositoryProtocol) -> None:
        """Initialize with the organization repository."""
        self._org_repo = org_repo

    async def resolve_api_key(self, db: AsyncSession, api_key: str) -> BaseContext:
        """Resolve an API key; the key fixes both organization and network."""
        if not api_key:
            raise InvalidApiKeyError("API key is required")
        record = await self._org_repo.get_api_key(db, key_hash=hash_api_key(api_key))
        if record is None:
            raise InvalidApiKeyError()
        return BaseContext(
            organization_id=record.organization_id, environment=Network(record.environment)
        )

    async def resolve_secret(
        self, db: AsyncSession, organization_id: str, environment: Network
    ) -> OrganizationSecret:
        """Resolve the organization's chain account on ``environment``."""
        secret = await self._org_repo.get_secret(
            db, organization_id=organization_id, environment=Network(environment).value
        )
        if secret is None:
            raise OrganizationNotFoundError(
                f"No chain account configured for organization {organization_id} "
                f"on {Network(environment).value}"
            )
        return secret

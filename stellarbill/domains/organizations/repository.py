"""Organization identity repository."""

from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.models.organization import APIKey, OrganizationSecret


class OrganizationRepositoryProtocol(Protocol):
    """Read access to API keys and per-network secrets."""

    async def get_api_key(self, db: AsyncSession, *, key_hash: str) -> Optional[APIKey]:
        """API key row by hash."""
        ...

    async def get_secret(
        self, db: AsyncSession, *, organization_id: str, environment: str
    ) -> Optional[OrganizationSecret]:
        """Secret row for (organization, network)."""
        ...


class OrganizationRepository(OrganizationRepositoryProtocol):
    """Delegates to the crud.organization singleton."""

    async def get_api_key(self, db: AsyncSession, *, key_hash: str) -> Optional[APIKey]:
        """API key row by hash."""
        return await crud.organization.get_api_key(db, key_hash=key_hash)

    async def get_secret(
        self, db: AsyncSession, *, organization_id: str, environment: str
    ) -> Optional[OrganizationSecret]:
        """Secret row for (organization, network)."""
        return await crud.organization.get_secret(
            db, organization_id=organization_id, environment=environment
        )

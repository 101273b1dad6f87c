"""Fake organization repository for testing."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.domains.organizations.types import hash_api_key
from stellarbill.models import generate_id
from stellarbill.models.organization import APIKey, OrganizationSecret


class FakeOrganizationRepository:
    """In-memory fake for OrganizationRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty stores and call log."""
        self._keys: dict[str, APIKey] = {}
        self._secrets: dict[tuple[str, str], OrganizationSecret] = {}
        self._calls: list[tuple] = []

    def seed_api_key(self, api_key: str, organization_id: str, environment: str) -> APIKey:
        """Register a plaintext API key."""
        record = APIKey(
            id=generate_id("key"),
            key_hash=hash_api_key(api_key),
            organization_id=organization_id,
            environment=environment,
        )
        self._keys[record.key_hash] = record
        return record

    def seed_secret(
        self,
        organization_id: str,
        environment: str,
        public_key: str,
        webhook_signing_secret: str,
    ) -> OrganizationSecret:
        """Register an organization's chain account on a network."""
        secret = OrganizationSecret(
            id=generate_id("sec"),
            organization_id=organization_id,
            environment=environment,
            public_key=public_key,
            webhook_signing_secret=webhook_signing_secret,
        )
        self._secrets[(organization_id, environment)] = secret
        return secret

    async def get_api_key(self, db: AsyncSession, *, key_hash: str) -> Optional[APIKey]:
        """API key row by hash."""
        self._calls.append(("get_api_key", db, key_hash))
        return self._keys.get(key_hash)

    async def get_secret(
        self, db: AsyncSession, *, organization_id: str, environment: str
    ) -> Optional[OrganizationSecret]:
        """Secret row for (organization, network)."""
        self._calls.append(("get_secret", db, organization_id, environment))
        return self._secrets.get((organization_id, environment))

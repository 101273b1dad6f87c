"""Unit tests for OrganizationResolver."""

from unittest.mock import AsyncMock

import pytest

from stellarbill.core.shared_models import Network
from stellarbill.domains.organizations.exceptions import (
    InvalidApiKeyError,
    OrganizationNotFoundError,
)
from stellarbill.domains.organizations.fakes.repository import FakeOrganizationRepository
from stellarbill.domains.organizations.resolver import OrganizationResolver


def _make_resolver() -> tuple[OrganizationResolver, FakeOrganizationRepository]:
    repo = FakeOrganizationRepository()
    return OrganizationResolver(org_repo=repo), repo


@pytest.fixture
def db():
    return AsyncMock()


class TestResolveApiKey:
    @pytest.mark.asyncio
    async def test_key_resolves_to_org_and_network(self, db):
        resolver, repo = _make_resolver()
        repo.seed_api_key("sk_test_123", "org_a", "mainnet")

        ctx = await resolver.resolve_api_key(db, "sk_test_123")

        assert ctx.organization_id == "org_a"
        assert ctx.environment == Network.MAINNET

    @pytest.mark.asyncio
    async def test_unknown_key_rejected(self, db):
        resolver, _ = _make_resolver()

        with pytest.raises(InvalidApiKeyError):
            await resolver.resolve_api_key(db, "sk_nope")

    @pytest.mark.asyncio
    async def test_empty_key_rejected(self, db):
        resolver, _ = _make_resolver()

        with pytest.raises(InvalidApiKeyError):
            await resolver.resolve_api_key(db, "")


class TestResolveSecret:
    @pytest.mark.asyncio
    async def test_secret_for_network(self, db):
        resolver, repo = _make_resolver()
        repo.seed_secret("org_a", "testnet", "GPUBLIC", "whsec_abc")

        secret = await resolver.resolve_secret(db, "org_a", Network.TESTNET)

        assert secret.public_key == "GPUBLIC"

    @pytest.mark.asyncio
    async def test_unconfigured_network_is_not_found(self, db):
        resolver, repo = _make_resolver()
        repo.seed_secret("org_a", "testnet", "GPUBLIC", "whsec_abc")

        with pytest.raises(OrganizationNotFoundError):
            await resolver.resolve_secret(db, "org_a", Network.MAINNET)

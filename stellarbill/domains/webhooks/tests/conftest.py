"""Webhook domain test fixtures and helpers."""

from typing import Optional
from unittest.mock import AsyncMock

import pytest

from stellarbill.adapters.webhooks.fake import VALID_SIGNATURE, FakeWebhookSignatureVerifier
from stellarbill.domains.checkouts.tests.conftest import DEFAULT_ORG_ID, TrackerFakes, _make_tracker
from stellarbill.domains.organizations.fakes.repository import FakeOrganizationRepository
from stellarbill.domains.organizations.resolver import OrganizationResolver
from stellarbill.domains.webhooks.applier import WebhookEventApplier
from stellarbill.models import Product

ORG_PUBLIC_KEY = "GORGANIZATIONACCOUNT"
SIGNING_SECRET = "whsec_dGVzdA=="


def _headers(signature: str = VALID_SIGNATURE) -> dict[str, str]:
    return {
        "webhook-id": "msg_1",
        "webhook-timestamp": "1700000000",
        "webhook-signature": signature,
    }


def _make_applier(
    product: Optional[Product] = None, configured: bool = True
) -> tuple[WebhookEventApplier, TrackerFakes, FakeWebhookSignatureVerifier]:
    """Build an applier over a fake-wired tracker. The org's secret is trusted."""
    tracker, fakes = _make_tracker(product=product)
    org_repo = FakeOrganizationRepository()
    if configured:
        org_repo.seed_secret(DEFAULT_ORG_ID, "testnet", ORG_PUBLIC_KEY, SIGNING_SECRET)
    verifier = FakeWebhookSignatureVerifier()
    verifier.allow(SIGNING_SECRET)
    applier = WebhookEventApplier(
        org_resolver=OrganizationResolver(org_repo=org_repo),
        signature_verifier=verifier,
        checkout_repo=fakes.checkouts,
        tracker=tracker,
    )
    return applier, fakes, verifier


@pytest.fixture
def db():
    return AsyncMock()

"""Payout domain test fixtures and helpers."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest
from stellar_sdk import Keypair

from stellarbill.adapters.event_bus.fake import FakeEventBus
from stellarbill.core.context import BaseContext
from stellarbill.core.events import EventDispatcher
from stellarbill.core.shared_models import Network, PayoutStatus
from stellarbill.domains.payouts.fakes.repository import FakePayoutRepository
from stellarbill.domains.payouts.pipeline import PayoutPipeline
from stellarbill.domains.payouts.types import PayoutItem
from stellarbill.domains.plans.fakes.repository import FakePlanRepository
from stellarbill.domains.plans.gate import PlanLimitGate
from stellarbill.models import Payout

DEFAULT_ORG_ID = "org_test"
WALLET = Keypair.random().public_key


def _make_ctx(org_id: str = DEFAULT_ORG_ID, network: Network = Network.TESTNET) -> BaseContext:
    return BaseContext(organization_id=org_id, environment=network)


def _make_item(**overrides: Any) -> PayoutItem:
    defaults = dict(amount=Decimal("50"), wallet_address=WALLET, memo="april")
    defaults.update(overrides)
    return PayoutItem(**defaults)


def _make_payout(payout_id: str = "po_1", **overrides: Any) -> Payout:
    defaults = dict(
        id=payout_id,
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        amount=Decimal("50"),
        wallet_address=WALLET,
        memo=None,
        status=PayoutStatus.PENDING.value,
        transaction_hash=None,
    )
    defaults.update(overrides)
    return Payout(**defaults)


def _make_pipeline() -> tuple[
    PayoutPipeline, FakePayoutRepository, FakePlanRepository, FakeEventBus
]:
    repo = FakePayoutRepository()
    plans = FakePlanRepository()
    bus = FakeEventBus()
    pipeline = PayoutPipeline(
        payout_repo=repo,
        event_dispatcher=EventDispatcher(bus),
        plan_gate=PlanLimitGate(plan_repo=plans),
    )
    return pipeline, repo, plans, bus


@pytest.fixture
def ctx():
    return _make_ctx()


@pytest.fixture
def db():
    return AsyncMock()

"""Refund domain test fixtures and helpers."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest
from stellar_sdk import Keypair

from stellarbill.adapters.event_bus.fake import FakeEventBus
from stellarbill.core.context import BaseContext
from stellarbill.core.events import EventDispatcher
from stellarbill.core.shared_models import Network, PaymentStatus, RefundStatus
from stellarbill.domains.payments.fakes.repository import FakePaymentRepository
from stellarbill.domains.refunds.fakes.repository import FakeRefundRepository
from stellarbill.domains.refunds.service import RefundService
from stellarbill.domains.refunds.types import RefundRequest
from stellarbill.models import Payment, Refund

DEFAULT_ORG_ID = "org_test"
WALLET = Keypair.random().public_key


def _make_ctx(org_id: str = DEFAULT_ORG_ID, network: Network = Network.TESTNET) -> BaseContext:
    return BaseContext(organization_id=org_id, environment=network)


def _make_payment(payment_id: str = "pay_1", **overrides: Any) -> Payment:
    defaults = dict(
        id=payment_id,
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        checkout_id=None,
        subscription_id="sub_1",
        customer_id="cus_1",
        amount=Decimal("10"),
        transaction_hash="tx_paid",
        status=PaymentStatus.CONFIRMED.value,
    )
    defaults.update(overrides)
    return Payment(**defaults)


def _make_refund(refund_id: str = "rf_1", **overrides: Any) -> Refund:
    defaults = dict(
        id=refund_id,
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        payment_id="pay_1",
        customer_id="cus_1",
        amount=Decimal("4"),
        wallet_address=WALLET,
        reason=None,
        status=RefundStatus.PENDING.value,
        transaction_hash=None,
    )
    defaults.update(overrides)
    return Refund(**defaults)


def _make_request(**overrides: Any) -> RefundRequest:
    defaults = dict(payment_id="pay_1", wallet_address=WALLET)
    defaults.update(overrides)
    return RefundRequest(**defaults)


def _make_service() -> tuple[
    RefundService, FakeRefundRepository, FakePaymentRepository, FakeEventBus
]:
    refunds = FakeRefundRepository()
    payments = FakePaymentRepository()
    bus = FakeEventBus()
    service = RefundService(
        refund_repo=refunds,
        payment_repo=payments,
        event_dispatcher=EventDispatcher(bus),
    )
    return service, refunds, payments, bus


@pytest.fixture
def ctx():
    return _make_ctx()


@pytest.fixture
def db():
    return AsyncMock()

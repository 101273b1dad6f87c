"""Credit ledger test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import CreditTransactionKind, Network
from stellarbill.domains.credits.fakes.repository import FakeCreditTransactionRepository
from stellarbill.domains.credits.ledger import CreditLedger
from stellarbill.models import CreditTransaction, Product, generate_id

DEFAULT_ORG_ID = "org_test"
DEFAULT_CUSTOMER_ID = "cus_1"
DEFAULT_PRODUCT_ID = "prod_1"


def _make_ctx(org_id: str = DEFAULT_ORG_ID, network: Network = Network.TESTNET) -> BaseContext:
    return BaseContext(organization_id=org_id, environment=network)


def _make_ledger(balance_floor: int = 0) -> tuple[CreditLedger, FakeCreditTransactionRepository]:
    repo = FakeCreditTransactionRepository()
    return CreditLedger(credit_repo=repo, balance_floor=balance_floor), repo


def _make_transaction(amount: int, **overrides: Any) -> CreditTransaction:
    defaults = dict(
        id=generate_id("ct"),
        created_at=datetime.now(timezone.utc),
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        customer_id=DEFAULT_CUSTOMER_ID,
        product_id=DEFAULT_PRODUCT_ID,
        amount=amount,
        kind=(CreditTransactionKind.GRANT if amount >= 0 else CreditTransactionKind.DEBIT).value,
    )
    defaults.update(overrides)
    return CreditTransaction(**defaults)


def _make_product(**overrides: Any) -> Product:
    defaults = dict(
        id=DEFAULT_PRODUCT_ID,
        organization_id=DEFAULT_ORG_ID,
        environment=Network.TESTNET.value,
        name="API calls",
        amount=10,
        credits_granted=1000,
        unit_divisor=10,
        units_per_credit=1,
    )
    defaults.update(overrides)
    return Product(**defaults)


@pytest.fixture
def ctx():
    return _make_ctx()


@pytest.fixture
def db():
    return AsyncMock()

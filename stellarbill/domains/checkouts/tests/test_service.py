"""Unit tests for CheckoutService."""

from decimal import Decimal

import pytest

from stellarbill.core.exceptions import InvalidStateError
from stellarbill.core.shared_models import CheckoutStatus, Network
from stellarbill.domains.checkouts.tests.conftest import (
    DEFAULT_ORG_ID,
    DEFAULT_PRODUCT_ID,
    _make_checkout_service,
    _make_ctx,
)
from stellarbill.domains.plans.exceptions import PlanLimitExceededError
from stellarbill.domains.products.exceptions import ProductNotFoundError
from stellarbill.models import Checkout


class TestCreateCheckout:
    @pytest.mark.asyncio
    async def test_opens_pending_checkout_at_product_price(self, db, ctx):
        service, checkouts, _, bus = _make_checkout_service()

        checkout = await service.create_checkout(
            db, ctx, product_id=DEFAULT_PRODUCT_ID, customer_id="cus_9"
        )

        assert checkout.id.startswith("ck_")
        assert checkout.status == CheckoutStatus.PENDING.value
        assert checkout.amount == Decimal("25")
        assert checkout.organization_id == DEFAULT_ORG_ID
        assert checkouts.rows() == [checkout]
        event = bus.assert_published("checkout::created")
        assert event.checkout_id == checkout.id
        assert event.customer_id == "cus_9"

    @pytest.mark.asyncio
    async def test_explicit_amount_overrides_price(self, db, ctx):
        service, _, _, _ = _make_checkout_service()

        checkout = await service.create_checkout(
            db, ctx, product_id=DEFAULT_PRODUCT_ID, customer_id="cus_9", amount=Decimal("7.5")
        )

        assert checkout.amount == Decimal("7.5")

    @pytest.mark.asyncio
    async def test_rejects_non_positive_amount(self, db, ctx):
        service, checkouts, _, bus = _make_checkout_service()

        with pytest.raises(InvalidStateError):
            await service.create_checkout(
                db, ctx, product_id=DEFAULT_PRODUCT_ID, customer_id="cus_9", amount=Decimal("0")
            )
        assert checkouts.rows() == []
        assert bus.events == []

    @pytest.mark.asyncio
    async def test_product_from_other_network_is_not_found(self, db):
        service, _, _, _ = _make_checkout_service()

        with pytest.raises(ProductNotFoundError):
            await service.create_checkout(
                db,
                _make_ctx(network=Network.MAINNET),
                product_id=DEFAULT_PRODUCT_ID,
                customer_id="cus_9",
            )

    @pytest.mark.asyncio
    async def test_monthly_quota_blocks_creation(self, db, ctx):
        service, checkouts, plans, bus = _make_checkout_service()
        plans.seed_rows(Checkout, 1_000, organization_id=DEFAULT_ORG_ID)

        with pytest.raises(PlanLimitExceededError) as exc_info:
            await service.create_checkout(
                db, ctx, product_id=DEFAULT_PRODUCT_ID, customer_id="cus_9"
            )

        assert exc_info.value.domain == "checkouts"
        assert checkouts.rows() == []
        assert bus.events == []

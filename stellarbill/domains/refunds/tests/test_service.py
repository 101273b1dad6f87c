"""Unit tests for RefundService."""

from decimal import Decimal

import pytest

from stellarbill.core.exceptions import InvalidStateError
from stellarbill.core.shared_models import Network, PaymentStatus, RefundStatus
from stellarbill.domains.refunds.exceptions import (
    PaymentNotFoundError,
    RefundNotFoundError,
    RefundValidationError,
)
from stellarbill.domains.refunds.tests.conftest import (
    DEFAULT_ORG_ID,
    WALLET,
    _make_ctx,
    _make_payment,
    _make_refund,
    _make_request,
    _make_service,
)


class TestRequestRefund:
    @pytest.mark.asyncio
    async def test_partial_refund_is_pending_and_announced(self, db, ctx):
        service, refunds, payments, bus = _make_service()
        payments.seed(_make_payment())

        refund = await service.request_refund(
            db, ctx, _make_request(amount=Decimal("3"), reason="duplicate charge")
        )

        assert refund.status == RefundStatus.PENDING.value
        assert refund.amount == Decimal("3")
        assert refund.customer_id == "cus_1"
        assert refunds.call_count("lock_payment") == 1
        db.commit.assert_awaited_once()
        payload = bus.assert_published("refund::requested").data()
        assert payload["merchant_id"] == DEFAULT_ORG_ID
        assert payload["refund_id"] == refund.id
        assert payload["payment_id"] == "pay_1"
        assert payload["wallet_address"] == WALLET

    @pytest.mark.asyncio
    async def test_without_amount_refunds_what_is_left(self, db, ctx):
        service, refunds, payments, _ = _make_service()
        payments.seed(_make_payment(amount=Decimal("10")))
        refunds.seed(_make_refund("rf_old", amount=Decimal("4")))
        refunds.seed(
            _make_refund("rf_failed", amount=Decimal("6"), status=RefundStatus.FAILED.value)
        )

        refund = await service.request_refund(db, ctx, _make_request())

        assert refund.amount == Decimal("6")

    @pytest.mark.asyncio
    async def test_more_than_is_left_is_rejected(self, db, ctx):
        service, refunds, payments, bus = _make_service()
        payments.seed(_make_payment(amount=Decimal("10")))
        refunds.seed(_make_refund("rf_old", amount=Decimal("8")))

        with pytest.raises(RefundValidationError, match="exceeds"):
            await service.request_refund(db, ctx, _make_request(amount=Decimal("2.5")))

        assert len(refunds.rows()) == 1
        assert bus.events == []
        db.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_fully_refunded_payment_rejects_default_amount(self, db, ctx):
        service, refunds, payments, _ = _make_service()
        payments.seed(_make_payment(amount=Decimal("10")))
        refunds.seed(
            _make_refund("rf_old", amount=Decimal("10"), status=RefundStatus.SUCCEEDED.value)
        )

        with pytest.raises(RefundValidationError, match="positive"):
            await service.request_refund(db, ctx, _make_request())

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payment_overrides, request_overrides",
        [
            ({"status": PaymentStatus.FAILED.value}, {}),
            ({}, {"wallet_address": "not-a-wallet"}),
            ({}, {"amount": Decimal("0")}),
            ({}, {"amount": Decimal("-1")}),
        ],
        ids=["failed_payment", "bad_address", "zero", "negative"],
    )
    async def test_invalid_request_writes_nothing(
        self, db, ctx, payment_overrides, request_overrides
    ):
        service, refunds, payments, bus = _make_service()
        payments.seed(_make_payment(**payment_overrides))

        with pytest.raises(RefundValidationError):
            await service.request_refund(db, ctx, _make_request(**request_overrides))

        assert refunds.rows() == []
        assert bus.events == []

    @pytest.mark.asyncio
    async def test_payment_of_another_merchant_is_not_found(self, db):
        service, _, payments, _ = _make_service()
        payments.seed(_make_payment())

        with pytest.raises(PaymentNotFoundError):
            await service.request_refund(db, _make_ctx(org_id="org_other"), _make_request())


class TestRecordSettlement:
    @pytest.mark.asyncio
    async def test_pending_refund_settles(self, db, ctx):
        service, refunds, _, bus = _make_service()
        refunds.seed(_make_refund())

        refund = await service.record_settlement(
            db, ctx, refund_id="rf_1", status=RefundStatus.SUCCEEDED, transaction_hash="tx_back"
        )

        assert refund.status == RefundStatus.SUCCEEDED.value
        assert refund.transaction_hash == "tx_back"
        assert bus.assert_published("refund::processed").status == RefundStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_repeated_settlement_is_a_noop(self, db, ctx):
        service, refunds, _, bus = _make_service()
        refunds.seed(_make_refund())

        await service.record_settlement(db, ctx, refund_id="rf_1", status=RefundStatus.FAILED)
        await service.record_settlement(db, ctx, refund_id="rf_1", status=RefundStatus.FAILED)

        assert bus.count("refund::processed") == 1

    @pytest.mark.asyncio
    async def test_failed_refund_frees_its_amount(self, db, ctx):
        service, refunds, payments, _ = _make_service()
        payments.seed(_make_payment(amount=Decimal("10")))
        first = await service.request_refund(db, ctx, _make_request())

        await service.record_settlement(db, ctx, refund_id=first.id, status=RefundStatus.FAILED)
        second = await service.request_refund(db, ctx, _make_request())

        assert second.amount == Decimal("10")

    @pytest.mark.asyncio
    async def test_conflicting_settlement_is_rejected(self, db, ctx):
        service, refunds, _, bus = _make_service()
        refunds.seed(_make_refund(status=RefundStatus.SUCCEEDED.value))

        with pytest.raises(InvalidStateError):
            await service.record_settlement(db, ctx, refund_id="rf_1", status=RefundStatus.FAILED)
        assert bus.events == []

    @pytest.mark.asyncio
    async def test_pending_is_not_a_settlement(self, db, ctx):
        service, refunds, _, _ = _make_service()
        refunds.seed(_make_refund())

        with pytest.raises(RefundValidationError):
            await service.record_settlement(
                db, ctx, refund_id="rf_1", status=RefundStatus.PENDING
            )

    @pytest.mark.asyncio
    async def test_refund_of_another_network_is_not_found(self, db):
        service, refunds, _, _ = _make_service()
        refunds.seed(_make_refund())

        with pytest.raises(RefundNotFoundError):
            await service.record_settlement(
                db,
                _make_ctx(network=Network.MAINNET),
                refund_id="rf_1",
                status=RefundStatus.SUCCEEDED,
            )

"""Refund requests and settlement.

Like payouts, a refund is recorded here and sent by an external processor
that consumes ``refund::requested`` and reports back through
``record_settlement``. Requests against one payment are serialized so the
refunded total never exceeds the payment.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.events import EventDispatcher, EventSpec, RefundEvent, RefundEventType
from stellarbill.core.exceptions import ConcurrentModificationError, InvalidStateError
from stellarbill.core.shared_models import RefundStatus
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.domains.payments.repository import PaymentRepositoryProtocol
from stellarbill.domains.refunds.exceptions import (
    PaymentNotFoundError,
    RefundNotFoundError,
    RefundValidationError,
)
from stellarbill.domains.refunds.protocols import RefundServiceProtocol
from stellarbill.domains.refunds.repository import RefundRepositoryProtocol
from stellarbill.domains.refunds.types import RefundRequest, refund_rejection
from stellarbill.models.refund import Refund


class RefundService(RefundServiceProtocol):
    """Records refund intents and their settlement."""

    def __init__(
        self,
        refund_repo: RefundRepositoryProtocol,
        payment_repo: PaymentRepositoryProtocol,
        event_dispatcher: EventDispatcher,
    ) -> None:
        """Initialize with the repositories and the dispatcher."""
        self._refund_repo = refund_repo
        self._payment_repo = payment_repo
        self._dispatcher = event_dispatcher

    async def request_refund(
        self, db: AsyncSession, ctx: BaseContext, request: RefundRequest
    ) -> Refund:
        """Insert a pending refund and emit ``refund::requested`` once it committed.

        Raises:
            PaymentNotFoundError: unknown payment in the caller's organization and network.
            RefundValidationError: payment not confirmed, bad wallet, or amount
                outside (0, what is left to refund].
        """
        payment = await self._payment_repo.get(db, id=request.payment_id, ctx=ctx)
        if payment is None:
            raise PaymentNotFoundError(f"Payment {request.payment_id} not found")

        async def work() -> Refund:
            async with UnitOfWork(db) as uow:
                await self._refund_repo.lock_payment(db, payment_id=payment.id)
                refunded = await self._refund_repo.sum_refunded(db, payment_id=payment.id)
                amount = request.amount
                if amount is None:
                    amount = payment.amount - refunded
                reason = refund_rejection(payment, amount, refunded, request.wallet_address)
                if reason is not None:
                    raise RefundValidationError(reason)

                refund = await self._refund_repo.create(
                    db,
                    obj_in={
                        "payment_id": payment.id,
                        "customer_id": payment.customer_id,
                        "amount": amount,
                        "wallet_address": request.wallet_address,
                        "reason": request.reason,
                        "status": RefundStatus.PENDING.value,
                    },
                    ctx=ctx,
                    uow=uow,
                )
                await uow.commit()
            return refund

        refund = await self._dispatcher.with_event(
            work,
            EventSpec(map=lambda row: self._refund_event(ctx, row, RefundEventType.REQUESTED)),
        )
        ctx.logger.with_context(payment_id=payment.id).info(
            f"Requested refund {refund.id} of {refund.amount}"
        )
        return refund

    async def record_settlement(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        refund_id: str,
        status: RefundStatus,
        transaction_hash: Optional[str] = None,
    ) -> Refund:
        """Move a pending refund to succeeded or failed and emit ``refund::processed``.

        Recording the status a refund already has is a no-op. A failed refund
        frees its amount for a later request.
        """
        status = RefundStatus(status)
        if status == RefundStatus.PENDING:
            raise RefundValidationError("Settlement status must be succeeded or failed")

        refund = await self._refund_repo.get(db, id=refund_id, ctx=ctx)
        if refund is None:
            raise RefundNotFoundError(f"Refund {refund_id} not found")
        if refund.status == status.value:
            return refund
        if refund.status != RefundStatus.PENDING.value:
            raise InvalidStateError(f"Refund {refund_id} is already {refund.status}")

        async def work() -> Optional[Refund]:
            return await self._refund_repo.compare_and_set(
                db,
                id=refund_id,
                expected={"status": RefundStatus.PENDING.value},
                values={"status": status.value, "transaction_hash": transaction_hash},
            )

        updated = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda row: (
                    self._refund_event(ctx, row, RefundEventType.PROCESSED) if row else None
                )
            ),
        )
        if updated is not None:
            ctx.logger.info(f"Refund {refund_id} settled as {status.value}")
            return updated

        current = await self._refund_repo.get(db, id=refund_id, ctx=ctx)
        if current is not None and current.status == status.value:
            return current
        raise ConcurrentModificationError("refund", refund_id, RefundStatus.PENDING.value)

    @staticmethod
    def _refund_event(
        ctx: BaseContext, refund: Refund, event_type: RefundEventType
    ) -> RefundEvent:
        return RefundEvent(
            event_type=event_type,
            organization_id=ctx.organization_id,
            environment=ctx.environment,
            customer_id=refund.customer_id,
            refund_id=refund.id,
            payment_id=refund.payment_id,
            amount=Decimal(refund.amount),
            wallet_address=refund.wallet_address,
            reason=refund.reason,
            status=RefundStatus(refund.status),
            transaction_hash=refund.transaction_hash,
        )

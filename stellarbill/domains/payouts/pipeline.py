"""Payout request pipeline.

Payout rows are the source of truth; ``payout::requested`` events are
emitted only after the rows committed, one per row, for the payout
processor to pick up.
"""

from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.events import EventDispatcher, EventSpec, PayoutEvent, PayoutEventType
from stellarbill.core.exceptions import ConcurrentModificationError, InvalidStateError
from stellarbill.core.shared_models import PayoutStatus
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.domains.payouts.exceptions import PayoutNotFoundError, PayoutValidationError
from stellarbill.domains.payouts.protocols import PayoutPipelineProtocol
from stellarbill.domains.payouts.repository import PayoutRepositoryProtocol
from stellarbill.domains.payouts.types import PayoutItem, validate_payout_item
from stellarbill.domains.plans.protocols import PlanLimitGateProtocol
from stellarbill.domains.plans.types import GateKind
from stellarbill.models.payout import Payout


class PayoutPipeline(PayoutPipelineProtocol):
    """Records payout intents and their settlement."""

    def __init__(
        self,
        payout_repo: PayoutRepositoryProtocol,
        event_dispatcher: EventDispatcher,
        plan_gate: Optional[PlanLimitGateProtocol] = None,
    ) -> None:
        """Initialize with the payout repository and the dispatcher."""
        self._payout_repo = payout_repo
        self._dispatcher = event_dispatcher
        self._plan_gate = plan_gate

    async def request_payouts(
        self, db: AsyncSession, ctx: BaseContext, items: Sequence[PayoutItem]
    ) -> list[Payout]:
        """Validate every item, insert all rows in one transaction, then emit.

        Either every payout is created (and one event per payout is emitted)
        or none is.

        Raises:
            PayoutValidationError: an item is invalid or not the caller's.
            PlanLimitExceededError: the monthly payout quota is used up.
        """
        if not items:
            raise PayoutValidationError("At least one payout is required")
        for index, item in enumerate(items):
            reason = validate_payout_item(item, ctx)
            if reason is not None:
                raise PayoutValidationError(reason, index=index)

        if self._plan_gate is not None:
            await self._plan_gate.check_plan(
                db,
                organization_id=ctx.organization_id,
                environment=ctx.environment,
                domain="payouts",
                model=Payout,
                kind=GateKind.THROUGHPUT,
            )

        async def work() -> list[Payout]:
            async with UnitOfWork(db) as uow:
                rows = [
                    await self._payout_repo.create(
                        db,
                        obj_in={
                            "amount": item.amount,
                            "wallet_address": item.wallet_address,
                            "memo": item.memo,
                            "status": PayoutStatus.PENDING.value,
                        },
                        ctx=ctx,
                        uow=uow,
                    )
                    for item in items
                ]
                await uow.commit()
            return rows

        payouts = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda rows: [
                    self._payout_event(ctx, row, PayoutEventType.REQUESTED) for row in rows
                ]
            ),
        )
        ctx.logger.info(f"Requested {len(payouts)} payout(s)")
        return payouts

    async def record_settlement(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        payout_id: str,
        status: PayoutStatus,
        transaction_hash: Optional[str] = None,
    ) -> Payout:
        """Move a pending payout to succeeded or failed and emit payout::processed.

        Recording the status a payout already has is a no-op.
        """
        status = PayoutStatus(status)
        if status == PayoutStatus.PENDING:
            raise PayoutValidationError("Settlement status must be succeeded or failed")

        payout = await self._payout_repo.get(db, id=payout_id, ctx=ctx)
        if payout is None:
            raise PayoutNotFoundError(f"Payout {payout_id} not found")
        if payout.status == status.value:
            return payout
        if payout.status != PayoutStatus.PENDING.value:
            raise InvalidStateError(f"Payout {payout_id} is already {payout.status}")

        async def work() -> Optional[Payout]:
            return await self._payout_repo.compare_and_set(
                db,
                id=payout_id,
                expected={"status": PayoutStatus.PENDING.value},
                values={"status": status.value, "transaction_hash": transaction_hash},
            )

        updated = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda row: (
                    self._payout_event(ctx, row, PayoutEventType.PROCESSED) if row else None
                )
            ),
        )
        if updated is not None:
            ctx.logger.info(f"Payout {payout_id} settled as {status.value}")
            return updated

        current = await self._payout_repo.get(db, id=payout_id, ctx=ctx)
        if current is not None and current.status == status.value:
            return current
        raise ConcurrentModificationError("payout", payout_id, PayoutStatus.PENDING.value)

    @staticmethod
    def _payout_event(
        ctx: BaseContext, payout: Payout, event_type: PayoutEventType
    ) -> PayoutEvent:
        return PayoutEvent(
            event_type=event_type,
            organization_id=ctx.organization_id,
            environment=ctx.environment,
            payout_id=payout.id,
            amount=payout.amount,
            wallet_address=payout.wallet_address,
            memo=payout.memo,
            status=PayoutStatus(payout.status),
            transaction_hash=payout.transaction_hash,
        )

"""API endpoints for merchant payouts."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.core.context import BaseContext
from stellarbill.domains.payouts.protocols import PayoutPipelineProtocol

router = APIRouter()


@router.post("", response_model=list[schemas.PayoutResponse])
async def request_payouts(
    payout_in: schemas.PayoutRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    pipeline: PayoutPipelineProtocol = Inject(PayoutPipelineProtocol),
) -> list[schemas.PayoutResponse]:
    """Request a batch of payouts.

    The batch is all-or-nothing: one invalid item rejects every item (422)
    and nothing is written.
    """
    payouts = await pipeline.request_payouts(db, ctx, payout_in.items)
    return [schemas.PayoutResponse.model_validate(p) for p in payouts]


@router.post("/{payout_id}/settlement", response_model=schemas.PayoutResponse)
async def record_payout_settlement(
    payout_id: str,
    settlement_in: schemas.PayoutSettlementUpdate,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    pipeline: PayoutPipelineProtocol = Inject(PayoutPipelineProtocol),
) -> schemas.PayoutResponse:
    """Record the on-chain outcome of a pending payout."""
    payout = await pipeline.record_settlement(
        db,
        ctx,
        payout_id=payout_id,
        status=settlement_in.status,
        transaction_hash=settlement_in.transaction_hash,
    )
    return schemas.PayoutResponse.model_validate(payout)

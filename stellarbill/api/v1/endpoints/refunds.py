"""API endpoints for customer refunds."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.core.context import BaseContext
from stellarbill.domains.refunds.protocols import RefundServiceProtocol

router = APIRouter()


@router.post("", response_model=schemas.RefundResponse)
async def request_refund(
    refund_in: schemas.RefundRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    service: RefundServiceProtocol = Inject(RefundServiceProtocol),
) -> schemas.RefundResponse:
    """Request a refund of a confirmed payment."""
    refund = await service.request_refund(db, ctx, refund_in)
    return schemas.RefundResponse.model_validate(refund)


@router.post("/{refund_id}/settlement", response_model=schemas.RefundResponse)
async def record_refund_settlement(
    refund_id: str,
    settlement_in: schemas.RefundSettlementUpdate,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    service: RefundServiceProtocol = Inject(RefundServiceProtocol),
) -> schemas.RefundResponse:
    """Record the on-chain outcome of a pending refund."""
    refund = await service.record_settlement(
        db,
        ctx,
        refund_id=refund_id,
        status=settlement_in.status,
        transaction_hash=settlement_in.transaction_hash,
    )
    return schemas.RefundResponse.model_validate(refund)

"""API endpoints for checkouts.

The status endpoint is what the hosted checkout page polls; every poll
drives the checkout state machine one step from the chain's view of the
transaction.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.core.context import BaseContext
from stellarbill.domains.checkouts.protocols import (
    CheckoutServiceProtocol,
    CheckoutSettlementTrackerProtocol,
)

router = APIRouter()


@router.post("", response_model=schemas.CheckoutResponse)
async def create_checkout(
    checkout_in: schemas.CheckoutCreate,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    checkout_service: CheckoutServiceProtocol = Inject(CheckoutServiceProtocol),
) -> schemas.CheckoutResponse:
    """Open a pending checkout for a product.

    Args:
        checkout_in: Product, customer and optional amount/expiry
        db: Database session
        ctx: Organization context resolved from the API key
        checkout_service: Checkout service

    Returns:
        The created checkout
    """
    checkout = await checkout_service.create_checkout(
        db,
        ctx,
        product_id=checkout_in.product_id,
        customer_id=checkout_in.customer_id,
        amount=checkout_in.amount,
        expires_at=checkout_in.expires_at,
        wallet_address=checkout_in.wallet_address,
    )
    return schemas.CheckoutResponse.model_validate(checkout)


@router.get("/{checkout_id}/status", response_model=schemas.CheckoutStatusResponse)
async def get_checkout_status(
    checkout_id: str,
    db: AsyncSession = Depends(deps.get_db),
    tracker: CheckoutSettlementTrackerProtocol = Inject(CheckoutSettlementTrackerProtocol),
) -> schemas.CheckoutStatusResponse:
    """Refresh a checkout from the chain and return its status."""
    checkout = await tracker.sweep_and_refresh_status(db, checkout_id)
    return schemas.CheckoutStatusResponse(status=checkout.status)

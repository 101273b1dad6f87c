"""API endpoints for the merchant-driven subscription lifecycle."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.core.context import BaseContext
from stellarbill.core.protocols.chain import SubscriptionAction
from stellarbill.domains.subscriptions.protocols import SubscriptionServiceProtocol

router = APIRouter()


@router.get("/{subscription_id}", response_model=schemas.SubscriptionResponse)
async def get_subscription(
    subscription_id: str,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    service: SubscriptionServiceProtocol = Inject(SubscriptionServiceProtocol),
) -> schemas.SubscriptionResponse:
    """Get a subscription."""
    subscription = await service.get(db, ctx, subscription_id)
    return schemas.SubscriptionResponse.model_validate(subscription)


@router.post("/{subscription_id}/{action}", response_model=schemas.SubscriptionResponse)
async def change_subscription_state(
    subscription_id: str,
    action: SubscriptionAction,
    db: AsyncSession = Depends(deps.get_db),
    ctx: BaseContext = Depends(deps.get_context),
    service: SubscriptionServiceProtocol = Inject(SubscriptionServiceProtocol),
) -> schemas.SubscriptionResponse:
    """Pause, resume or cancel a subscription.

    The change goes to the subscription contract first; a refusal there, or a
    change not allowed from the current status, is a 422.
    """
    subscription = await service.change_state(db, ctx, subscription_id, action)
    return schemas.SubscriptionResponse.model_validate(subscription)

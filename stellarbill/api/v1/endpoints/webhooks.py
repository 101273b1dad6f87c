"""Inbound chain webhook endpoint.

The body is read raw so the signature is verified over exactly the bytes
the notifier signed.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import schemas
from stellarbill.api import deps
from stellarbill.api.deps import Inject
from stellarbill.domains.organizations.protocols import OrganizationResolverProtocol
from stellarbill.domains.webhooks.protocols import WebhookEventApplierProtocol

router = APIRouter()


@router.post("", response_model=schemas.StellarWebhookResponse)
async def receive_stellar_webhook(
    request: Request,
    db: AsyncSession = Depends(deps.get_db),
    org_resolver: OrganizationResolverProtocol = Inject(OrganizationResolverProtocol),
    applier: WebhookEventApplierProtocol = Inject(WebhookEventApplierProtocol),
) -> schemas.StellarWebhookResponse:
    """Apply a signed transaction notification to its checkout.

    Returns 200 once applied (including redeliveries), 401 when the key or
    signature is invalid and 404 when the organization has no chain account
    configured on the key's network.
    """
    payload = await request.body()
    body = schemas.StellarWebhookPayload.model_validate_json(payload)
    ctx = await org_resolver.resolve_api_key(db, body.api_key)

    checkout = await applier.apply(
        db,
        environment=ctx.environment,
        signing_public_key=body.public_key,
        organization_id=ctx.organization_id,
        checkout_id=body.checkout_id,
        payload=payload,
        headers=dict(request.headers),
        transaction_hash=body.transaction_hash,
    )
    return schemas.StellarWebhookResponse(checkout_id=checkout.id, status=checkout.status)

"""Webhook applier protocol."""

from typing import Mapping, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.shared_models import Network
from stellarbill.models.checkout import Checkout


class WebhookEventApplierProtocol(Protocol):
    """Applies verified chain notifications to checkouts."""

    async def apply(
        self,
        db: AsyncSession,
        *,
        environment: Network,
        signing_public_key: Optional[str],
        organization_id: str,
        checkout_id: str,
        payload: bytes,
        headers: Mapping[str, str],
        transaction_hash: Optional[str] = None,
    ) -> Checkout:
        """Verify the notification, then refresh the checkout it names."""
        ...

"""Webhook event applier.

A second entry point into the checkout state machine. After the
notification is verified against the organization's signing secret, the
checkout is refreshed through the same tracker that status polls use, so
both converge on identical state. Redelivery is safe: the checkout's stored
status decides whether anything is left to apply.
"""

from typing import Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.protocols.webhooks import WebhookSignatureVerifier
from stellarbill.core.shared_models import CheckoutStatus, Network
from stellarbill.domains.checkouts.exceptions import CheckoutNotFoundError
from stellarbill.domains.checkouts.protocols import CheckoutSettlementTrackerProtocol
from stellarbill.domains.checkouts.repository import CheckoutRepositoryProtocol
from stellarbill.domains.organizations.protocols import OrganizationResolverProtocol
from stellarbill.domains.webhooks.exceptions import InvalidSignatureError
from stellarbill.domains.webhooks.protocols import WebhookEventApplierProtocol
from stellarbill.models.checkout import Checkout


class WebhookEventApplier(WebhookEventApplierProtocol):
    """Verify inbound chain webhooks and apply them to checkouts."""

    def __init__(
        self,
        org_resolver: OrganizationResolverProtocol,
        signature_verifier: WebhookSignatureVerifier,
        checkout_repo: CheckoutRepositoryProtocol,
        tracker: CheckoutSettlementTrackerProtocol,
    ) -> None:
        """Initialize with the resolver, the verifier and the settlement tracker."""
        self._org_resolver = org_resolver
        self._signature_verifier = signature_verifier
        self._checkout_repo = checkout_repo
        self._tracker = tracker

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
        """Verify, optionally attach the transaction hash, then refresh the checkout.

        Raises:
            OrganizationNotFoundError: no chain account configured for the organization.
            InvalidSignatureError: the notification is not authentic. Nothing is written.
            CheckoutNotFoundError: the checkout is not the organization's.
        """
        ctx = BaseContext(organization_id=organization_id, environment=Network(environment))
        log = ctx.logger.with_context(checkout_id=checkout_id)

        secret = await self._org_resolver.resolve_secret(db, organization_id, ctx.environment)
        if signing_public_key is not None and signing_public_key != secret.public_key:
            log.warning(
                f"Webhook claims account {signing_public_key}, expected {secret.public_key}"
            )
            raise InvalidSignatureError("Webhook signed for a different account")
        self._signature_verifier.verify(secret.webhook_signing_secret, payload, headers)

        checkout = await self._checkout_repo.get(db, id=checkout_id, ctx=ctx)
        if checkout is None:
            raise CheckoutNotFoundError(f"Checkout {checkout_id} not found")

        if transaction_hash:
            await self._attach_transaction(db, checkout, transaction_hash, ctx)

        log.info("Applying verified webhook")
        return await self._tracker.sweep_and_refresh_status(db, checkout.id)

    async def _attach_transaction(
        self, db: AsyncSession, checkout: Checkout, transaction_hash: str, ctx: BaseContext
    ) -> None:
        """Record the hash the notification reports, once. A stored hash is never replaced."""
        if checkout.transaction_hash == transaction_hash:
            return
        if checkout.transaction_hash is not None:
            ctx.logger.warning(
                f"Ignoring transaction {transaction_hash} for checkout {checkout.id}: "
                f"already tracking {checkout.transaction_hash}"
            )
            return

        attached = await self._checkout_repo.compare_and_set(
            db,
            id=checkout.id,
            expected={"transaction_hash": None, "status": CheckoutStatus.PENDING.value},
            values={"transaction_hash": transaction_hash},
        )
        if attached is None:
            ctx.logger.debug(f"Checkout {checkout.id} moved on before its hash was attached")

"""Checkout domain protocols."""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.domains.checkouts.types import CheckoutSweepReport
from stellarbill.models.checkout import Checkout


class CheckoutSettlementTrackerProtocol(Protocol):
    """Reconciles checkouts against the chain."""

    async def sweep_and_refresh_status(self, db: AsyncSession, checkout_id: str) -> Checkout:
        """Advance one checkout from what the chain reports; idempotent."""
        ...

    async def sweep_open_checkouts(self) -> CheckoutSweepReport:
        """Refresh every open checkout, collecting per-checkout outcomes."""
        ...


class CheckoutServiceProtocol(Protocol):
    """Opens checkouts."""

    async def create_checkout(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        product_id: str,
        customer_id: str,
        amount: Optional[Decimal] = None,
        expires_at: Optional[datetime] = None,
        wallet_address: Optional[str] = None,
    ) -> Checkout:
        """Insert a pending checkout and emit checkout::created."""
        ...

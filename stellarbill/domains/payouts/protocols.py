"""Payout pipeline protocol."""

from typing import Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import PayoutStatus
from stellarbill.domains.payouts.types import PayoutItem
from stellarbill.models.payout import Payout


class PayoutPipelineProtocol(Protocol):
    """Records payout intents and their settlement."""

    async def request_payouts(
        self, db: AsyncSession, ctx: BaseContext, items: Sequence[PayoutItem]
    ) -> list[Payout]:
        """Insert pending payouts and emit one payout::requested per row."""
        ...

    async def record_settlement(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        payout_id: str,
        status: PayoutStatus,
        transaction_hash: Optional[str] = None,
    ) -> Payout:
        """Move a pending payout to its final status."""
        ...

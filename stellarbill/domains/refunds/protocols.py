"""Refund service protocol."""

from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import RefundStatus
from stellarbill.domains.refunds.types import RefundRequest
from stellarbill.models.refund import Refund


class RefundServiceProtocol(Protocol):
    """Records refund intents and their settlement."""

    async def request_refund(
        self, db: AsyncSession, ctx: BaseContext, request: RefundRequest
    ) -> Refund:
        """Insert a pending refund and emit refund::requested."""
        ...

    async def record_settlement(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        refund_id: str,
        status: RefundStatus,
        transaction_hash: Optional[str] = None,
    ) -> Refund:
        """Move a pending refund to its final status."""
        ...

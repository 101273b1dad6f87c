"""Credit ledger protocol."""

from typing import Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import CreditTransactionKind
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.domains.credits.types import Number
from stellarbill.models.credit_transaction import CreditTransaction
from stellarbill.models.product import Product


class CreditLedgerProtocol(Protocol):
    """Bookkeeping of credits per (customer, product)."""

    async def record_transaction(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product_id: str,
        amount: int,
        kind: CreditTransactionKind,
        checkout_id: Optional[str] = None,
        reason: Optional[str] = None,
        uow: Optional[UnitOfWork] = None,
    ) -> CreditTransaction:
        """Append a signed transaction."""
        ...

    async def grant(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product_id: str,
        credits: int,
        checkout_id: Optional[str] = None,
        uow: Optional[UnitOfWork] = None,
    ) -> CreditTransaction:
        """Append a positive grant."""
        ...

    async def balance(
        self, db: AsyncSession, ctx: BaseContext, *, customer_id: str, product_id: str
    ) -> int:
        """Current balance, 0 without history."""
        ...

    async def debit(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product_id: str,
        raw_usage_amount: Number,
        unit_divisor: Optional[int] = None,
        units_per_credit: Optional[int] = None,
    ) -> Optional[CreditTransaction]:
        """Convert usage to credits and debit them, refusing to overdraw."""
        ...

    async def debit_usage(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product: Product,
        raw_usage_amount: Number,
    ) -> Optional[CreditTransaction]:
        """Debit usage using the product's conversion settings."""
        ...

    async def list_transactions(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product_id: str,
        limit: int = 100,
    ) -> Sequence[CreditTransaction]:
        """Newest-first transactions."""
        ...

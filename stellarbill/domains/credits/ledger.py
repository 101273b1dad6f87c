"""Credit ledger: append-only transactions, balances derived by summing.

The balance is never stored. Debits are serialized per (customer, product):
within this process by an asyncio lock, across processes by a Postgres
advisory lock held for the debit's transaction, and the balance is
re-read under both before the row is written.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import CreditTransactionKind
from stellarbill.db.unit_of_work import UnitOfWork
from stellarbill.domains.credits.exceptions import (
    InsufficientCreditsError,
    InvalidUsageAmountError,
)
from stellarbill.domains.credits.protocols import CreditLedgerProtocol
from stellarbill.domains.credits.repository import CreditTransactionRepositoryProtocol
from stellarbill.domains.credits.types import Number, calculate_credits
from stellarbill.models.credit_transaction import CreditTransaction
from stellarbill.models.product import Product

_BalanceKey = tuple[str, str, str, str]


class CreditLedger(CreditLedgerProtocol):
    """Credit bookkeeping service."""

    def __init__(
        self, credit_repo: CreditTransactionRepositoryProtocol, balance_floor: int = 0
    ) -> None:
        """Initialize with the transaction repository and the debit floor."""
        self._credit_repo = credit_repo
        self._balance_floor = balance_floor
        # key -> (lock, number of debits holding or waiting on it)
        self._locks: dict[_BalanceKey, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _serialized(self, key: _BalanceKey) -> AsyncIterator[None]:
        """Hold the per-balance lock; the entry is dropped once nobody uses it."""
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            _, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

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
        """Append a signed transaction. Fails only on storage errors."""
        return await self._credit_repo.create(
            db,
            obj_in={
                "customer_id": customer_id,
                "product_id": product_id,
                "amount": amount,
                "kind": CreditTransactionKind(kind).value,
                "checkout_id": checkout_id,
                "reason": reason,
            },
            ctx=ctx,
            uow=uow,
        )

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
        """Append a positive grant (e.g. a settled metered checkout)."""
        tx = await self.record_transaction(
            db,
            ctx,
            customer_id=customer_id,
            product_id=product_id,
            amount=abs(credits),
            kind=CreditTransactionKind.GRANT,
            checkout_id=checkout_id,
            reason="purchase" if checkout_id else "grant",
            uow=uow,
        )
        ctx.logger.info(
            f"Granted {abs(credits)} credits to {customer_id} on {product_id}",
            extra={"dimensions": {"checkout_id": checkout_id}},
        )
        return tx

    async def balance(
        self, db: AsyncSession, ctx: BaseContext, *, customer_id: str, product_id: str
    ) -> int:
        """Sum of the (customer, product) transactions."""
        return await self._credit_repo.sum_balance(
            db, customer_id=customer_id, product_id=product_id, ctx=ctx
        )

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
        """Debit the credits ``raw_usage_amount`` converts to.

        Returns None when the usage rounds to zero credits (nothing is written).

        Raises:
            InsufficientCreditsError: the debit would cross the balance floor.
                No row is written.
        """
        try:
            credits = calculate_credits(raw_usage_amount, unit_divisor, units_per_credit)
        except (ValueError, ArithmeticError) as e:
            raise InvalidUsageAmountError(str(e)) from e
        if credits == 0:
            return None

        key = (ctx.organization_id, ctx.environment.value, customer_id, product_id)
        async with self._serialized(key):
            async with UnitOfWork(db) as uow:
                await self._credit_repo.lock_balance(
                    db, customer_id=customer_id, product_id=product_id, ctx=ctx
                )
                current = await self._credit_repo.sum_balance(
                    db, customer_id=customer_id, product_id=product_id, ctx=ctx
                )
                if current - credits < self._balance_floor:
                    raise InsufficientCreditsError(customer_id, product_id, current, credits)

                tx = await self.record_transaction(
                    db,
                    ctx,
                    customer_id=customer_id,
                    product_id=product_id,
                    amount=-credits,
                    kind=CreditTransactionKind.DEBIT,
                    reason="usage",
                    uow=uow,
                )
                await uow.commit()

        ctx.logger.debug(f"Debited {credits} credits from {customer_id} on {product_id}")
        return tx

    async def debit_usage(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product: Product,
        raw_usage_amount: Number,
    ) -> Optional[CreditTransaction]:
        """Debit usage with the product's unit divisor and units per credit."""
        return await self.debit(
            db,
            ctx,
            customer_id=customer_id,
            product_id=product.id,
            raw_usage_amount=raw_usage_amount,
            unit_divisor=product.unit_divisor,
            units_per_credit=product.units_per_credit,
        )

    async def list_transactions(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        customer_id: str,
        product_id: str,
        limit: int = 100,
    ) -> Sequence[CreditTransaction]:
        """Newest-first transactions of (customer, product)."""
        return await self._credit_repo.list_for(
            db, customer_id=customer_id, product_id=product_id, ctx=ctx, limit=limit
        )

"""Checkout service: opens checkouts."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.context import BaseContext
from stellarbill.core.events import (
    CheckoutEventType,
    CheckoutLifecycleEvent,
    EventDispatcher,
    EventSpec,
)
from stellarbill.core.exceptions import InvalidStateError
from stellarbill.core.shared_models import CheckoutStatus
from stellarbill.domains.checkouts.protocols import CheckoutServiceProtocol
from stellarbill.domains.checkouts.repository import CheckoutRepositoryProtocol
from stellarbill.domains.plans.protocols import PlanLimitGateProtocol
from stellarbill.domains.plans.types import GateKind
from stellarbill.domains.products.exceptions import ProductNotFoundError
from stellarbill.domains.products.repository import ProductRepositoryProtocol
from stellarbill.models.checkout import Checkout


class CheckoutService(CheckoutServiceProtocol):
    """Creates pending checkouts within the organization's plan."""

    def __init__(
        self,
        checkout_repo: CheckoutRepositoryProtocol,
        product_repo: ProductRepositoryProtocol,
        plan_gate: PlanLimitGateProtocol,
        event_dispatcher: EventDispatcher,
    ) -> None:
        """Initialize with repositories, the plan gate and the dispatcher."""
        self._checkout_repo = checkout_repo
        self._product_repo = product_repo
        self._plan_gate = plan_gate
        self._dispatcher = event_dispatcher

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
        """Open a pending checkout for ``product_id``.

        ``amount`` defaults to the product's price.

        Raises:
            ProductNotFoundError: the product is not in the caller's organization/network.
            PlanLimitExceededError: the monthly checkout quota is used up.
            InvalidStateError: the amount is not positive.
        """
        product = await self._product_repo.get(db, id=product_id, ctx=ctx)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")

        amount = product.amount if amount is None else Decimal(amount)
        if amount <= 0:
            raise InvalidStateError("Checkout amount must be positive")

        await self._plan_gate.check_plan(
            db,
            organization_id=ctx.organization_id,
            environment=ctx.environment,
            domain="checkouts",
            model=Checkout,
            kind=GateKind.THROUGHPUT,
        )

        async def work() -> Checkout:
            return await self._checkout_repo.create(
                db,
                obj_in={
                    "product_id": product.id,
                    "customer_id": customer_id,
                    "amount": amount,
                    "status": CheckoutStatus.PENDING.value,
                    "expires_at": expires_at,
                    "wallet_address": wallet_address,
                },
                ctx=ctx,
            )

        checkout = await self._dispatcher.with_event(
            work,
            EventSpec(
                map=lambda row: CheckoutLifecycleEvent(
                    event_type=CheckoutEventType.CREATED,
                    organization_id=ctx.organization_id,
                    environment=ctx.environment,
                    customer_id=row.customer_id,
                    checkout_id=row.id,
                    product_id=row.product_id,
                    amount=row.amount,
                    status=CheckoutStatus.PENDING,
                )
            ),
        )
        ctx.logger.info(
            f"Opened checkout {checkout.id} for {customer_id}",
            extra={"dimensions": {"checkout_id": checkout.id}},
        )
        return checkout

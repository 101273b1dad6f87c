"""Checkout model."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.core.shared_models import CheckoutStatus
from stellarbill.models._base import OrganizationBase, id_factory


class Checkout(OrganizationBase):
    """A single payment attempt tied to one on-chain transaction."""

    __tablename__ = "checkout"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("ck"))
    product_id: Mapped[str] = mapped_column(ForeignKey("product.id"), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 7), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=CheckoutStatus.PENDING.value)
    transaction_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)
    wallet_address: Mapped[Optional[str]] = mapped_column(String(56), nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("idx_checkout_status", "status"),)

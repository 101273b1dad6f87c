"""Subscription model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.core.shared_models import SubscriptionStatus
from stellarbill.models._base import OrganizationBase, id_factory


class Subscription(OrganizationBase):
    """Recurring charge of a customer's wallet for a product.

    ``charge_claimed_for`` holds the period end a sweep claimed for charging;
    the claim lapses at ``charge_claim_expires_at`` so a crashed sweep does not
    block the subscription forever. ``charge_transaction_hash`` is written
    before a charge is sent (for the period in ``charge_submitted_for``) and
    cleared once its outcome is recorded.
    """

    __tablename__ = "subscription"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("sub"))
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    product_id: Mapped[str] = mapped_column(ForeignKey("product.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=SubscriptionStatus.ACTIVE.value)
    current_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    wallet_address: Mapped[Optional[str]] = mapped_column(String(56), nullable=True)
    failed_charge_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    charge_claimed_for: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    charge_claim_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    charge_transaction_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    charge_submitted_for: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("idx_subscription_due", "status", "current_period_end"),)

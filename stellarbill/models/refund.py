"""Refund model."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.core.shared_models import RefundStatus
from stellarbill.models._base import OrganizationBase, id_factory


class Refund(OrganizationBase):
    """Return of part or all of a confirmed payment to the customer's wallet.

    Failed refunds release their amount; pending and succeeded ones count
    against what is left to refund on the payment.
    """

    __tablename__ = "refund"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("rf"))
    payment_id: Mapped[str] = mapped_column(
        ForeignKey("payment.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 7), nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(56), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=RefundStatus.PENDING.value)
    transaction_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

"""Payment model."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.models._base import OrganizationBase, id_factory


class Payment(OrganizationBase):
    """Settled charge: one per checkout outcome and one per subscription charge attempt."""

    __tablename__ = "payment"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("pay"))
    checkout_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)
    subscription_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 7), nullable=False)
    transaction_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

"""Credit transaction model (append-only)."""

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.models._base import OrganizationBase, id_factory


class CreditTransaction(OrganizationBase):
    """Signed credit movement for a (customer, product). Never updated."""

    __tablename__ = "credit_transaction"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("ct"))
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    product_id: Mapped[str] = mapped_column(ForeignKey("product.id"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    checkout_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    __table_args__ = (
        Index("idx_credit_transaction_balance", "organization_id", "customer_id", "product_id"),
    )

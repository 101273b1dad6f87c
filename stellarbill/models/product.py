"""Product model."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.models._base import OrganizationBase, id_factory


class Product(OrganizationBase):
    """Something a merchant sells.

    Recurring when ``billing_interval_days`` is set; metered when
    ``credits_granted`` is set (a purchase grants that many credits).
    """

    __tablename__ = "product"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("prod"))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 7), nullable=False)
    billing_interval_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    credits_granted: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    unit_divisor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    units_per_credit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    @property
    def is_recurring(self) -> bool:
        return self.billing_interval_days is not None

    @property
    def is_metered(self) -> bool:
        return self.credits_granted is not None

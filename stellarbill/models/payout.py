"""Payout model."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.core.shared_models import PayoutStatus
from stellarbill.models._base import OrganizationBase, id_factory


class Payout(OrganizationBase):
    """Merchant withdrawal to a Stellar wallet."""

    __tablename__ = "payout"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("po"))
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 7), nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(56), nullable=False)
    memo: Mapped[Optional[str]] = mapped_column(String(28), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=PayoutStatus.PENDING.value)
    transaction_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

"""Event log model."""

from typing import Optional

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.models._base import OrganizationBase


class Event(OrganizationBase):
    """A published domain event. Write-once."""

    __tablename__ = "event"

    type: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (Index("idx_event_org_type", "organization_id", "type"),)

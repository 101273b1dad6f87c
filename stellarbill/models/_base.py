"""Declarative base classes.

Primary keys are prefixed strings (``ck_…``, ``sub_…``, ``pay_…``) so ids
read unambiguously in logs, events and merchant payloads.
"""

from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


def generate_id(prefix: str) -> str:
    """Return a new ``{prefix}_{hex}`` identifier."""
    return f"{prefix}_{uuid4().hex}"


def id_factory(prefix: str) -> Callable[[], str]:
    """Column default producing prefixed ids."""
    return lambda: generate_id(prefix)


def utcnow() -> datetime:
    """Timezone-aware now."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base for all models: string id plus audit timestamps."""

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class OrganizationBase(Base):
    """Base for rows owned by an organization on one chain network."""

    __abstract__ = True

    @declared_attr
    def organization_id(cls) -> Mapped[str]:
        return mapped_column(
            ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
        )

    environment: Mapped[str] = mapped_column(String(16), nullable=False)

"""Organization, plan, API key and per-network secret models."""

from typing import Optional

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stellarbill.models._base import Base, OrganizationBase, id_factory


class Plan(Base):
    """Subscription plan with per-domain limits (e.g. {"checkouts": 1000})."""

    __tablename__ = "plan"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("plan"))
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    limits: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)


class Organization(Base):
    """A merchant."""

    __tablename__ = "organization"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("org"))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    plan_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("plan.id", ondelete="SET NULL"), nullable=True
    )


class APIKey(OrganizationBase):
    """API key scoped to one organization and network. Only the hash is stored."""

    __tablename__ = "api_key"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("key"))
    key_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class OrganizationSecret(OrganizationBase):
    """Chain account and webhook signing secret of an organization on one network."""

    __tablename__ = "organization_secret"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("sec"))
    public_key: Mapped[str] = mapped_column(String(56), nullable=False)
    webhook_signing_secret: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "environment", name="uq_organization_secret_env"),
    )

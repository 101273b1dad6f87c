"""Plan limit gate protocol."""

from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.shared_models import Network
from stellarbill.domains.plans.types import GateKind, GatingCheck
from stellarbill.models._base import OrganizationBase


class PlanLimitGateProtocol(Protocol):
    """Pre-flight limit checks."""

    async def check_limit(
        self,
        db: AsyncSession,
        *,
        model: type[OrganizationBase],
        limit: int,
        organization_id: str,
        environment: Optional[Network],
        domain: str,
        kind: GateKind = GateKind.CAPACITY,
    ) -> int:
        """Raise PlanLimitExceededError when the count reached ``limit``."""
        ...

    async def check_limits(
        self,
        db: AsyncSession,
        *,
        organization_id: str,
        environment: Network,
        checks: list[GatingCheck],
        raise_on_violation: bool = True,
    ) -> dict[str, int]:
        """Evaluate several gates; return usage per domain."""
        ...

    async def check_plan(
        self,
        db: AsyncSession,
        *,
        organization_id: str,
        environment: Network,
        domain: str,
        model: type[OrganizationBase],
        kind: GateKind = GateKind.CAPACITY,
    ) -> int:
        """Check ``domain`` against the organization's plan limit."""
        ...

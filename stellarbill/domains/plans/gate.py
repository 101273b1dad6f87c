"""Plan limit gate.

A pre-flight check, not a reservation: two concurrent callers can both
pass the check and both insert. Hard guarantees need a unique constraint
or a re-check inside the inserting transaction.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core.shared_models import Network
from stellarbill.domains.plans.exceptions import PlanLimitExceededError
from stellarbill.domains.plans.protocols import PlanLimitGateProtocol
from stellarbill.domains.plans.repository import PlanRepositoryProtocol
from stellarbill.domains.plans.types import (
    GateKind,
    GatingCheck,
    find_violations,
    resolve_limit,
    start_of_cycle,
)
from stellarbill.models._base import OrganizationBase

logger = logging.getLogger(__name__)


class PlanLimitGate(PlanLimitGateProtocol):
    """Counts organization rows live and compares them to plan limits."""

    def __init__(self, plan_repo: PlanRepositoryProtocol) -> None:
        """Initialize with the plan repository."""
        self._plan_repo = plan_repo

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
        """Single-gate check. ``environment=None`` counts across networks."""
        check = GatingCheck(
            domain=domain,
            model=model,
            limit=limit,
            kind=kind,
            environment_scoped=environment is not None,
        )
        usage = await self.check_limits(
            db,
            organization_id=organization_id,
            environment=environment or Network.TESTNET,
            checks=[check],
        )
        return usage[domain]

    async def check_limits(
        self,
        db: AsyncSession,
        *,
        organization_id: str,
        environment: Network,
        checks: list[GatingCheck],
        raise_on_violation: bool = True,
    ) -> dict[str, int]:
        """Evaluate every check, then raise once listing all violations."""
        if not checks:
            return {}

        cycle_start = start_of_cycle()
        usage: dict[str, int] = {}
        for check in checks:
            usage[check.domain] = await self._plan_repo.count_rows(
                db,
                model=check.model,
                organization_id=organization_id,
                environment=Network(environment).value if check.environment_scoped else None,
                since=cycle_start if check.kind == GateKind.THROUGHPUT else None,
            )

        violations = find_violations(checks, usage)
        if violations:
            logger.info(
                "Plan limits reached for %s: %s",
                organization_id,
                ", ".join(str(v) for v in violations),
            )
            if raise_on_violation:
                raise PlanLimitExceededError.from_violations(violations)
        return usage

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
        """Resolve the limit from the organization's plan and check it."""
        plan = await self._plan_repo.get_plan_for(db, organization_id=organization_id)
        limit = resolve_limit(domain, plan.limits if plan else None)
        usage = await self.check_limits(
            db,
            organization_id=organization_id,
            environment=environment,
            checks=[GatingCheck(domain=domain, model=model, limit=limit, kind=kind)],
        )
        return usage[domain]

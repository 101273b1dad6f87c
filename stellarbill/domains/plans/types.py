"""Plan limit types and pure helpers.

Two kinds of gate:
- THROUGHPUT counts rows created since the start of the current UTC month
  (payments processed, checkouts opened).
- CAPACITY counts every row (products, subscriptions held).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Optional

from stellarbill.models._base import OrganizationBase


class GateKind(str, Enum):
    """How usage is counted for a gate."""

    CAPACITY = "capacity"
    THROUGHPUT = "throughput"


# Limits applied to organizations without a plan.
DEVELOPER_LIMITS: dict[str, int] = {
    "checkouts": 1_000,
    "payments": 1_000,
    "subscriptions": 100,
    "products": 10,
    "payouts": 50,
    "credit_transactions": 50_000,
}


@dataclass(frozen=True)
class GatingCheck:
    """One limit to evaluate: ``model`` rows of an organization against ``limit``."""

    domain: str
    model: type[OrganizationBase]
    limit: int
    kind: GateKind = GateKind.CAPACITY
    environment_scoped: bool = True


@dataclass(frozen=True)
class Violation:
    """A gate whose usage reached its limit."""

    domain: str
    current: int
    limit: int

    def __str__(self) -> str:
        return f"{self.domain} ({self.current}/{self.limit})"


def start_of_cycle(now: Optional[datetime] = None) -> datetime:
    """First instant of the current UTC month."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def find_violations(
    checks: list[GatingCheck], usage: Mapping[str, int]
) -> list[Violation]:
    """Gates whose usage is at or above the limit (``count >= limit``)."""
    return [
        Violation(domain=c.domain, current=usage.get(c.domain, 0), limit=c.limit)
        for c in checks
        if usage.get(c.domain, 0) >= c.limit
    ]


def resolve_limit(domain: str, plan_limits: Optional[Mapping[str, int]]) -> int:
    """Limit for ``domain`` from the plan, falling back to the developer limits."""
    if plan_limits and domain in plan_limits:
        return int(plan_limits[domain])
    if domain not in DEVELOPER_LIMITS:
        raise KeyError(f"No limit defined for '{domain}'")
    return DEVELOPER_LIMITS[domain]

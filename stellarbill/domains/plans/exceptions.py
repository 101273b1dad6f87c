"""Plan limit exceptions."""

from typing import Optional

from stellarbill.core.exceptions import InvalidStateError
from stellarbill.domains.plans.types import Violation


class PlanLimitExceededError(InvalidStateError):
    """Raised when a gated resource count reached the plan's limit."""

    def __init__(
        self,
        domain: str,
        current: int,
        limit: int,
        violations: Optional[list[Violation]] = None,
    ) -> None:
        """Initialize with the first violated domain and the full violation list."""
        self.domain = domain
        self.current = current
        self.limit = limit
        self.violations = violations or [Violation(domain=domain, current=current, limit=limit)]
        listed = ", ".join(str(v) for v in self.violations)
        super().__init__(f"Plan limits reached: {listed}. Please upgrade.")

    @classmethod
    def from_violations(cls, violations: list[Violation]) -> "PlanLimitExceededError":
        """Build from one or more violations."""
        first = violations[0]
        return cls(first.domain, first.current, first.limit, violations)

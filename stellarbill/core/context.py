"""Base context for all operations.

Carries the organization/network isolation boundary through services and
repositories. API handlers build it from an API key, sweeps build it per row.
"""

from dataclasses import dataclass, field
from typing import Dict

from stellarbill.core.logging import ContextualLogger
from stellarbill.core.shared_models import Network


@dataclass
class BaseContext:
    """Base context for all operations.

    ``logger`` is keyword-only with a default of None; when omitted it is
    auto-derived from the organization and network in __post_init__.
    """

    organization_id: str
    environment: Network

    logger: ContextualLogger = field(default=None, kw_only=True, repr=False)

    def __post_init__(self):
        """Auto-derive logger from organization identity if not provided."""
        self.environment = Network(self.environment)
        if self.logger is None:
            from stellarbill.core.logging import logger as base_logger

            dims: Dict[str, str] = {
                "organization_id": self.organization_id,
                "environment": self.environment.value,
            }
            self.logger = base_logger.with_context(**dims)

    def owns(self, organization_id: str, environment: str) -> bool:
        """Whether a row scoped to (organization_id, environment) belongs to this context."""
        return organization_id == self.organization_id and Network(environment) == self.environment

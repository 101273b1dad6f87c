"""Base class for all domain events.

Enforces that every event is a validated, frozen Pydantic model with
the fields the EventBus protocol requires for routing and metadata.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from stellarbill.core.events.enums import EventType
from stellarbill.core.shared_models import Network

_ENVELOPE_FIELDS = {"event_id", "event_type", "timestamp", "organization_id", "environment"}


class DomainEvent(BaseModel):
    """Base for all domain events.

    Events are write-once. Subclasses narrow event_type to a domain enum and
    add their payload fields; ``data()`` returns that payload for delivery
    and for the event log.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: f"evt_{uuid4().hex}")
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    organization_id: str
    environment: Network
    customer_id: Optional[str] = None

    @property
    def merchant_id(self) -> str:
        """Merchants are organizations; events are addressed to them."""
        return self.organization_id

    def data(self) -> dict[str, Any]:
        """JSON-ready payload addressed to the merchant, without the envelope fields."""
        payload = {"merchant_id": self.merchant_id}
        payload.update(self.model_dump(mode="json", exclude=_ENVELOPE_FIELDS | {"customer_id"}))
        return payload

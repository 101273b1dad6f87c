"""Recording event bus for unit tests."""

from typing import TYPE_CHECKING

from stellarbill.core.events.routing import EventRoute, event_type_of

if TYPE_CHECKING:
    from stellarbill.core.protocols.event_bus import DomainEvent, EventHandler


class FakeEventBus:
    """EventBus that records what was published.

    Patterns are validated the same way InMemoryEventBus does, so a test
    asserting on a misspelt type fails loudly instead of counting zero.

    Usage:
        fake = FakeEventBus()
        await tracker.sweep_and_refresh_status(db, checkout_id)

        event = fake.assert_published("payment::completed")
        assert event.checkout_id == "ck_1"
    """

    def __init__(self) -> None:
        self.events: list["DomainEvent"] = []

    def subscribe(self, event_pattern: str, handler: "EventHandler", **_: object) -> None:
        """Validate the pattern; handlers are never called."""
        EventRoute.parse(event_pattern)

    async def publish(self, event: "DomainEvent") -> None:
        self.events.append(event)

    def get_events(self, pattern: str) -> list["DomainEvent"]:
        """Recorded events matching ``pattern``, in publish order."""
        route = EventRoute.parse(pattern)
        return [e for e in self.events if route.matches(e)]

    def has_event(self, pattern: str) -> bool:
        return bool(self.get_events(pattern))

    def get_event(self, pattern: str) -> "DomainEvent":
        """First recorded event matching ``pattern``.

        Raises:
            AssertionError: nothing matching was published.
        """
        matching = self.get_events(pattern)
        if not matching:
            raise AssertionError(
                f"No event matching '{pattern}' was published. "
                f"Published events: {self.published_types}"
            )
        return matching[0]

    def count(self, pattern: str = "*") -> int:
        return len(self.get_events(pattern))

    @property
    def published_types(self) -> list[str]:
        """Event types in publish order."""
        return [event_type_of(e) for e in self.events]

    def assert_published(self, pattern: str) -> "DomainEvent":
        """Alias of get_event that reads better in assertions."""
        return self.get_event(pattern)

"""Fake event repository for testing."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.models.event import Event


class FakeEventRepository:
    """In-memory fake for EventRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty store."""
        self._store: list[Event] = []

    def rows(self) -> list[Event]:
        """Appended rows in order."""
        return list(self._store)

    async def append(self, db: AsyncSession, *, values: dict[str, Any]) -> Event:
        """Append one row."""
        row = Event(**values)
        self._store.append(row)
        return row

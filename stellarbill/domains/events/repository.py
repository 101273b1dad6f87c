"""Event log repository."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill import crud
from stellarbill.models.event import Event


class EventRepositoryProtocol(Protocol):
    """Append-only access to the event table."""

    async def append(self, db: AsyncSession, *, values: dict[str, Any]) -> Event:
        """Insert and commit one event row."""
        ...


class EventRepository(EventRepositoryProtocol):
    """Delegates to the crud.event singleton."""

    async def append(self, db: AsyncSession, *, values: dict[str, Any]) -> Event:
        """Insert and commit one event row."""
        return await crud.event.append(db, values=values)

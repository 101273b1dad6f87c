"""CRUD operations for the event log."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.models.event import Event


class CRUDEvent:
    """Append-only writes to the event table."""

    async def append(self, db: AsyncSession, *, values: dict[str, Any]) -> Event:
        """Insert one event row and commit."""
        db_obj = Event(**values)
        db.add(db_obj)
        await db.commit()
        return db_obj


event = CRUDEvent()

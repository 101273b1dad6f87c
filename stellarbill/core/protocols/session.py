"""Session factory protocol.

Sweeps and event subscribers open their own sessions (one per item) rather
than sharing the request session. Production passes ``get_db_context``;
tests pass a factory yielding an ``AsyncMock``.
"""

from contextlib import AbstractAsyncContextManager
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]

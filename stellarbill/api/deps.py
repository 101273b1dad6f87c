"""Dependencies that are used in the API endpoints."""

import hmac
from typing import Optional, get_type_hints

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from stellarbill.core import container as container_mod
from stellarbill.core.config import settings
from stellarbill.core.container import Container
from stellarbill.core.context import BaseContext
from stellarbill.core.logging import logger
from stellarbill.db.session import get_db
from stellarbill.domains.organizations.protocols import OrganizationResolverProtocol

__all__ = ["Inject", "get_container", "get_context", "get_db", "verify_cron_secret"]


def get_container() -> Container:
    """Get the DI container. Initialized at startup."""
    c = container_mod.container
    if c is None:
        raise RuntimeError("Container not initialized. Call initialize_container() first.")
    return c


# ---------------------------------------------------------------------------
# Protocol Injection
# ---------------------------------------------------------------------------

# Cache of protocol_type -> Container field name, built once at first call.
_INJECT_CACHE: dict[type, str] = {}


def _resolve_field_name(protocol_type: type) -> str:
    """Find which Container field matches the given protocol type.

    Uses get_type_hints() to introspect the Container dataclass.
    Result is cached so the lookup happens at most once per protocol type.
    """
    if not _INJECT_CACHE:
        for name, hint in get_type_hints(Container).items():
            _INJECT_CACHE[hint] = name

    field_name = _INJECT_CACHE.get(protocol_type)
    if field_name is None:
        available = list(_INJECT_CACHE.values())
        raise TypeError(
            f"No binding for {protocol_type.__name__} in Container. Available fields: {available}"
        )
    return field_name


def Inject(protocol_type: type):  # noqa: N802
    """Resolve a protocol implementation from the DI container.

    Works like ``Depends()`` but looks up the implementation by protocol type
    instead of requiring the caller to know about the Container internals.

    Usage in FastAPI endpoints::

        from stellarbill.api.deps import Inject
        from stellarbill.domains.credits.protocols import CreditLedgerProtocol


        @router.get("/")
        async def balance(ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol)):
            ...
    """
    field_name = _resolve_field_name(protocol_type)

    def _resolve(c: Container = Depends(get_container)):
        return getattr(c, field_name)

    return Depends(_resolve)


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------


async def get_context(
    db: AsyncSession = Depends(get_db),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    org_resolver: OrganizationResolverProtocol = Inject(OrganizationResolverProtocol),
) -> BaseContext:
    """Resolve the organization and network the API key belongs to.

    Raises:
        InvalidApiKeyError: missing or unknown key (mapped to 401).
    """
    return await org_resolver.resolve_api_key(db, x_api_key or "")


async def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Guard the cron endpoints with ``Authorization: Bearer <CRON_SECRET>``.

    Open when CRON_SECRET is not configured (local development).
    """
    if not settings.CRON_SECRET:
        return

    token = authorization or ""
    if token.startswith("Bearer "):
        token = token[7:]

    if not hmac.compare_digest(token.encode(), settings.CRON_SECRET.encode()):
        logger.warning("Rejected cron trigger with an invalid secret")
        raise HTTPException(status_code=401, detail="Invalid cron secret")

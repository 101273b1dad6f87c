"""Dependency Injection Container Module.

This module provides the DI container and factory for wiring dependencies
across the application.

Usage:
------
    # Initialize at startup (call once from main.py)
    from stellarbill.core.container import initialize_container
    from stellarbill.core.config import settings
    initialize_container(settings)

    # Import the global container after initialization
    from stellarbill.core.container import container
    tracker = container.checkout_tracker

    # In FastAPI deps.py
    def get_container() -> Container:
        return container

    # In tests (construct directly with fakes, don't use global)
    from stellarbill.core.container import Container
    test_container = Container(
        event_bus=FakeEventBus(),
        chain_registry=FakeChainClientRegistry(),
        signature_verifier=FakeWebhookSignatureVerifier(),
        ...
    )

Module structure:
-----------------
    container/
    ├── __init__.py      # This file - exports public API
    ├── container.py     # Container dataclass (serves)
    └── factory.py       # create_container() (builds)
"""

from typing import TYPE_CHECKING

from stellarbill.core.container.container import Container
from stellarbill.core.container.factory import create_container

if TYPE_CHECKING:
    from stellarbill.core.config import Settings

__all__ = ["Container", "create_container", "container", "initialize_container"]


# ---------------------------------------------------------------------------
# Global container instance
# ---------------------------------------------------------------------------

container: Container | None = None
"""Global container instance.

Initialized via `initialize_container()` at application startup.

Import and use this in api/deps.py for FastAPI dependency functions.

Do NOT import this in domain code. Domains receive dependencies
via constructor parameters, never by importing the container directly.
"""


def initialize_container(settings: "Settings") -> None:
    """Initialize the global container. Call once at startup.

    Args:
        settings: Application settings from core/config

    Raises:
        RuntimeError: If called more than once (container already initialized)

    Example:
    --------
        # In main.py lifespan
        from stellarbill.core.container import initialize_container
        from stellarbill.core.config import settings

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            initialize_container(settings)
    """
    global container

    if container is not None:
        raise RuntimeError(
            "Container already initialized. "
            "initialize_container() should only be called once at startup."
        )

    container = create_container(settings)


def reset_container() -> None:
    """Reset the global container to None. For testing only.

    This allows tests to reinitialize the container with different
    settings or to ensure a clean state between tests.

    WARNING: Do not use in production code.
    """
    global container
    container = None

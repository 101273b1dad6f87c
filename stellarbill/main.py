"""Main module of the FastAPI application.

This module sets up the FastAPI application, the middleware that logs
incoming requests and unhandled exceptions, and the exception handlers.
"""

import os
import subprocess
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from stellarbill.api.middleware import (
    add_request_id,
    exception_logging_middleware,
    external_service_exception_handler,
    invalid_state_exception_handler,
    log_requests,
    not_found_exception_handler,
    permission_exception_handler,
    stellarbill_exception_handler,
    validation_exception_handler,
)
from stellarbill.api.v1.api import api_router
from stellarbill.core.config import settings
from stellarbill.core.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    NotFoundException,
    PermissionException,
    StellarBillException,
)
from stellarbill.core.logging import logger


def run_migrations() -> None:
    """Upgrade the database to the latest Alembic revision, unless disabled."""
    if not settings.RUN_ALEMBIC_MIGRATIONS:
        logger.info("Alembic migrations disabled")
        return
    logger.info("Running alembic migrations...")
    env = os.environ.copy()
    backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env["PYTHONPATH"] = backend_dir
    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "heads"],
        check=True,
        cwd=backend_dir,
        env=env,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events.

    Initializes the DI container and brings the schema up to date; closes
    the chain clients on shutdown.
    """
    from stellarbill.core import container as container_mod
    from stellarbill.core.container import initialize_container

    logger.info("Initializing dependency injection container...")
    initialize_container(settings)
    logger.info("Container initialized successfully")

    run_migrations()

    yield

    await container_mod.container.chain_registry.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(api_router)

# Register middleware
app.middleware("http")(add_request_id)
app.middleware("http")(log_requests)
app.middleware("http")(exception_logging_middleware)

# Register exception handlers
app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ValidationError)(validation_exception_handler)
app.exception_handler(PermissionException)(permission_exception_handler)
app.exception_handler(NotFoundException)(not_found_exception_handler)
app.exception_handler(InvalidStateError)(invalid_state_exception_handler)
app.exception_handler(ExternalServiceError)(external_service_exception_handler)
app.exception_handler(StellarBillException)(stellarbill_exception_handler)

"""Middleware for the FastAPI application.

This module contains middleware that process requests and responses, and
the exception handlers mapping the domain exception hierarchy to status codes.
"""

import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from stellarbill.core.config import settings
from stellarbill.core.config.enums import Environment
from stellarbill.core.exceptions import (
    ConcurrentModificationError,
    ExternalServiceError,
    InvalidStateError,
    NotFoundException,
    PermissionException,
    StellarBillException,
    unpack_validation_error,
)
from stellarbill.core.logging import logger
from stellarbill.domains.credits.exceptions import InsufficientCreditsError
from stellarbill.domains.plans.exceptions import PlanLimitExceededError


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    return await call_next(request)


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log incoming requests."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}",
        extra={"dimensions": {"request_id": getattr(request.state, "request_id", None)}},
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    try:
        response = await call_next(request)
        return response
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        response_content = {"detail": f"Internal Server Error: {exc.__class__.__name__}"}

        # Include stack trace only in local development
        if settings.ENVIRONMENT == Environment.LOCAL:
            response_content["trace"] = traceback.format_exc()

        return JSONResponse(status_code=500, content=response_content)


# Exception handlers
async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Exception handler for validation errors that occur during request processing.

    Returns:
    -------
        JSONResponse: A 422 Unprocessable Entity status response listing, per
            field location, why the request was rejected.

    Example of JSON output:
        {
            "errors": [
                {"body.items.0.amount": "Field required"}
            ]
        }

    """
    error_messages = unpack_validation_error(exc)
    logger.warning(f"Validation error: {error_messages}")
    return JSONResponse(status_code=422, content=error_messages)


async def permission_exception_handler(request: Request, exc: PermissionException) -> JSONResponse:
    """Exception handler for PermissionException.

    Covers invalid API keys and webhook signatures.

    Returns:
    -------
        JSONResponse: A 401 Unauthorized status response that details the error message.

    """
    return JSONResponse(status_code=401, content={"detail": str(exc)})


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Exception handler for NotFoundException.

    Returns:
    -------
        JSONResponse: A 404 Not Found status response that details the error message.

    """
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def invalid_state_exception_handler(request: Request, exc: InvalidStateError) -> JSONResponse:
    """Exception handler for InvalidStateError and its domain subclasses.

    Checks the most specific classes first so every domain exception
    inheriting from a mapped class gets its status code without its own
    registration.
    """
    status_map = {
        InsufficientCreditsError: 402,
        PlanLimitExceededError: 403,
        ConcurrentModificationError: 409,
    }

    for exc_type, code in status_map.items():
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=code, content={"detail": str(exc)})

    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def external_service_exception_handler(
    request: Request, exc: ExternalServiceError
) -> JSONResponse:
    """Exception handler for failures of the chain or another upstream.

    Returns:
    -------
        JSONResponse: A 502 Bad Gateway status response naming the failing service.

    """
    logger.warning(f"Upstream failure: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


async def stellarbill_exception_handler(
    request: Request, exc: StellarBillException
) -> JSONResponse:
    """Generic exception handler for unmapped StellarBillException types."""
    logger.error(f"Unmapped {exc.__class__.__name__}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})

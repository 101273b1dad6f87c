"""Logging setup with contextual dimensions.

``logger`` is the process-wide base logger. Services derive child loggers
that carry identity dimensions (organization, network, checkout, ...)::

    log = logger.with_context(organization_id=org_id, checkout_id=checkout.id)
    log.info("Checkout settled")

Dimensions are rendered into every record so a single checkout or subscription
can be followed through the sweeps.
"""

import json
import logging
import sys
from typing import Any, MutableMapping

from stellarbill.core.config import settings
from stellarbill.core.config.enums import Environment


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that merges a fixed set of dimensions into each record."""

    def __init__(self, logger: logging.Logger, dimensions: dict[str, Any] | None = None):
        """Wrap ``logger`` with the given dimensions."""
        super().__init__(logger, dimensions or {})
        self.dimensions: dict[str, Any] = dict(dimensions or {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, Any]:
        """Attach the dimensions to the record via ``extra``."""
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("dimensions", {})
        extra["dimensions"] = {**self.dimensions, **extra["dimensions"]}
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with ``dimensions`` merged over the current ones."""
        merged = {**self.dimensions, **{k: v for k, v in dimensions.items() if v is not None}}
        return ContextualLogger(self.logger, merged)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "dimensions", {}) or {})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _ReadableFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        dims = getattr(record, "dimensions", None)
        if dims:
            rendered = " ".join(f"{k}={v}" for k, v in dims.items())
            return f"{base} [{rendered}]"
        return base


def _configure() -> logging.Logger:
    base = logging.getLogger("stellarbill")
    if base.handlers:
        return base

    handler = logging.StreamHandler(sys.stdout)
    if settings.ENVIRONMENT == Environment.LOCAL:
        handler.setFormatter(_ReadableFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(_JsonFormatter())

    base.addHandler(handler)
    base.setLevel(settings.LOG_LEVEL.upper())
    base.propagate = False
    return base


logger = ContextualLogger(_configure())

"""
Central logging configuration for Circlegate.

Every authorization decision runs inside a log context carrying the
request, the operation being decided and the acting user. Each record
emitted while the decision runs is stamped with all three, so one
decision can be followed across the rule, service and store layers.

Usage:
    from src.logging_config import get_logger, logged_operation
    logger = get_logger(__name__)

    @logged_operation("locker.update")
    async def update_locker(self, actor, locker_id, action): ...
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar

from src.kernel.errors import DomainError

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
operation_var: ContextVar[Optional[str]] = ContextVar("operation", default=None)
actor_id_var: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)

CONTEXT_FIELDS = ("request_id", "operation", "actor_id")

_CONTEXT_VARS = {
    "request_id": request_id_var,
    "operation": operation_var,
    "actor_id": actor_id_var,
}

_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", *CONTEXT_FIELDS,
))

_PLACEHOLDER = "-"

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

logger = logging.getLogger(__name__)


@contextmanager
def log_context(
    *,
    request_id: Optional[str] = None,
    operation: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> Iterator[None]:
    """
    Bind context fields for the duration of the block.

    Fields left as None keep whatever an outer context bound.
    """
    values = {"request_id": request_id, "operation": operation, "actor_id": actor_id}
    tokens = [
        (_CONTEXT_VARS[field], _CONTEXT_VARS[field].set(value))
        for field, value in values.items()
        if value is not None
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def current_context() -> dict[str, Optional[str]]:
    return {field: var.get() for field, var in _CONTEXT_VARS.items()}


def logged_operation(name: str) -> Callable[[F], F]:
    """
    Run a use case `(self, actor, ...)` inside a log context.

    A DomainError escaping the use case is logged once as a denial,
    with its kind, then re-raised unchanged.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(self, actor, *args, **kwargs):
            with log_context(operation=name, actor_id=str(actor.id)):
                try:
                    return await func(self, actor, *args, **kwargs)
                except DomainError as exc:
                    logger.info("Operation denied", extra={"code": exc.kind.value, "reason": exc.message})
                    raise

        return wrapper  # type: ignore[return-value]

    return decorator


class LogContextFilter(logging.Filter):
    """Stamp records with the bound context; '-' where nothing is bound."""

    def filter(self, record: logging.LogRecord) -> bool:
        for field, var in _CONTEXT_VARS.items():
            # An explicit extra= wins over the context
            if getattr(record, field, None) is None:
                setattr(record, field, var.get() or _PLACEHOLDER)
        return True


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for production log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value and value != _PLACEHOLDER:
                log_obj[field] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and value is not None:
                try:
                    json.dumps(value)
                    log_obj[key] = value
                except (TypeError, ValueError):
                    log_obj[key] = str(value)

        return json.dumps(log_obj)


DEV_FORMAT = (
    "%(asctime)s %(levelname)-5s [%(name)s] "
    "req=%(request_id)s op=%(operation)s actor=%(actor_id)s %(message)s"
)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' logs JSON, anything else the dev format
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(LogContextFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

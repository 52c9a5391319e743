"""
Structured logging configuration using structlog.

- Console output for development, JSON for log aggregation
- Account numbers masked before rendering
- Timing helper for document rendering
"""

import logging
import re
import sys
import time
from typing import Any, cast

import structlog
from structlog.types import EventDict, Processor

# Keys whose values are account identifiers and get masked in every log entry
ACCOUNT_KEYS = {"iban", "debtor_iban", "creditor_iban", "value"}

_IBAN_LIKE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{4,}$")


def mask_iban(value: str) -> str:
    """Keep country code and last 4 characters, mask the rest.

    >>> mask_iban("NL91ABNA0417164300")
    'NL************4300'
    """
    compact = "".join(value.split()).upper()
    if len(compact) <= 8:
        return compact
    return compact[:2] + "*" * (len(compact) - 6) + compact[-4:]


def mask_account_numbers(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask IBANs in log entries; only the country and last 4 chars survive."""
    for key in ACCOUNT_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and _IBAN_LIKE.match("".join(value.split()).upper()):
            event_dict[key] = mask_iban(value)
    return event_dict


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application context to every log entry."""
    from sepacredit import __version__

    event_dict["app"] = "sepacredit"
    event_dict["version"] = __version__
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    dev_mode: bool = True,
) -> None:
    """
    Configure structured logging for the package.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Whether to output JSON logs (recommended for production)
        dev_mode: Whether to use development-friendly output
    """
    shared_processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        mask_account_numbers,
    ]

    if dev_mode:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    elif json_logs:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
    # basicConfig is a no-op once handlers exist
    logging.getLogger("sepacredit").setLevel(getattr(logging, log_level.upper()))


def configure_from_settings(settings: Any = None) -> None:
    """Configure logging from a ``Settings`` instance (or the cached one)."""
    if settings is None:
        from sepacredit.utils.config import get_settings

        settings = get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        dev_mode=settings.dev_mode,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("transaction_added", amount="100.00", currency="EUR")
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


class LogPerformance:
    """
    Context manager for logging performance metrics.

    Usage:
        with LogPerformance("document_render", logger):
            ...
    """

    def __init__(self, operation: str, logger: structlog.stdlib.BoundLogger, **context: Any):
        self.operation = operation
        self.logger = logger
        self.context = context
        self.start_time: float = 0

    def __enter__(self) -> "LogPerformance":
        self.start_time = time.perf_counter()
        self.logger.debug(f"{self.operation}_started", **self.context)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.info(
                f"{self.operation}_completed",
                duration_ms=round(duration * 1000, 2),
                operation=self.operation,
                **self.context,
            )
        else:
            self.logger.error(
                f"{self.operation}_failed",
                duration_ms=round(duration * 1000, 2),
                operation=self.operation,
                error=str(exc_val),
                error_type=exc_type.__name__ if exc_type else None,
                **self.context,
            )


# Initialize logging on module import
configure_logging()

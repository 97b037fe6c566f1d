"""
Structured JSON logging for Brand Visibility.

Provides standardized logging with:
- JSON formatted output to stderr
- UTC timestamps with timezone info
- Structured context fields
- Component-based logger creation

All logs use Python's standard logging module with custom formatting.
Log level defaults to WARNING, use setup_logging(verbose=True) for DEBUG.

Examples:
    >>> from brand_visibility.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("catalog.sqlite")
    >>> logger.info("Catalog loaded", extra={"context": {"entries": 12}})

Privacy:
    - Never log full response texts, only their length
    - Only stderr is used (stdout reserved for user output)
"""

import json
import logging
import sys
from typing import Any

from brand_visibility.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs logs as JSON with structured fields.

    Each log record is formatted as a JSON object with:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level (INFO, WARNING, ERROR, DEBUG)
    - component: Module/component name (from logger name)
    - message: Human-readable log message
    - context: Additional structured data (from 'context' in extra)
    - org_id: Organization being analyzed (from 'org_id' in extra, if available)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if hasattr(record, "org_id"):
            log_entry["org_id"] = record.org_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure structured JSON logging for the application.

    Sets up:
    - JSON formatter for structured output
    - stderr output (stdout reserved for user-facing content)
    - Log level: DEBUG if verbose=True, WARNING otherwise

    The CLI prints analysis results on stdout, so the default level is kept
    at WARNING to keep routine runs quiet. Pass verbose=True to see the
    detector and catalog debug trail.

    Args:
        verbose: If True, set log level to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers (prevents duplicate logs)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root_logger.addHandler(handler)


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger instance for a specific component.

    Args:
        component: Component name (e.g., "analyzer", "catalog.sqlite")

    Returns:
        Logger instance configured for JSON output
    """
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    org_id: str | None = None,
    exc_info: bool = False,
) -> None:
    """
    Log a message with structured context and optional org_id.

    Equivalent to logger.log(level, message, extra={'context': {...}, 'org_id': '...'})

    Args:
        logger: Logger instance (from get_logger)
        level: Log level (logging.INFO, logging.WARNING, etc.)
        message: Human-readable log message
        context: Optional dict with additional structured data
        org_id: Optional organization identifier to include in log
        exc_info: Attach the exception currently being handled

    Example:
        >>> logger = get_logger("analyzer")
        >>> log_with_context(
        ...     logger,
        ...     logging.WARNING,
        ...     "Catalog lookup failed, returning safe default",
        ...     context={"error": "disk I/O error"},
        ...     org_id="acme",
        ... )
    """
    extra = {}

    if context is not None:
        extra["context"] = context

    if org_id is not None:
        extra["org_id"] = org_id

    logger.log(level, message, extra=extra if extra else None, exc_info=exc_info)

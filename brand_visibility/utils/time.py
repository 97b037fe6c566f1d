"""
UTC timestamp utilities for Brand Visibility.

All timestamps MUST be in UTC with explicit timezone markers.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix

Examples:
    >>> from brand_visibility.utils.time import utc_now, utc_timestamp
    >>> utc_timestamp()
    '2025-11-02T08:30:45Z'
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Note:
        NEVER use datetime.now() without timezone parameter.
        NEVER use datetime.utcnow() (deprecated, returns naive datetime).
    """
    return datetime.now(UTC)


def utc_timestamp() -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ

    Returns:
        str: ISO 8601 formatted timestamp in UTC

    Note:
        Used for catalog rows, schema_version entries, and logging.
    """
    return utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")

"""
Custom exceptions for Brand Visibility.

This module provides a hierarchy of exceptions that enable type-safe error
handling throughout the application. All exceptions inherit from the base
BrandVisibilityError for consistent catching.

Exception Hierarchy:
    BrandVisibilityError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   └── ConfigValidationError
    ├── CatalogError
    │   ├── CatalogInitError
    │   └── CatalogLookupError
    └── DetectionError
        └── MentionDetectionError

Usage:
    from brand_visibility.exceptions import ConfigurationError

    try:
        config = load_config(path)
    except ConfigFileNotFoundError as e:
        logger.error(f"Config file not found: {e}")
        sys.exit(1)

Note:
    The analyzer entry point never lets these escape to its caller. They are
    raised by the lower layers (config, catalog stores, detector) and turned
    into the safe-default analysis at the top.
"""


class BrandVisibilityError(Exception):
    """
    Base exception for all Brand Visibility errors.

    All custom exceptions in this application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(BrandVisibilityError):
    """
    Base class for configuration-related errors.

    Raised when configuration loading, parsing, or validation fails.
    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("/path/to/config.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file is invalid (schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("Field 'scoring.penalty' must be 'graduated' or 'stepped'")
    """

    pass


# ============================================================================
# Catalog Errors
# ============================================================================


class CatalogError(BrandVisibilityError):
    """
    Base class for brand catalog errors.

    Should be caught and result in exit code 2 (database error) in the CLI.
    """

    pass


class CatalogInitError(CatalogError):
    """
    Catalog database initialization failed.

    Example:
        raise CatalogInitError("Failed to create catalog database: permission denied")
    """

    pass


class CatalogLookupError(CatalogError):
    """
    Fetching the brand catalog for an organization failed.

    Example:
        raise CatalogLookupError("Failed to read catalog for org 'acme': disk I/O error")
    """

    pass


# ============================================================================
# Detection Errors
# ============================================================================


class DetectionError(BrandVisibilityError):
    """
    Base class for brand detection errors.

    These are non-fatal: the analyzer falls back to the safe default.
    """

    pass


class MentionDetectionError(DetectionError):
    """
    A brand term could not be turned into a matcher.

    Example:
        raise MentionDetectionError("Brand term cannot be empty or whitespace")
    """

    pass

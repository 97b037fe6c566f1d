"""
Configuration loader for Brand Visibility.

This module loads YAML configuration files and validates them with Pydantic
models.

Functions:
    load_config: Main entrypoint to load and validate brand_visibility.config.yaml
    build_catalog_store: Turn the organizations section into a CatalogStore
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from brand_visibility.catalog.store import InMemoryCatalogStore
from brand_visibility.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
)

from .schema import AnalyzerConfig

logger = logging.getLogger(__name__)


def load_config(config_path: str | Path) -> AnalyzerConfig:
    """
    Load and validate brand_visibility.config.yaml.

    Args:
        config_path: Path to the YAML file (relative or absolute)

    Returns:
        Validated AnalyzerConfig

    Raises:
        ConfigFileNotFoundError: If config file doesn't exist at the specified path
        ConfigValidationError: If YAML is invalid or config validation fails

    Security:
        Uses yaml.safe_load() to prevent code injection
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    if not isinstance(raw_config, dict):
        raise ConfigValidationError(
            f"Configuration root must be a mapping in {config_path}, "
            f"got: {type(raw_config).__name__}"
        )

    try:
        config = AnalyzerConfig.model_validate(raw_config)
    except ValidationError as e:
        # Format validation errors in a user-friendly way
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            error_messages.append(f"  - {loc}: {msg}")

        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + "\n".join(error_messages)
        ) from e

    logger.debug(
        f"Loaded config from {config_path}: "
        f"{len(config.organizations)} organization(s), "
        f"{len(config.global_competitors)} global competitor(s)"
    )
    return config


def build_catalog_store(config: AnalyzerConfig) -> InMemoryCatalogStore:
    """
    Build an in-memory catalog store from the organizations section.

    Example:
        >>> store = build_catalog_store(config)
        >>> [e.name for e in store.fetch_catalog("acme")]
        ['Acme', 'Globex', 'Initech']
    """
    return InMemoryCatalogStore(
        catalogs={org_id: org.entries() for org_id, org in config.organizations.items()},
        exclusions={
            org_id: org.exclusions for org_id, org in config.organizations.items()
        },
    )

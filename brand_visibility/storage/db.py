"""
SQLite brand catalog storage for Brand Visibility.

This module provides the catalog database with schema versioning and
migration support, and a CatalogStore implementation that reads from it.
All timestamps are stored in ISO 8601 format with 'Z' suffix (UTC).

The database tracks:
- brand_catalog: One row per tracked brand per organization
- org_competitor_exclusions: Competitor names an organization dismissed

Example usage:
    >>> from brand_visibility.storage.db import init_db_if_needed, SqliteCatalogStore
    >>> init_db_if_needed("./catalog.db")
    >>> store = SqliteCatalogStore("./catalog.db")
    >>> store.fetch_catalog("acme")
    []

Security:
    - ALL queries use parameterized statements to prevent SQL injection
    - Connection context managers ensure proper cleanup
"""

import json
import logging
import sqlite3
from collections.abc import Sequence
from contextlib import closing
from pathlib import Path

from brand_visibility.catalog.models import BrandCatalogEntry
from brand_visibility.config.schema import AnalyzerConfig
from brand_visibility.exceptions import CatalogInitError, CatalogLookupError

from ..utils.time import utc_timestamp

logger = logging.getLogger(__name__)

# Current schema version - increment when migrations are added
CURRENT_SCHEMA_VERSION = 2


def init_db_if_needed(db_path: str) -> None:
    """
    Initialize SQLite catalog database with schema versioning.

    Creates the database file if it doesn't exist, initializes the
    schema_version table, and applies any needed migrations. Idempotent.

    Args:
        db_path: Filesystem path to SQLite database file.
                 Parent directory is created if needed.

    Raises:
        sqlite3.Error: If database creation or migration fails
        ValueError: If the database schema is newer than this software
    """
    db_path_obj = Path(db_path)
    db_path_obj.parent.mkdir(parents=True, exist_ok=True)

    with sqlite3.connect(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TEXT NOT NULL
            )
        """)
        conn.commit()

        current_version = get_schema_version(conn)

        if current_version < CURRENT_SCHEMA_VERSION:
            logger.info(
                f"Catalog schema upgrade needed: "
                f"v{current_version} -> v{CURRENT_SCHEMA_VERSION}"
            )
            apply_migrations(conn, current_version, CURRENT_SCHEMA_VERSION)
        elif current_version == CURRENT_SCHEMA_VERSION:
            logger.debug(f"Catalog schema is current (v{CURRENT_SCHEMA_VERSION})")
        else:
            raise ValueError(
                f"Catalog schema version {current_version} is newer than "
                f"expected {CURRENT_SCHEMA_VERSION}. Update your software or "
                f"use a different database file."
            )


def get_schema_version(conn: sqlite3.Connection) -> int:
    """
    Get current schema version from database.

    Returns 0 if no version has been recorded (fresh database).
    """
    cursor = conn.execute("SELECT MAX(version) FROM schema_version")
    result = cursor.fetchone()[0]

    # MAX() returns None if table is empty
    return result if result is not None else 0


def apply_migrations(
    conn: sqlite3.Connection, from_version: int, to_version: int
) -> None:
    """
    Apply schema migrations from one version to another.

    Each migration runs in its own transaction; schema_version is updated
    after each successful step.

    Raises:
        sqlite3.Error: If any migration SQL fails (transaction rolled back)
        ValueError: If from_version > to_version (downgrades not supported)
    """
    if from_version > to_version:
        raise ValueError(
            f"Cannot downgrade schema from v{from_version} to v{to_version}. "
            f"Downgrades are not supported."
        )

    for target_version in range(from_version + 1, to_version + 1):
        try:
            conn.execute("BEGIN")

            if target_version == 1:
                _migrate_to_v1(conn)
            elif target_version == 2:
                _migrate_to_v2(conn)
            else:
                raise ValueError(f"No migration defined for version {target_version}")

            conn.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (target_version, utc_timestamp()),
            )
            conn.commit()
            logger.info(f"Migrated catalog schema to version {target_version}")

        except Exception as e:
            conn.rollback()
            logger.error(
                f"Migration to version {target_version} failed: {e}", exc_info=True
            )
            raise sqlite3.Error(
                f"Failed to migrate database to version {target_version}: {e}"
            ) from e


def _migrate_to_v1(conn: sqlite3.Connection) -> None:
    """
    Create the brand_catalog table.

    variants_json holds a JSON array of strings. is_org_brand is stored as
    INTEGER (0/1) per SQLite convention. Row id order is the catalog scan
    order.
    """
    conn.execute("""
        CREATE TABLE IF NOT EXISTS brand_catalog (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            org_id TEXT NOT NULL,
            name TEXT NOT NULL,
            variants_json TEXT NOT NULL DEFAULT '[]',
            is_org_brand INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            UNIQUE(org_id, name)
        )
    """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_brand_catalog_org ON brand_catalog(org_id)"
    )


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Create the org_competitor_exclusions table."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS org_competitor_exclusions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            org_id TEXT NOT NULL,
            competitor_name TEXT NOT NULL,
            created_at TEXT NOT NULL,
            UNIQUE(org_id, competitor_name)
        )
    """)


def insert_catalog_entry(
    conn: sqlite3.Connection,
    org_id: str,
    name: str,
    variants: Sequence[str] = (),
    is_org_brand: bool = False,
) -> None:
    """
    Insert or update one catalog row.

    An existing (org_id, name) row has its variants and org flag replaced.

    Note:
        Always call conn.commit() after insert to persist changes.
    """
    conn.execute(
        """
        INSERT INTO brand_catalog (org_id, name, variants_json, is_org_brand, created_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(org_id, name) DO UPDATE SET
            variants_json = excluded.variants_json,
            is_org_brand = excluded.is_org_brand
        """,
        (org_id, name, json.dumps(list(variants)), 1 if is_org_brand else 0, utc_timestamp()),
    )
    logger.debug(f"Upserted catalog entry: {org_id}/{name} (is_org_brand={is_org_brand})")


def insert_competitor_exclusion(
    conn: sqlite3.Connection, org_id: str, competitor_name: str
) -> None:
    """
    Record that an organization excludes a competitor. Idempotent.

    Note:
        Always call conn.commit() after insert to persist changes.
    """
    conn.execute(
        """
        INSERT OR IGNORE INTO org_competitor_exclusions (org_id, competitor_name, created_at)
        VALUES (?, ?, ?)
        """,
        (org_id, competitor_name, utc_timestamp()),
    )


def fetch_catalog_rows(conn: sqlite3.Connection, org_id: str) -> list[dict]:
    """Return raw catalog rows for org_id in insertion order."""
    cursor = conn.execute(
        """
        SELECT name, variants_json, is_org_brand
        FROM brand_catalog
        WHERE org_id = ?
        ORDER BY id
        """,
        (org_id,),
    )
    return [
        {"name": name, "variants_json": variants_json, "is_org_brand": is_org_brand}
        for name, variants_json, is_org_brand in cursor.fetchall()
    ]


def fetch_exclusion_names(conn: sqlite3.Connection, org_id: str) -> list[str]:
    """Return excluded competitor names for org_id in insertion order."""
    cursor = conn.execute(
        "SELECT competitor_name FROM org_competitor_exclusions WHERE org_id = ? ORDER BY id",
        (org_id,),
    )
    return [row[0] for row in cursor.fetchall()]


def seed_from_config(db_path: str, config: AnalyzerConfig) -> int:
    """
    Write every organization catalog from config into the database.

    Args:
        db_path: Path to the catalog database (created if missing)
        config: Loaded configuration

    Returns:
        Number of catalog entries written

    Raises:
        CatalogInitError: If the database cannot be initialized or written
    """
    try:
        init_db_if_needed(db_path)
        written = 0
        with sqlite3.connect(db_path) as conn:
            for org_id, org in config.organizations.items():
                for entry in org.entries():
                    insert_catalog_entry(
                        conn, org_id, entry.name, entry.string_variants(), entry.is_org_brand
                    )
                    written += 1
                for name in org.exclusions:
                    insert_competitor_exclusion(conn, org_id, name)
            conn.commit()
    except (sqlite3.Error, OSError, ValueError) as e:
        raise CatalogInitError(f"Failed to seed catalog database {db_path}: {e}") from e

    logger.info(f"Seeded {written} catalog entries into {db_path}")
    return written


class SqliteCatalogStore:
    """
    CatalogStore reading from a catalog database.

    A fresh connection is opened and closed per lookup, so one store can be
    shared by concurrent callers.

    Raises:
        CatalogLookupError: From fetch_* when the file is missing or a query fails
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.exists():
            raise CatalogLookupError(f"Catalog database not found: {self.db_path}")
        return sqlite3.connect(self.db_path)

    def fetch_catalog(self, org_id: str) -> list[BrandCatalogEntry]:
        try:
            with closing(self._connect()) as conn:
                rows = fetch_catalog_rows(conn, org_id)
        except sqlite3.Error as e:
            raise CatalogLookupError(
                f"Failed to read catalog for org {org_id!r}: {e}"
            ) from e

        return [BrandCatalogEntry.from_row(row) for row in rows]

    def fetch_exclusions(self, org_id: str) -> list[str]:
        try:
            with closing(self._connect()) as conn:
                return fetch_exclusion_names(conn, org_id)
        except sqlite3.Error as e:
            raise CatalogLookupError(
                f"Failed to read exclusions for org {org_id!r}: {e}"
            ) from e

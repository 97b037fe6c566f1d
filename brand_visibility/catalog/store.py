"""
Brand catalog lookup interface.

The analyzer reads an organization's catalog through a CatalogStore. Stores
raise CatalogLookupError when the backing lookup fails; an organization
with no rows yields an empty list, which is not an error.

Implementations:
    InMemoryCatalogStore: dict-backed, built from YAML config or in tests
    SqliteCatalogStore: see brand_visibility.storage.db
"""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from brand_visibility.catalog.models import BrandCatalogEntry


class CatalogStore(Protocol):
    """Read-only source of per-organization brand catalogs."""

    def fetch_catalog(self, org_id: str) -> list[BrandCatalogEntry]:
        """Return the catalog entries for org_id (empty if unknown)."""
        ...

    def fetch_exclusions(self, org_id: str) -> list[str]:
        """Return competitor names excluded by org_id (empty if none)."""
        ...


class InMemoryCatalogStore:
    """
    Catalog store backed by plain dictionaries.

    Example:
        >>> store = InMemoryCatalogStore(
        ...     {"acme": [{"name": "Acme", "is_org_brand": True}, {"name": "Globex"}]}
        ... )
        >>> [e.name for e in store.fetch_catalog("acme")]
        ['Acme', 'Globex']
    """

    def __init__(
        self,
        catalogs: Mapping[str, Iterable[BrandCatalogEntry | Mapping[str, Any]]] | None = None,
        exclusions: Mapping[str, Iterable[str]] | None = None,
    ):
        self._catalogs: dict[str, list[BrandCatalogEntry]] = {}
        self._exclusions: dict[str, list[str]] = {}

        for org_id, entries in (catalogs or {}).items():
            for entry in entries:
                self.add_entry(org_id, entry)
        for org_id, names in (exclusions or {}).items():
            self._exclusions[org_id] = list(names)

    def add_entry(self, org_id: str, entry: BrandCatalogEntry | Mapping[str, Any]) -> None:
        if not isinstance(entry, BrandCatalogEntry):
            entry = BrandCatalogEntry.from_row(entry)
        self._catalogs.setdefault(org_id, []).append(entry)

    def add_exclusion(self, org_id: str, competitor_name: str) -> None:
        self._exclusions.setdefault(org_id, []).append(competitor_name)

    def org_ids(self) -> list[str]:
        return list(self._catalogs)

    def fetch_catalog(self, org_id: str) -> list[BrandCatalogEntry]:
        return list(self._catalogs.get(org_id, []))

    def fetch_exclusions(self, org_id: str) -> list[str]:
        return list(self._exclusions.get(org_id, []))

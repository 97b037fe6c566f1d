"""
Brand catalog models and lookup interface.

The overlay (catalog.overlay) is imported directly where needed; it depends
on the extractor, which itself depends on catalog.models.
"""

from brand_visibility.catalog.models import BrandCatalogEntry
from brand_visibility.catalog.store import CatalogStore, InMemoryCatalogStore

__all__ = ["BrandCatalogEntry", "CatalogStore", "InMemoryCatalogStore"]

"""
Brand catalog entries consumed by the detection engine.

A catalog is the per-organization list of tracked brands: the organization's
own brand(s) plus its competitors. Catalog rows are created and edited
elsewhere; here they are read-only input.

Rows coming from storage are loosely shaped (variants may be missing, stored
as JSON text, or contain junk), so BrandCatalogEntry.from_row() accepts the
common spellings and leaves per-variant cleanup to the detector.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class BrandCatalogEntry:
    """
    One tracked brand for an organization.

    Attributes:
        name: Canonical brand name as shown in results
        variants: Alternate spellings, abbreviations, domains. May contain
            non-string junk from storage; the detector skips such items.
        is_org_brand: True for the organization's own brand, False for a competitor
    """

    name: str
    variants: list[Any] = field(default_factory=list)
    is_org_brand: bool = False

    def __post_init__(self):
        """Validate name is a non-empty string."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError(f"Catalog entry name must be a non-empty string, got: {self.name!r}")
        self.name = self.name.strip()
        if self.variants is None:
            self.variants = []

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BrandCatalogEntry":
        """
        Build an entry from a storage row or API payload.

        Accepts:
        - variants under "variants" or "variants_json"; absent means empty
        - variants as a list or as JSON-encoded text
        - the org flag as "is_org_brand" or "isOrgBrand" (0/1 or bool)

        Example:
            >>> entry = BrandCatalogEntry.from_row(
            ...     {"name": "Acme", "variants_json": '["ACME Corp"]', "is_org_brand": 1}
            ... )
            >>> entry.variants
            ['ACME Corp']
            >>> entry.is_org_brand
            True
        """
        variants = row.get("variants")
        if variants is None:
            variants = row.get("variants_json")

        if isinstance(variants, str):
            try:
                variants = json.loads(variants)
            except json.JSONDecodeError:
                logger.warning(
                    f"Ignoring unparseable variants for catalog entry {row.get('name')!r}"
                )
                variants = []

        if variants is None:
            variants = []
        elif not isinstance(variants, (list, tuple)):
            logger.warning(
                f"Ignoring non-list variants for catalog entry {row.get('name')!r}: "
                f"{type(variants).__name__}"
            )
            variants = []

        is_org_brand = row.get("is_org_brand")
        if is_org_brand is None:
            is_org_brand = row.get("isOrgBrand", False)

        return cls(
            name=row.get("name"),
            variants=list(variants),
            is_org_brand=bool(is_org_brand),
        )

    def string_variants(self) -> list[str]:
        """Return only the variants that are usable strings."""
        return [v for v in self.variants if isinstance(v, str) and v.strip()]

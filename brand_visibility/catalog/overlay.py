"""
Per-organization overlay applied to a catalog before detection.

The overlay turns the raw catalog into the two groups the detector scans:

- Org brands, with generated spelling variants (space-less and hyphenated
  forms of multi-word names, bare name of a domain-like name)
- Competitors, minus the names the organization excluded, minus anything
  that collides with an org brand term, plus the configured global
  competitors (with their aliases) that are not already present

Order is stable: org entries in catalog order, then catalog competitors in
catalog order, then global competitors in configuration order.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from brand_visibility.catalog.models import BrandCatalogEntry
from brand_visibility.extractor.mention_detector import (
    DEFAULT_NORMALIZATION,
    comparison_key,
)

logger = logging.getLogger(__name__)

_DOMAIN_SUFFIX_RE = re.compile(r"\.(com|io|org|net|ai|co|app)$", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def expand_org_variants(name: str) -> list[str]:
    """
    Generate common alternate spellings of an org brand name.

    Example:
        >>> expand_org_variants("Sprout Social")
        ['SproutSocial', 'Sprout-Social']
        >>> expand_org_variants("Monday.com")
        ['Monday']
        >>> expand_org_variants("Acme")
        []
    """
    name = name.strip()
    variants = []

    if _WHITESPACE_RE.search(name):
        variants.append(_WHITESPACE_RE.sub("", name))
        variants.append(_WHITESPACE_RE.sub("-", name))

    bare = _DOMAIN_SUFFIX_RE.sub("", name)
    if bare != name and bare:
        variants.append(bare)

    return variants


def _merge_variants(existing: Iterable, extra: Iterable[str]) -> list:
    merged = list(existing)
    seen = {v.casefold() for v in merged if isinstance(v, str)}
    for variant in extra:
        if variant.casefold() not in seen:
            seen.add(variant.casefold())
            merged.append(variant)
    return merged


def apply_overlay(
    catalog: Sequence[BrandCatalogEntry],
    exclusions: Iterable[str] = (),
    global_competitors: Iterable[str | BrandCatalogEntry] = (),
    generate_org_variants: bool = True,
    normalization: str | None = DEFAULT_NORMALIZATION,
) -> tuple[list[BrandCatalogEntry], list[BrandCatalogEntry]]:
    """
    Split a catalog into org and competitor entries ready for detection.

    Args:
        catalog: Raw catalog entries for one organization
        exclusions: Competitor names the organization has dismissed
        global_competitors: Competitors applied to every organization, as bare
            names or entries whose variants are aliases of the name
        generate_org_variants: Add generated spellings to org brands
        normalization: Unicode form used when comparing names

    Returns:
        Tuple of (org_entries, competitor_entries). Input entries are not mutated.

    Example:
        >>> org, comps = apply_overlay(
        ...     [BrandCatalogEntry("Acme", [], True), BrandCatalogEntry("Globex")],
        ...     exclusions=["globex"],
        ...     global_competitors=["Initech"],
        ... )
        >>> [e.name for e in org], [e.name for e in comps]
        (['Acme'], ['Initech'])
    """

    def key(term: str) -> str:
        return comparison_key(term, normalization)

    org_entries: list[BrandCatalogEntry] = []
    for entry in catalog:
        if not entry.is_org_brand:
            continue
        variants = list(entry.variants)
        if generate_org_variants:
            variants = _merge_variants(variants, expand_org_variants(entry.name))
        org_entries.append(BrandCatalogEntry(entry.name, variants, True))

    org_keys = set()
    for entry in org_entries:
        org_keys.add(key(entry.name))
        org_keys.update(key(v) for v in entry.string_variants())

    excluded_keys = {key(name) for name in exclusions if isinstance(name, str)}

    candidates = [entry for entry in catalog if not entry.is_org_brand]
    for competitor in global_competitors:
        if isinstance(competitor, BrandCatalogEntry):
            candidates.append(BrandCatalogEntry(competitor.name, list(competitor.variants)))
        elif isinstance(competitor, str) and competitor.strip():
            candidates.append(BrandCatalogEntry(competitor))

    competitor_entries: list[BrandCatalogEntry] = []
    seen_keys: set[str] = set()
    for entry in candidates:
        name_key = key(entry.name)
        if name_key in seen_keys:
            continue
        if name_key in excluded_keys:
            logger.debug(f"Competitor {entry.name!r} excluded by org overlay")
            continue
        if name_key in org_keys:
            logger.debug(f"Competitor {entry.name!r} collides with an org brand term")
            continue

        variants = [
            v
            for v in entry.variants
            if not (isinstance(v, str) and key(v) in org_keys)
        ]
        seen_keys.add(name_key)
        competitor_entries.append(BrandCatalogEntry(entry.name, variants, False))

    return org_entries, competitor_entries

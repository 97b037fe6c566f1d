"""
Brand mention detection for Brand Visibility.

This module implements word-boundary regex matching to find every offset at
which a tracked brand (canonical name or any variant) appears in an AI model
response, avoiding false positives like "CRM" matching inside "ACRMsystem".

Key features:
- Word-boundary matching on alphanumeric neighbours (not substring containment)
- Case-insensitive detection
- Multiple variants per brand, merged into one offset list
- Unicode normalization (NFKC by default) of text and terms
- All occurrences, not just the first

Security:
- Always uses re.escape() to prevent regex injection

Offsets:
    Positions are character offsets into the normalized text. With NFKC a
    compatibility character such as the "ﬁ" ligature expands to two
    characters, so offsets can drift from the raw input after such a
    character. Ranking only compares offsets against each other, which is
    unaffected.
"""

import logging
import re
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass

from brand_visibility.catalog.models import BrandCatalogEntry
from brand_visibility.exceptions import MentionDetectionError

logger = logging.getLogger(__name__)

# Terms shorter than this never match (one-character "brands" are noise)
DEFAULT_MIN_TERM_LENGTH = 2

DEFAULT_NORMALIZATION = "NFKC"

# A neighbour "blocks" a match when it is a letter or digit. [^\W_] is the
# Unicode-aware spelling of "alphanumeric" (word characters minus underscore).
_BOUNDARY_BEFORE = r"(?<![^\W_])"
_BOUNDARY_AFTER = r"(?![^\W_])"

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class BrandTerm:
    """
    A brand's matchable names.

    Attributes:
        canonical_name: Name reported in results
        variants: Aliases, abbreviations, alternate spellings
        is_org_brand: True for the organization's own brand
    """

    canonical_name: str
    variants: tuple[str, ...] = ()
    is_org_brand: bool = False

    @classmethod
    def from_entry(cls, entry: BrandCatalogEntry) -> "BrandTerm":
        """Build a term from a catalog entry, dropping non-string variants."""
        skipped = len(entry.variants) - len(entry.string_variants())
        if skipped:
            logger.debug(
                f"Skipped {skipped} malformed variant(s) for brand {entry.name!r}"
            )
        return cls(
            canonical_name=entry.name,
            variants=tuple(entry.string_variants()),
            is_org_brand=entry.is_org_brand,
        )

    def terms(self) -> list[str]:
        """
        Return canonical name plus variants, deduplicated case-insensitively.

        Order is preserved (canonical name first).
        """
        seen: set[str] = set()
        result = []
        for term in (self.canonical_name, *self.variants):
            key = term.strip().casefold()
            if not key or key in seen:
                continue
            seen.add(key)
            result.append(term.strip())
        return result


@dataclass
class Mention:
    """
    A single brand occurrence in a response text.

    Attributes:
        brand_name: Canonical name of the matched brand
        position: Character offset into the (normalized) response text
        is_org_brand: True if the brand belongs to the organization
    """

    brand_name: str
    position: int
    is_org_brand: bool

    def __post_init__(self):
        """Validate position is a non-negative offset."""
        if self.position < 0:
            raise ValueError(f"position must be >= 0, got: {self.position}")


def normalize_text(text: str, form: str | None = DEFAULT_NORMALIZATION) -> str:
    """
    Apply Unicode normalization to text.

    Args:
        text: Input text (None is treated as empty)
        form: "NFC", "NFKC", "NFD", "NFKD", or None to leave text untouched
    """
    if not text:
        return ""
    if form is None:
        return text
    return unicodedata.normalize(form, text)


def comparison_key(term: str, form: str | None = DEFAULT_NORMALIZATION) -> str:
    """
    Key for deciding whether two brand names denote the same brand.

    Normalizes Unicode, case-folds, and collapses whitespace.

    Example:
        >>> comparison_key("  Sprout   Social ")
        'sprout social'
    """
    return _WHITESPACE_RE.sub(" ", normalize_text(term, form).casefold()).strip()


def create_brand_pattern(term: str) -> re.Pattern:
    """
    Create a word-boundary regex pattern for a brand term.

    A term matches at offset i when its characters match case-insensitively
    starting at i and neither the character before i nor the character after
    the match is a letter or digit.

    - "CRM" matches in "Our CRM platform"
    - "CRM" does NOT match in "ACRMx"
    - "Monday.com" matches literally (the dot is escaped)

    Lookarounds are used instead of \\b so that terms starting or ending in
    punctuation ("C++", ".NET") still get boundaries on the outer side.

    Args:
        term: Brand name or variant

    Returns:
        Compiled case-insensitive pattern

    Raises:
        MentionDetectionError: If term is empty or whitespace
    """
    if not term or term.isspace():
        raise MentionDetectionError("Brand term cannot be empty or whitespace")

    # SECURITY: Escape special regex characters before adding boundaries
    escaped = re.escape(term.strip())

    return re.compile(_BOUNDARY_BEFORE + escaped + _BOUNDARY_AFTER, re.IGNORECASE)


def find_term_positions(
    text: str,
    term: str,
    min_term_length: int = DEFAULT_MIN_TERM_LENGTH,
) -> list[int]:
    """
    Find every offset at which term occurs in text as a whole word.

    Args:
        text: Text to scan (already normalized by the caller)
        term: Brand name or variant
        min_term_length: Terms shorter than this are never matched

    Returns:
        Ascending list of match start offsets (empty if none)

    Example:
        >>> find_term_positions("CRM vs crm vs ACRM", "CRM")
        [0, 7]
        >>> find_term_positions("a b c", "a")
        []
    """
    if not text or not isinstance(term, str) or len(term.strip()) < min_term_length:
        return []

    pattern = create_brand_pattern(term)

    positions = []
    pos = 0
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            break
        positions.append(match.start())
        # Always advance, even on an empty match
        pos = match.end() if match.end() > match.start() else match.start() + 1

    return positions


def detect_mentions(
    text: str,
    brands: Sequence[BrandTerm],
    min_term_length: int = DEFAULT_MIN_TERM_LENGTH,
    normalization: str | None = DEFAULT_NORMALIZATION,
) -> dict[str, list[int]]:
    """
    Detect all mentions of each brand in text.

    Every term of a brand (canonical name and variants) is scanned
    independently; offsets from different terms of the same brand are merged
    into that brand's list. Brands sharing a canonical name are merged too.

    Args:
        text: AI model response text
        brands: Brands to look for
        min_term_length: Terms shorter than this are skipped
        normalization: Unicode normalization form applied to text and terms

    Returns:
        Mapping canonical name -> ascending offsets, in the order brands were
        given. Brands with no match are omitted.

    Example:
        >>> detect_mentions(
        ...     "Acme and ACME Corp beat Globex",
        ...     [BrandTerm("Acme", ("ACME Corp",), True), BrandTerm("Globex")],
        ... )
        {'Acme': [0, 9, 9], 'Globex': [24]}

    Notes:
        - Duplicated offsets are kept: "Acme" and "ACME Corp" both match at 9
        - Empty text returns an empty mapping
        - Malformed terms are skipped individually
    """
    normalized_text = normalize_text(text, normalization)
    if not normalized_text.strip():
        return {}

    found: dict[str, list[int]] = {}

    for brand in brands:
        offsets: list[int] = []
        for term in brand.terms():
            normalized_term = normalize_text(term, normalization)
            try:
                offsets.extend(
                    find_term_positions(normalized_text, normalized_term, min_term_length)
                )
            except (MentionDetectionError, re.error) as e:
                logger.debug(f"Skipping term {term!r} of brand {brand.canonical_name!r}: {e}")
                continue

        if offsets:
            found.setdefault(brand.canonical_name, []).extend(offsets)

    for offsets in found.values():
        offsets.sort()

    return found

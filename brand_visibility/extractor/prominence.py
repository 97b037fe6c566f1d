"""
Prominence ranking for Brand Visibility.

Merges the detector's per-brand offsets into one timeline of first mentions
and works out where the organization's brand lands in it.

Ranking rule:
    Each distinct brand is represented by its earliest offset. Those first
    mentions are sorted ascending by (offset, 0 for org brands / 1 for
    competitors), so an org brand wins a tie at the same offset. The org
    brand's prominence is the 1-based index of the earliest org entry.

Example:
    >>> result = rank_prominence({"Acme": [30]}, {"Globex": [4], "Initech": [50]})
    >>> result.org_brand_prominence
    2
    >>> result.competitors
    ['Globex', 'Initech']
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from brand_visibility.extractor.mention_detector import Mention

DEFAULT_MAX_BRANDS = 3
DEFAULT_MAX_COMPETITORS = 10


@dataclass
class ProminenceResult:
    """
    Outcome of ranking one response.

    Attributes:
        org_brand_present: True if any org brand offset exists
        org_brand_prominence: 1-based rank of the org brand's first mention, None if absent
        brands: Org brand names found, catalog order, capped for display
        competitors: Competitor names found, catalog order, capped for display
        competitor_count: Number of distinct competitors found (uncapped)
        first_mentions: One Mention per found brand, in ranking order
    """

    org_brand_present: bool
    org_brand_prominence: int | None
    brands: list[str] = field(default_factory=list)
    competitors: list[str] = field(default_factory=list)
    competitor_count: int = 0
    first_mentions: list[Mention] = field(default_factory=list)

    def __post_init__(self):
        """Validate presence and prominence agree."""
        if self.org_brand_present != (self.org_brand_prominence is not None):
            raise ValueError(
                "org_brand_prominence must be set if and only if org_brand_present "
                f"(present={self.org_brand_present}, prominence={self.org_brand_prominence})"
            )
        if self.org_brand_prominence is not None and self.org_brand_prominence < 1:
            raise ValueError(
                f"org_brand_prominence must be >= 1, got: {self.org_brand_prominence}"
            )


def _ranking_key(mention: Mention) -> tuple[int, int]:
    # Org brands sort ahead of competitors at the same offset
    return (mention.position, 0 if mention.is_org_brand else 1)


def build_first_mentions(
    org_offsets: Mapping[str, Sequence[int]],
    competitor_offsets: Mapping[str, Sequence[int]],
) -> list[Mention]:
    """
    Reduce each brand to its earliest mention and order them.

    Brands with an empty offset list are ignored.
    """
    first_mentions = [
        Mention(brand_name=name, position=min(offsets), is_org_brand=True)
        for name, offsets in org_offsets.items()
        if offsets
    ]
    first_mentions.extend(
        Mention(brand_name=name, position=min(offsets), is_org_brand=False)
        for name, offsets in competitor_offsets.items()
        if offsets
    )
    first_mentions.sort(key=_ranking_key)
    return first_mentions


def rank_prominence(
    org_offsets: Mapping[str, Sequence[int]],
    competitor_offsets: Mapping[str, Sequence[int]],
    max_brands: int = DEFAULT_MAX_BRANDS,
    max_competitors: int = DEFAULT_MAX_COMPETITORS,
) -> ProminenceResult:
    """
    Rank the org brand among the first mentions of all tracked brands.

    Args:
        org_offsets: Org brand name -> offsets (from detect_mentions)
        competitor_offsets: Competitor name -> offsets (from detect_mentions)
        max_brands: Cap on the reported org brand names
        max_competitors: Cap on the reported competitor names

    Returns:
        ProminenceResult. Name lists follow the mapping order (catalog scan
        order), not offset order.
    """
    first_mentions = build_first_mentions(org_offsets, competitor_offsets)

    prominence = None
    for index, mention in enumerate(first_mentions, start=1):
        if mention.is_org_brand:
            prominence = index
            break

    found_brands = [name for name, offsets in org_offsets.items() if offsets]
    found_competitors = [name for name, offsets in competitor_offsets.items() if offsets]

    return ProminenceResult(
        org_brand_present=prominence is not None,
        org_brand_prominence=prominence,
        brands=found_brands[:max_brands],
        competitors=found_competitors[:max_competitors],
        competitor_count=len(found_competitors),
        first_mentions=first_mentions,
    )

"""
Extractor module for detecting brand mentions and ranking them.

Public API:
    - BrandTerm: A brand's matchable names
    - Mention: One brand occurrence in a response
    - detect_mentions: Per-brand offsets using word-boundary regex
    - create_brand_pattern: Create regex pattern for brand matching
    - rank_prominence: Org brand rank among first mentions
"""

from brand_visibility.extractor.mention_detector import (
    BrandTerm,
    Mention,
    create_brand_pattern,
    detect_mentions,
)
from brand_visibility.extractor.prominence import ProminenceResult, rank_prominence

__all__ = [
    "BrandTerm",
    "Mention",
    "ProminenceResult",
    "create_brand_pattern",
    "detect_mentions",
    "rank_prominence",
]

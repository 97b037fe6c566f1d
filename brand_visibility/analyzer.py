"""
Brand analysis entry point for Brand Visibility.

Runs detector -> ranker -> scorer over one AI model response and shapes the
result. analyze_response() is the function callers (ingestion pipelines,
the CLI) use: it fetches the organization's catalog and never raises.

Outcome contract:
    Every call returns an AnalysisOutcome whose .analysis is a valid
    BrandAnalysis. When the catalog is empty, the lookup fails, or anything
    unexpected happens, .status is "default", .reason says why, and
    .analysis is the safe default:

        {score: 1, orgBrandPresent: false, orgBrandProminence: null,
         brands: [], competitors: []}

Example:
    >>> store = InMemoryCatalogStore({"acme": [
    ...     {"name": "Acme", "is_org_brand": True},
    ...     {"name": "Globex"},
    ...     {"name": "Initech"},
    ... ]})
    >>> outcome = analyze_response(
    ...     "acme", "Acme is the best tool, better than Globex and Initech.", store
    ... )
    >>> outcome.analysis.to_dict()
    {'score': 8.6, 'orgBrandPresent': True, 'orgBrandProminence': 1, 'brands': ['Acme'], 'competitors': ['Globex', 'Initech']}
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from brand_visibility.catalog.models import BrandCatalogEntry
from brand_visibility.catalog.overlay import apply_overlay
from brand_visibility.catalog.store import CatalogStore
from brand_visibility.config.schema import AnalyzerSettings
from brand_visibility.exceptions import CatalogLookupError
from brand_visibility.extractor.mention_detector import BrandTerm, detect_mentions
from brand_visibility.extractor.prominence import rank_prominence
from brand_visibility.scoring import MAX_SCORE, MIN_SCORE, score_visibility
from brand_visibility.utils.logging import log_with_context

logger = logging.getLogger(__name__)

SAFE_DEFAULT_SCORE = 1.0

DefaultReason = Literal["empty_catalog", "lookup_failed", "analysis_failed"]


@dataclass(frozen=True)
class BrandAnalysis:
    """
    Structured visibility analysis of one response.

    Attributes:
        score: Visibility score in [0, 10]
        org_brand_present: True if the org brand was mentioned
        org_brand_prominence: 1-based rank of the org brand's first mention, None if absent
        brands: Org brand names found (at most 3 by default)
        competitors: Competitor names found (at most 10 by default)
    """

    score: float
    org_brand_present: bool
    org_brand_prominence: int | None
    brands: list[str] = field(default_factory=list)
    competitors: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate score bounds and presence/prominence coupling."""
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(f"score must be in [0, 10], got: {self.score}")
        if self.org_brand_present != (self.org_brand_prominence is not None):
            raise ValueError(
                "org_brand_prominence must be set if and only if org_brand_present"
            )

    @classmethod
    def safe_default(cls) -> "BrandAnalysis":
        """Neutral-low result used whenever analysis cannot run."""
        return cls(
            score=SAFE_DEFAULT_SCORE,
            org_brand_present=False,
            org_brand_prominence=None,
            brands=[],
            competitors=[],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys stored by callers."""
        return {
            "score": self.score,
            "orgBrandPresent": self.org_brand_present,
            "orgBrandProminence": self.org_brand_prominence,
            "brands": list(self.brands),
            "competitors": list(self.competitors),
        }


@dataclass
class AnalysisOutcome:
    """
    Tagged result of an analysis call.

    Attributes:
        status: "analyzed" when the pipeline ran, "default" otherwise
        analysis: Always a valid BrandAnalysis
        reason: Why the default was returned (None when analyzed)
        mention_counts: Brand name -> number of matches (empty for defaults)
    """

    status: Literal["analyzed", "default"]
    analysis: BrandAnalysis
    reason: DefaultReason | None = None
    mention_counts: dict[str, int] = field(default_factory=dict)

    @property
    def is_default(self) -> bool:
        return self.status == "default"

    @classmethod
    def default(cls, reason: DefaultReason) -> "AnalysisOutcome":
        return cls(status="default", analysis=BrandAnalysis.safe_default(), reason=reason)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "reason": self.reason,
            "analysis": self.analysis.to_dict(),
            "mentionCounts": dict(self.mention_counts),
        }


def analyze_text(
    response_text: str,
    catalog: Sequence[BrandCatalogEntry],
    settings: AnalyzerSettings | None = None,
    exclusions: Iterable[str] = (),
) -> AnalysisOutcome:
    """
    Run detection, ranking and scoring over one response.

    This is the pure pipeline: it performs no I/O and raises on programming
    errors. Use analyze_response() when a safe value is required.

    Args:
        response_text: Raw AI model output (may be empty)
        catalog: Catalog entries for the organization
        settings: Detection/scoring settings and global competitors
        exclusions: Competitor names the organization excluded

    Returns:
        AnalysisOutcome with status "analyzed", or the "empty_catalog" default
    """
    settings = settings or AnalyzerSettings()
    detection = settings.detection

    if not catalog:
        return AnalysisOutcome.default("empty_catalog")

    org_entries, competitor_entries = apply_overlay(
        catalog,
        exclusions=exclusions,
        global_competitors=settings.global_competitor_entries(),
        generate_org_variants=detection.generate_org_variants,
        normalization=detection.unicode_normalization,
    )

    text = response_text or ""
    org_offsets = detect_mentions(
        text,
        [BrandTerm.from_entry(e) for e in org_entries],
        min_term_length=detection.min_term_length,
        normalization=detection.unicode_normalization,
    )
    competitor_offsets = detect_mentions(
        text,
        [BrandTerm.from_entry(e) for e in competitor_entries],
        min_term_length=detection.min_term_length,
        normalization=detection.unicode_normalization,
    )

    ranking = rank_prominence(
        org_offsets,
        competitor_offsets,
        max_brands=detection.max_brands,
        max_competitors=detection.max_competitors,
    )

    score = score_visibility(
        ranking.org_brand_present,
        ranking.org_brand_prominence,
        ranking.competitor_count,
        settings.scoring,
    )

    mention_counts = {name: len(offsets) for name, offsets in org_offsets.items()}
    mention_counts.update(
        {name: len(offsets) for name, offsets in competitor_offsets.items()}
    )

    logger.debug(
        f"Analyzed response ({len(text)} chars): "
        f"org_present={ranking.org_brand_present}, "
        f"prominence={ranking.org_brand_prominence}, "
        f"competitors={ranking.competitor_count}, score={score}"
    )

    return AnalysisOutcome(
        status="analyzed",
        analysis=BrandAnalysis(
            score=score,
            org_brand_present=ranking.org_brand_present,
            org_brand_prominence=ranking.org_brand_prominence,
            brands=ranking.brands,
            competitors=ranking.competitors,
        ),
        mention_counts=mention_counts,
    )


def analyze_response(
    org_id: str,
    response_text: str,
    store: CatalogStore,
    settings: AnalyzerSettings | None = None,
) -> AnalysisOutcome:
    """
    Analyze one response for an organization. Never raises.

    Fetches the organization's catalog and exclusions from store, then runs
    analyze_text(). Any failure yields the safe default with a logged
    diagnostic, so a broken catalog cannot block the caller's pipeline.
    Calls are independent and hold no shared state; callers may run them
    concurrently.

    Args:
        org_id: Opaque organization identifier passed to the store
        response_text: Raw AI model output (may be empty or None)
        store: Catalog collaborator
        settings: Detection/scoring settings and global competitors

    Returns:
        AnalysisOutcome (status "analyzed" or "default")
    """
    try:
        catalog = store.fetch_catalog(org_id)
        exclusions = store.fetch_exclusions(org_id)
    except CatalogLookupError as e:
        log_with_context(
            logger,
            logging.WARNING,
            "Catalog lookup failed, returning safe default",
            context={"error": str(e)},
            org_id=org_id,
        )
        return AnalysisOutcome.default("lookup_failed")
    except Exception as e:
        log_with_context(
            logger,
            logging.ERROR,
            "Unexpected error during catalog lookup, returning safe default",
            context={"error": str(e), "error_type": type(e).__name__},
            org_id=org_id,
            exc_info=True,
        )
        return AnalysisOutcome.default("lookup_failed")

    if not catalog:
        log_with_context(
            logger,
            logging.DEBUG,
            "No catalog entries for organization, returning safe default",
            org_id=org_id,
        )
        return AnalysisOutcome.default("empty_catalog")

    try:
        return analyze_text(response_text, catalog, settings, exclusions)
    except Exception as e:
        log_with_context(
            logger,
            logging.ERROR,
            "Brand analysis failed, returning safe default",
            context={
                "error": str(e),
                "error_type": type(e).__name__,
                "response_length": len(response_text) if isinstance(response_text, str) else 0,
                "catalog_size": len(catalog),
            },
            org_id=org_id,
            exc_info=True,
        )
        return AnalysisOutcome.default("analysis_failed")

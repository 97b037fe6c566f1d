"""
Tests for analyzer module.

Tests cover:
- End-to-end scoring of typical responses
- Safe default for empty catalogs, failing lookups and bad input
- Org overlay (exclusions, global competitors, generated variants, collisions)
- Result shape and validation
"""

import logging

import pytest

from brand_visibility.analyzer import (
    AnalysisOutcome,
    BrandAnalysis,
    analyze_response,
    analyze_text,
)
from brand_visibility.catalog.models import BrandCatalogEntry
from brand_visibility.catalog.store import InMemoryCatalogStore
from brand_visibility.config.schema import (
    AnalyzerSettings,
    DetectionSettings,
    ScoringSettings,
)
from brand_visibility.exceptions import CatalogLookupError

SAFE_DEFAULT = {
    "score": 1.0,
    "orgBrandPresent": False,
    "orgBrandProminence": None,
    "brands": [],
    "competitors": [],
}

NATO = [
    "Alpha",
    "Bravo",
    "Charlie",
    "Delta",
    "Echo",
    "Foxtrot",
    "Golf",
    "Hotel",
    "India",
    "Juliett",
    "Kilo",
    "Lima",
    "Mike",
    "November",
    "Oscar",
]


@pytest.fixture
def acme_catalog():
    return [
        BrandCatalogEntry("Acme", [], True),
        BrandCatalogEntry("Globex"),
        BrandCatalogEntry("Initech"),
    ]


@pytest.fixture
def acme_store():
    return InMemoryCatalogStore(
        {
            "acme": [
                {"name": "Acme", "is_org_brand": True},
                {"name": "Globex"},
                {"name": "Initech"},
            ]
        }
    )


class FailingStore:
    """Store whose lookups always raise the given exception."""

    def __init__(self, exc):
        self.exc = exc

    def fetch_catalog(self, org_id):
        raise self.exc

    def fetch_exclusions(self, org_id):
        return []


class TestAnalyzeText:
    def test_org_brand_mentioned_first(self, acme_catalog):
        outcome = analyze_text(
            "Acme is the best tool, better than Globex and Initech.", acme_catalog
        )

        assert outcome.status == "analyzed"
        assert outcome.analysis.to_dict() == {
            "score": 8.6,
            "orgBrandPresent": True,
            "orgBrandProminence": 1,
            "brands": ["Acme"],
            "competitors": ["Globex", "Initech"],
        }

    def test_org_brand_mentioned_second(self, acme_catalog):
        outcome = analyze_text("Globex leads, Acme follows, then Initech.", acme_catalog)

        assert outcome.analysis.org_brand_prominence == 2
        # 6 + 2 - 0.4
        assert outcome.analysis.score == 7.6

    def test_org_brand_absent_with_competitors(self, acme_catalog):
        outcome = analyze_text("Globex and Initech are popular.", acme_catalog)

        assert outcome.analysis.to_dict() == {
            "score": 0.0,
            "orgBrandPresent": False,
            "orgBrandProminence": None,
            "brands": [],
            "competitors": ["Globex", "Initech"],
        }

    def test_no_brands_mentioned_is_neutral(self, acme_catalog):
        outcome = analyze_text("Here are some general tips for productivity.", acme_catalog)

        assert outcome.status == "analyzed"
        assert outcome.analysis.score == 2.0
        assert outcome.analysis.org_brand_present is False

    def test_empty_catalog_returns_safe_default(self):
        outcome = analyze_text("Acme is great", [])

        assert outcome.is_default
        assert outcome.reason == "empty_catalog"
        assert outcome.analysis.to_dict() == SAFE_DEFAULT

    def test_empty_text(self, acme_catalog):
        outcome = analyze_text("", acme_catalog)

        assert outcome.analysis.score == 2.0
        assert outcome.analysis.brands == []

    def test_substring_does_not_count(self):
        catalog = [BrandCatalogEntry("Acme", [], True), BrandCatalogEntry("CRM")]

        outcome = analyze_text("Acme replaced our ACRMsystem.", catalog)

        assert outcome.analysis.competitors == []
        assert outcome.analysis.score == 9.0

    def test_competitor_cap_and_penalty_use_full_count(self):
        catalog = [BrandCatalogEntry(name) for name in NATO]

        outcome = analyze_text(" ".join(NATO), catalog)

        assert outcome.analysis.competitors == NATO[:10]
        assert outcome.analysis.score == 0.0

    def test_competitor_cap_with_org_brand_present(self):
        catalog = [BrandCatalogEntry("Acme", [], True)]
        catalog += [BrandCatalogEntry(name) for name in NATO]

        outcome = analyze_text("Acme " + " ".join(NATO), catalog)

        assert len(outcome.analysis.competitors) == 10
        # 15 competitors: penalty capped at 2
        assert outcome.analysis.score == 7.0

    def test_brand_cap(self):
        catalog = [BrandCatalogEntry(f"Acme{name}", [], True) for name in NATO[:5]]

        outcome = analyze_text(" ".join(f"Acme{name}" for name in NATO[:5]), catalog)

        assert outcome.analysis.brands == ["AcmeAlpha", "AcmeBravo", "AcmeCharlie"]

    def test_brand_cap_with_one_brand_matched_by_many_variants(self):
        catalog = [
            BrandCatalogEntry("Acme", ["ACME Corp", "Acme Inc", "acme.io", "AcmeSoft"], True)
        ]

        outcome = analyze_text("Acme, ACME Corp, Acme Inc, acme.io and AcmeSoft.", catalog)

        assert outcome.analysis.brands == ["Acme"]
        assert len(outcome.analysis.brands) <= 3
        assert outcome.analysis.org_brand_prominence == 1

    def test_variants_detected(self):
        catalog = [BrandCatalogEntry("Acme", ["ACME Corp"], True), BrandCatalogEntry("Globex")]

        outcome = analyze_text("Globex is fine, but acme corp wins.", catalog)

        assert outcome.analysis.brands == ["Acme"]
        assert outcome.analysis.org_brand_prominence == 2

    def test_malformed_variants_ignored(self):
        catalog = [BrandCatalogEntry("Acme", [42, None, "", "ACME Corp"], True)]

        outcome = analyze_text("ACME Corp is here", catalog)

        assert outcome.analysis.org_brand_present is True

    def test_generated_org_variant(self):
        catalog = [BrandCatalogEntry("Sprout Social", [], True), BrandCatalogEntry("Hootsuite")]

        outcome = analyze_text("SproutSocial beats Hootsuite.", catalog)

        assert outcome.analysis.brands == ["Sprout Social"]
        assert outcome.analysis.score == 8.8

    def test_generated_variants_can_be_disabled(self):
        catalog = [BrandCatalogEntry("Sprout Social", [], True)]
        settings = AnalyzerSettings(detection=DetectionSettings(generate_org_variants=False))

        outcome = analyze_text("SproutSocial is great.", catalog, settings)

        assert outcome.analysis.org_brand_present is False

    def test_exclusions_remove_competitors(self, acme_catalog):
        outcome = analyze_text(
            "Acme is the best tool, better than Globex and Initech.",
            acme_catalog,
            exclusions=["globex"],
        )

        assert outcome.analysis.competitors == ["Initech"]
        assert outcome.analysis.score == 8.8

    def test_global_competitors_added(self, acme_catalog):
        settings = AnalyzerSettings(global_competitors=["Salesforce"])

        outcome = analyze_text("Salesforce or Acme?", acme_catalog, settings)

        assert outcome.analysis.competitors == ["Salesforce"]
        assert outcome.analysis.org_brand_prominence == 2

    def test_global_competitor_alias_reported_under_name(self, acme_catalog):
        settings = AnalyzerSettings(
            global_competitors=[{"name": "Salesforce", "variants": ["SFDC", "Sales Force"]}]
        )

        outcome = analyze_text("Most teams still pick SFDC.", acme_catalog, settings)

        assert outcome.analysis.competitors == ["Salesforce"]
        assert outcome.analysis.score == 0.0
        assert outcome.mention_counts == {"Salesforce": 1}

    def test_global_competitor_alias_colliding_with_org_term_ignored(self):
        catalog = [BrandCatalogEntry("Acme", ["Acme Cloud"], True)]
        settings = AnalyzerSettings(
            global_competitors=[{"name": "Salesforce", "variants": ["acme cloud", "SFDC"]}]
        )

        outcome = analyze_text("Acme Cloud is ours.", catalog, settings)

        assert outcome.analysis.competitors == []
        assert outcome.analysis.score == 9.0

    def test_competitor_colliding_with_org_brand_dropped(self):
        catalog = [BrandCatalogEntry("Acme", [], True), BrandCatalogEntry("ACME")]

        outcome = analyze_text("Acme rocks", catalog)

        assert outcome.analysis.competitors == []
        assert outcome.analysis.score == 9.0

    def test_only_competitors_in_catalog(self):
        outcome = analyze_text("Globex is here", [BrandCatalogEntry("Globex")])

        assert outcome.status == "analyzed"
        assert outcome.analysis.score == 0.0

    def test_stepped_scoring(self, acme_catalog):
        settings = AnalyzerSettings(
            scoring=ScoringSettings(penalty="stepped", top_rank_bonus=2)
        )

        outcome = analyze_text(
            "Acme is the best tool, better than Globex and Initech.", acme_catalog, settings
        )

        assert outcome.analysis.score == 8.0

    def test_mention_counts(self, acme_catalog):
        outcome = analyze_text("Acme, Acme and Globex", acme_catalog)

        assert outcome.mention_counts == {"Acme": 2, "Globex": 1}

    def test_idempotent(self, acme_catalog):
        text = "Globex leads, Acme follows, then Initech."

        first = analyze_text(text, acme_catalog)
        second = analyze_text(text, acme_catalog)

        assert first.to_dict() == second.to_dict()

    def test_catalog_not_mutated(self):
        entry = BrandCatalogEntry("Sprout Social", [], True)

        analyze_text("SproutSocial", [entry])

        assert entry.variants == []


class TestAnalyzeResponse:
    def test_analyzes_with_store(self, acme_store):
        outcome = analyze_response(
            "acme", "Acme is the best tool, better than Globex and Initech.", acme_store
        )

        assert outcome.status == "analyzed"
        assert outcome.analysis.score == 8.6

    def test_store_exclusions_applied(self):
        store = InMemoryCatalogStore(
            {"acme": [{"name": "Acme", "is_org_brand": True}, {"name": "Globex"}]},
            exclusions={"acme": ["Globex"]},
        )

        outcome = analyze_response("acme", "Globex and Acme", store)

        assert outcome.analysis.competitors == []
        assert outcome.analysis.org_brand_prominence == 1

    def test_unknown_org_returns_safe_default(self, acme_store):
        outcome = analyze_response("nobody", "Acme is great", acme_store)

        assert outcome.is_default
        assert outcome.reason == "empty_catalog"
        assert outcome.analysis.to_dict() == SAFE_DEFAULT

    def test_lookup_error_returns_safe_default(self, caplog):
        store = FailingStore(CatalogLookupError("database is locked"))

        with caplog.at_level(logging.WARNING):
            outcome = analyze_response("acme", "Acme", store)

        assert outcome.reason == "lookup_failed"
        assert outcome.analysis.to_dict() == SAFE_DEFAULT
        assert "Catalog lookup failed" in caplog.text

    def test_unexpected_lookup_error_returns_safe_default(self, caplog):
        store = FailingStore(RuntimeError("boom"))

        with caplog.at_level(logging.ERROR):
            outcome = analyze_response("acme", "Acme", store)

        assert outcome.reason == "lookup_failed"
        assert "Unexpected error" in caplog.text

    def test_non_string_text_returns_safe_default(self, acme_store):
        outcome = analyze_response("acme", 42, acme_store)

        assert outcome.reason == "analysis_failed"
        assert outcome.analysis.to_dict() == SAFE_DEFAULT

    def test_none_text_is_empty_response(self, acme_store):
        outcome = analyze_response("acme", None, acme_store)

        assert outcome.status == "analyzed"
        assert outcome.analysis.score == 2.0

    def test_settings_passed_through(self, acme_store):
        settings = AnalyzerSettings(global_competitors=["Hooli"])

        outcome = analyze_response("acme", "Hooli beats Acme", acme_store, settings)

        assert outcome.analysis.competitors == ["Hooli"]


class TestBrandAnalysis:
    def test_safe_default(self):
        assert BrandAnalysis.safe_default().to_dict() == SAFE_DEFAULT

    def test_score_out_of_range_raises(self):
        with pytest.raises(ValueError, match="score must be"):
            BrandAnalysis(score=11, org_brand_present=False, org_brand_prominence=None)

    def test_prominence_coupling_enforced(self):
        with pytest.raises(ValueError, match="if and only if"):
            BrandAnalysis(score=5, org_brand_present=True, org_brand_prominence=None)

    def test_outcome_to_dict(self):
        outcome = AnalysisOutcome.default("lookup_failed")

        assert outcome.to_dict() == {
            "status": "default",
            "reason": "lookup_failed",
            "analysis": SAFE_DEFAULT,
            "mentionCounts": {},
        }

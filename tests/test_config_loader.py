"""
Tests for config.loader and config.schema modules.

Tests cover:
- Loading valid YAML configuration
- File errors (missing, empty, invalid YAML, non-mapping root)
- Pydantic validation errors and their formatting
- Building a catalog store from the organizations section
"""

import pytest
import yaml
from pydantic import ValidationError

from brand_visibility.config.loader import build_catalog_store, load_config
from brand_visibility.config.schema import (
    AnalyzerConfig,
    DetectionSettings,
    OrganizationCatalog,
    ScoringSettings,
)
from brand_visibility.exceptions import ConfigFileNotFoundError, ConfigValidationError


@pytest.fixture
def config_data():
    return {
        "scoring": {"penalty": "graduated", "top_rank_bonus": 3},
        "global_competitors": ["Salesforce", "  ", "Marketo"],
        "organizations": {
            "acme": {
                "brands": [{"name": "Acme", "variants": ["ACME Corp", ""]}],
                "competitors": ["Globex", {"name": "Initech", "variants": ["Initech Software"]}],
                "exclusions": ["Salesforce"],
            }
        },
    }


@pytest.fixture
def config_file(tmp_path, config_data):
    path = tmp_path / "brand_visibility.config.yaml"
    path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_loads_valid_config(self, config_file):
        config = load_config(config_file)

        assert isinstance(config, AnalyzerConfig)
        assert [b.name for b in config.global_competitors] == ["Salesforce", "Marketo"]
        acme = config.organizations["acme"]
        assert acme.brands[0].variants == ["ACME Corp"]
        assert [c.name for c in acme.competitors] == ["Globex", "Initech"]
        assert acme.exclusions == ["Salesforce"]

    def test_accepts_string_path(self, config_file):
        assert load_config(str(config_file)).scoring.penalty == "graduated"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("organizations: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="Invalid YAML syntax"):
            load_config(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="empty"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="must be a mapping"):
            load_config(path)

    def test_validation_error_names_field(self, tmp_path, config_data):
        config_data["scoring"]["penalty"] = "exponential"
        path = tmp_path / "invalid.yaml"
        path.write_text(yaml.safe_dump(config_data), encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        assert "Configuration validation failed" in str(exc_info.value)
        assert "scoring.penalty" in str(exc_info.value)

    def test_minimal_config_uses_defaults(self, tmp_path):
        path = tmp_path / "minimal.yaml"
        path.write_text("organizations: {}\n", encoding="utf-8")

        config = load_config(path)

        assert config.detection.min_term_length == 2
        assert config.detection.unicode_normalization == "NFKC"
        assert config.scoring.penalty == "graduated"
        assert config.scoring.top_rank_bonus == 3
        assert config.scoring.low_rank_cutoff == 6


class TestSchema:
    def test_brand_and_competitor_overlap_rejected(self):
        with pytest.raises(ValidationError, match="both brand and competitor: acme"):
            OrganizationCatalog(brands=["Acme"], competitors=["acme"])

    def test_empty_brand_name_rejected(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            OrganizationCatalog(brands=["  "])

    def test_empty_org_id_rejected(self):
        with pytest.raises(ValidationError, match="Organization id"):
            AnalyzerConfig(organizations={" ": {}})

    @pytest.mark.parametrize("bonus", [1, 5])
    def test_top_rank_bonus_range(self, bonus):
        with pytest.raises(ValidationError, match="between 2 and 4"):
            ScoringSettings(top_rank_bonus=bonus)

    def test_low_rank_cutoff_minimum(self):
        with pytest.raises(ValidationError):
            ScoringSettings(low_rank_cutoff=3)

    def test_decimals_follow_penalty(self):
        assert ScoringSettings().decimals == 1
        assert ScoringSettings(penalty="stepped").decimals == 0

    def test_detection_limits_positive(self):
        with pytest.raises(ValidationError):
            DetectionSettings(max_competitors=0)

    @pytest.mark.parametrize("length", [0, 1])
    def test_min_term_length_below_two_rejected(self, length):
        with pytest.raises(ValidationError, match="min_term_length must be >= 2"):
            DetectionSettings(min_term_length=length)

    def test_min_term_length_can_be_raised(self):
        assert DetectionSettings(min_term_length=3).min_term_length == 3

    def test_global_competitor_aliases(self):
        config = AnalyzerConfig(
            global_competitors=[
                {"name": "Salesforce", "variants": ["SFDC", " ", "Sales Force"]},
                "Marketo",
            ]
        )

        entries = config.analyzer_settings().global_competitor_entries()

        assert [(e.name, e.variants) for e in entries] == [
            ("Salesforce", ["SFDC", "Sales Force"]),
            ("Marketo", []),
        ]
        assert all(e.is_org_brand is False for e in entries)

    def test_normalization_can_be_disabled(self):
        assert DetectionSettings(unicode_normalization=None).unicode_normalization is None

    def test_entries_org_brands_first(self):
        org = OrganizationCatalog(competitors=["Globex"], brands=["Acme"])

        entries = org.entries()

        assert [(e.name, e.is_org_brand) for e in entries] == [
            ("Acme", True),
            ("Globex", False),
        ]

    def test_analyzer_settings(self, config_file):
        settings = load_config(config_file).analyzer_settings()

        assert [b.name for b in settings.global_competitors] == ["Salesforce", "Marketo"]
        assert settings.scoring.top_rank_bonus == 3


class TestBuildCatalogStore:
    def test_store_from_config(self, config_file):
        store = build_catalog_store(load_config(config_file))

        catalog = store.fetch_catalog("acme")

        assert [e.name for e in catalog] == ["Acme", "Globex", "Initech"]
        assert catalog[2].variants == ["Initech Software"]
        assert store.fetch_exclusions("acme") == ["Salesforce"]

    def test_unknown_org(self, config_file):
        store = build_catalog_store(load_config(config_file))

        assert store.fetch_catalog("other") == []

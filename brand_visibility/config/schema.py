"""
Configuration schema models for Brand Visibility.

This module defines Pydantic models for validating and parsing the
brand_visibility.config.yaml file. All models use Python 3.12+ type hints
and Pydantic v2 field validators.

Models:
    DetectionSettings: Matching rules (term length, Unicode form, display caps)
    ScoringSettings: Visibility score rule table (penalty shape, bonuses)
    AnalyzerSettings: Everything the analyzer needs besides the catalog
    CatalogBrand: One brand with its variants
    OrganizationCatalog: File-backed catalog for one organization
    AnalyzerConfig: Root configuration model (validates entire YAML)

Example YAML:
    detection:
      unicode_normalization: NFKC
    scoring:
      penalty: graduated
      top_rank_bonus: 3
    global_competitors:
      - name: Salesforce
        variants: ["SFDC", "Sales Force"]
      - Monday.com
    organizations:
      acme:
        brands:
          - name: Acme
            variants: ["ACME Corp", "acme.io"]
        competitors:
          - Globex
          - Initech
        exclusions:
          - Salesforce
"""

from typing import Any, Literal

from pydantic import BaseModel, field_validator, model_validator

from brand_visibility.catalog.models import BrandCatalogEntry


class DetectionSettings(BaseModel):
    """
    Brand matching settings.

    Attributes:
        min_term_length: Terms shorter than this never match (default: 2)
        unicode_normalization: Unicode form applied to text and terms, or None
        generate_org_variants: Add space-less/hyphenated/bare-domain org spellings
        max_brands: Cap on org brand names reported in results (default: 3)
        max_competitors: Cap on competitor names reported in results (default: 10)
    """

    min_term_length: int = 2
    unicode_normalization: Literal["NFC", "NFKC", "NFD", "NFKD"] | None = "NFKC"
    generate_org_variants: bool = True
    max_brands: int = 3
    max_competitors: int = 10

    @field_validator("min_term_length")
    @classmethod
    def validate_min_term_length(cls, v: int) -> int:
        """One-character brand terms are never matched."""
        if v < 2:
            raise ValueError(f"min_term_length must be >= 2, got: {v}")
        return v

    @field_validator("max_brands", "max_competitors")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate limits are at least 1."""
        if v < 1:
            raise ValueError(f"Value must be >= 1, got: {v}")
        return v


class ScoringSettings(BaseModel):
    """
    Visibility score rule table.

    Two penalty shapes exist for competitor density:
    - "graduated": min(2, competitors * 0.2), score reported to one decimal
    - "stepped": 2 above 8 competitors, 1 above 4, else 0; integer score

    Attributes:
        penalty: Penalty shape, also selects the displayed precision
        top_rank_bonus: Bonus when the org brand is mentioned first (2 or 3 in practice)
        low_rank_cutoff: Last rank that still earns the +1 bonus (5 or 6 in practice)
    """

    penalty: Literal["graduated", "stepped"] = "graduated"
    top_rank_bonus: int = 3
    low_rank_cutoff: int = 6

    @field_validator("top_rank_bonus")
    @classmethod
    def validate_top_rank_bonus(cls, v: int) -> int:
        """Top rank must earn at least the rank 2-3 bonus and stay within range."""
        if not 2 <= v <= 4:
            raise ValueError(f"top_rank_bonus must be between 2 and 4, got: {v}")
        return v

    @field_validator("low_rank_cutoff")
    @classmethod
    def validate_low_rank_cutoff(cls, v: int) -> int:
        """Ranks 2-3 already have their own tier, so the cutoff starts at 4."""
        if v < 4:
            raise ValueError(f"low_rank_cutoff must be >= 4, got: {v}")
        return v

    @property
    def decimals(self) -> int:
        """Number of decimals the score is rounded to."""
        return 1 if self.penalty == "graduated" else 0


def _clean_names(v: list[str]) -> list[str]:
    return [name.strip() for name in v if name and not name.isspace()]


class CatalogBrand(BaseModel):
    """
    One brand in a file-backed catalog.

    Accepts either a bare string ("Globex") or a mapping with name/variants.
    """

    name: str
    variants: list[str] = []

    @model_validator(mode="before")
    @classmethod
    def accept_plain_name(cls, data: Any) -> Any:
        """Allow a plain string as shorthand for {name: ...}."""
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty."""
        if not v or v.isspace():
            raise ValueError("Brand name cannot be empty")
        return v.strip()

    @field_validator("variants")
    @classmethod
    def validate_variants(cls, v: list[str]) -> list[str]:
        """Remove empty/whitespace-only variants."""
        return _clean_names(v)

    def to_entry(self, is_org_brand: bool = False) -> BrandCatalogEntry:
        return BrandCatalogEntry(self.name, list(self.variants), is_org_brand)


def _drop_blank_brands(v: Any) -> Any:
    """Skip blank bare-string entries instead of rejecting the whole list."""
    if not isinstance(v, list):
        return v
    return [item for item in v if not (isinstance(item, str) and not item.strip())]


class AnalyzerSettings(BaseModel):
    """
    Analyzer settings independent of any one organization.

    Attributes:
        detection: Matching rules
        scoring: Score rule table
        global_competitors: Competitors applied to every organization, each a
            bare name or {name, variants} so aliases ("SFDC") map to one brand
    """

    detection: DetectionSettings = DetectionSettings()
    scoring: ScoringSettings = ScoringSettings()
    global_competitors: list[CatalogBrand] = []

    @field_validator("global_competitors", mode="before")
    @classmethod
    def validate_global_competitors(cls, v: Any) -> Any:
        """Remove empty/whitespace-only entries."""
        return _drop_blank_brands(v)

    def global_competitor_entries(self) -> list[BrandCatalogEntry]:
        return [brand.to_entry() for brand in self.global_competitors]


class OrganizationCatalog(BaseModel):
    """
    Catalog for one organization.

    Attributes:
        brands: The organization's own brand(s)
        competitors: Tracked competitor brands
        exclusions: Competitor names to ignore even if configured globally
    """

    brands: list[CatalogBrand] = []
    competitors: list[CatalogBrand] = []
    exclusions: list[str] = []

    @field_validator("exclusions")
    @classmethod
    def validate_exclusions(cls, v: list[str]) -> list[str]:
        return _clean_names(v)

    @model_validator(mode="after")
    def validate_disjoint(self) -> "OrganizationCatalog":
        """A name cannot be both an org brand and a competitor."""
        mine = {b.name.casefold() for b in self.brands}
        overlap = sorted(c.name for c in self.competitors if c.name.casefold() in mine)
        if overlap:
            raise ValueError(
                f"Names listed as both brand and competitor: {', '.join(overlap)}"
            )
        return self

    def entries(self) -> list[BrandCatalogEntry]:
        """Return catalog entries, org brands first."""
        entries = [b.to_entry(is_org_brand=True) for b in self.brands]
        entries.extend(c.to_entry() for c in self.competitors)
        return entries


class AnalyzerConfig(BaseModel):
    """
    Root configuration model for brand_visibility.config.yaml.

    Attributes:
        detection: Matching rules
        scoring: Score rule table
        global_competitors: Competitor keywords applied to every organization
        organizations: Organization id -> catalog
    """

    detection: DetectionSettings = DetectionSettings()
    scoring: ScoringSettings = ScoringSettings()
    global_competitors: list[CatalogBrand] = []
    organizations: dict[str, OrganizationCatalog] = {}

    @field_validator("global_competitors", mode="before")
    @classmethod
    def validate_global_competitors(cls, v: Any) -> Any:
        return _drop_blank_brands(v)

    @field_validator("organizations")
    @classmethod
    def validate_org_ids(cls, v: dict[str, OrganizationCatalog]) -> dict[str, OrganizationCatalog]:
        """Validate organization ids are non-empty."""
        for org_id in v:
            if not org_id or org_id.isspace():
                raise ValueError("Organization id cannot be empty")
        return v

    def analyzer_settings(self) -> AnalyzerSettings:
        return AnalyzerSettings(
            detection=self.detection,
            scoring=self.scoring,
            global_competitors=self.global_competitors,
        )

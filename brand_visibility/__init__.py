"""
Brand Visibility - brand and competitor detection in AI model answers.

Public API:
    - analyze_response: Fetch a catalog and analyze one response (never raises)
    - analyze_text: Pure detection -> ranking -> scoring pipeline
    - BrandAnalysis: Structured analysis result
    - AnalysisOutcome: Tagged analyzed/default wrapper around BrandAnalysis
"""

__version__ = "0.1.0"

from brand_visibility.analyzer import (
    AnalysisOutcome,
    BrandAnalysis,
    analyze_response,
    analyze_text,
)

__all__ = [
    "AnalysisOutcome",
    "BrandAnalysis",
    "__version__",
    "analyze_response",
    "analyze_text",
]

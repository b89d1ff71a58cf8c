# Path: core/search/__init__.py
# Purpose: Package initializer for search strategies and pipeline orchestration.
# Layer: core/search.
# Details: Exposes strategy runners, the scoring and enrichment stages, and the main search pipeline entrypoint.

from .criteria import QueryAnalyzer, QueryComplexity, QueryType, SearchCriteria
from .enrichment import ResultEnricher
from .jitter import FixedJitter, JitterSource
from .merge import merge_hits
from .pipeline import SearchPipeline, default_strategies
from .scoring import WeightedScorer
from .strategies import (
    ColorSearch,
    SceneSearch,
    SearchStrategy,
    SemanticSearch,
    TextFallbackSearch,
    VisualSimilaritySearch,
)

__all__ = [
    "ColorSearch",
    "FixedJitter",
    "JitterSource",
    "QueryAnalyzer",
    "QueryComplexity",
    "QueryType",
    "ResultEnricher",
    "SceneSearch",
    "SearchCriteria",
    "SearchPipeline",
    "SearchStrategy",
    "SemanticSearch",
    "TextFallbackSearch",
    "VisualSimilaritySearch",
    "WeightedScorer",
    "default_strategies",
    "merge_hits",
]

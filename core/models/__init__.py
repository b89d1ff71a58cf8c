# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes dataclasses and enums used across catalog, search, scoring, and API layers.

from .domain import (
    CandidateHit,
    ConfidenceLevel,
    DescriptiveMetadata,
    ImageRecord,
    ImageStatus,
    MatchType,
    ScoredResult,
    SearchInsights,
    SearchQuality,
    SearchQuery,
    SearchResponse,
    StrategyFailure,
    StrategyKind,
)

__all__ = [
    "CandidateHit",
    "ConfidenceLevel",
    "DescriptiveMetadata",
    "ImageRecord",
    "ImageStatus",
    "MatchType",
    "ScoredResult",
    "SearchInsights",
    "SearchQuality",
    "SearchQuery",
    "SearchResponse",
    "StrategyFailure",
    "StrategyKind",
]

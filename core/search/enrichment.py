# Path: core/search/enrichment.py
# Purpose: Rank scored results, bucket them into tiers, and summarize the result set.
# Layer: core/search.
# Details: Produces confidence tiers, the overall search quality, signal distribution, and refinement suggestions.

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from config.settings import TierSettings
from core.models.domain import ConfidenceLevel, ScoredResult, SearchInsights, SearchQuality

NO_RESULTS_MESSAGE = "No matching results found for your query"
NO_RESULTS_SUGGESTIONS = (
    "Try using more general terms",
    "Check for spelling mistakes",
    "Try searching by file type or image properties",
)

PATTERN_FIELDS = (
    ("formats", "file_format"),
    ("resolutions", "resolution_category"),
    ("orientations", "orientation"),
    ("content_categories", "content_category"),
)


class ResultEnricher:
    """Turn scored candidates into the ordered, annotated result set returned to callers."""

    def __init__(self, tiers: Optional[TierSettings] = None) -> None:
        self.tiers = tiers or TierSettings()

    def rank(self, results: List[ScoredResult]) -> List[ScoredResult]:
        """Sort by total score descending, ascending id on ties, and assign confidence tiers."""

        ranked = sorted(results, key=lambda result: (-result.total_score, result.image_id))
        for result in ranked:
            result.confidence_level = self.confidence_level(result.total_score)
        return ranked

    def confidence_level(self, score: float) -> ConfidenceLevel:
        t = self.tiers
        if score >= t.very_high:
            return ConfidenceLevel.VERY_HIGH
        if score >= t.high:
            return ConfidenceLevel.HIGH
        if score >= t.medium:
            return ConfidenceLevel.MEDIUM
        if score >= t.low:
            return ConfidenceLevel.LOW
        return ConfidenceLevel.VERY_LOW

    def search_quality(self, highest: float, average: float, count: int) -> SearchQuality:
        t = self.tiers
        if count == 0:
            return SearchQuality.NO_RESULTS
        if highest >= t.excellent_highest and average >= t.excellent_average and count >= t.excellent_count:
            return SearchQuality.EXCELLENT
        if highest >= t.good_highest and average >= t.good_average and count >= t.good_count:
            return SearchQuality.GOOD
        if highest >= t.fair_highest and average >= t.fair_average:
            return SearchQuality.FAIR
        if highest >= t.poor_highest:
            return SearchQuality.POOR
        return SearchQuality.VERY_POOR

    def insights(self, results: Sequence[ScoredResult]) -> SearchInsights:
        if not results:
            return SearchInsights(suggestions=list(NO_RESULTS_SUGGESTIONS), message=NO_RESULTS_MESSAGE)
        return SearchInsights(
            match_distribution=match_distribution(results),
            common_patterns=common_patterns(results),
        )


def match_distribution(results: Sequence[ScoredResult]) -> Dict[str, float]:
    """Share of the summed signal scores attributable to each signal."""

    totals = {
        "description": sum(r.description_score for r in results),
        "tags": sum(r.tag_score for r in results),
        "filename": sum(r.filename_score for r in results),
        "metadata": sum(r.metadata_score for r in results),
    }
    mass = sum(totals.values())
    if mass <= 0:
        return {label: 0.0 for label in totals}
    return {label: value / mass for label, value in totals.items()}


def common_patterns(results: Sequence[ScoredResult]) -> Dict[str, List[str]]:
    patterns: Dict[str, List[str]] = {key: [] for key, _ in PATTERN_FIELDS}
    for result in results:
        for key, attribute in PATTERN_FIELDS:
            value = getattr(result.record, attribute)
            if value and value not in patterns[key]:
                patterns[key].append(value)
    return patterns

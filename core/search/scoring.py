# Path: core/search/scoring.py
# Purpose: Compute the composite relevance score and explanation for each surviving candidate.
# Layer: core/search.
# Details: Raw match signals are weighted per query type, then adjusted by bonuses and penalties.

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from config.settings import ScoringSettings
from core.models.domain import CandidateHit, DescriptiveMetadata, ImageRecord, MatchType, ScoredResult

from .criteria import QueryComplexity, SearchCriteria, resolution_rank
from .text import overlap_similarity, process_tags, tag_relevance

SIGNAL_LABELS = ("description", "tags", "filename", "metadata")


@dataclass
class Adjustment:
    """A single named bonus or penalty contribution."""

    label: str
    value: float


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole elapsed days, treating naive datetimes as UTC when mixed with aware ones."""

    if (later.tzinfo is None) != (earlier.tzinfo is None):
        if later.tzinfo is None:
            later = later.replace(tzinfo=timezone.utc)
        else:
            earlier = earlier.replace(tzinfo=timezone.utc)
    return int((later - earlier).total_seconds() / 86400)


class WeightedScorer:
    """Deterministic scorer: the same hit, record, metadata, criteria and reference time always agree."""

    def __init__(self, settings: Optional[ScoringSettings] = None) -> None:
        self.settings = settings or ScoringSettings()

    def score(
        self,
        hit: CandidateHit,
        record: ImageRecord,
        metadata: Optional[DescriptiveMetadata],
        criteria: SearchCriteria,
        now: datetime,
    ) -> ScoredResult:
        """Score one candidate against the analyzed query at reference time ``now``."""

        raw = {
            "description": self.description_signal(record, criteria),
            "tags": self.tag_signal(record, metadata, criteria),
            "filename": self.filename_signal(record, criteria),
            "metadata": self.metadata_signal(record, metadata, criteria),
        }
        weights = self.weights_for(criteria)
        weighted = {label: raw[label] * weights[label] for label in SIGNAL_LABELS}

        bonuses = self.bonuses(hit, record, metadata, criteria, raw, now)
        penalties = self.penalties(record, metadata, criteria, now)
        bonus_score = sum(b.value for b in bonuses)
        penalty_score = sum(p.value for p in penalties)

        total = clamp(
            weighted["description"]
            + weighted["tags"]
            + weighted["filename"]
            + weighted["metadata"]
            + bonus_score
            - penalty_score
        )

        return ScoredResult(
            record=record,
            hit=hit,
            metadata=metadata,
            description_score=weighted["description"],
            tag_score=weighted["tags"],
            filename_score=weighted["filename"],
            metadata_score=weighted["metadata"],
            bonus_score=bonus_score,
            penalty_score=penalty_score,
            total_score=total,
            explanation=self.explain(hit, weighted, bonuses, penalties),
        )

    # Raw match signals, each in [0, 1].

    def description_signal(self, record: ImageRecord, criteria: SearchCriteria) -> float:
        if not record.description or not record.description.strip():
            return 0.0

        s = self.settings
        description = record.description.lower()
        score = 0.0
        matches = 0

        for phrase in criteria.phrases:
            if phrase.lower() in description:
                score += s.exact_match
                matches += 1

        for keyword in criteria.keywords:
            if keyword in description:
                score += s.exact_match if description == keyword else s.partial_match
                matches += 1

        for term in criteria.terms:
            if term in criteria.keywords:
                continue
            similarity = overlap_similarity(description, term)
            if similarity > s.similarity_threshold:
                score += s.similarity_match * similarity
                matches += 1

        if matches:
            score /= max(1, len(criteria.terms))
        return min(1.0, score)

    def tag_signal(
        self, record: ImageRecord, metadata: Optional[DescriptiveMetadata], criteria: SearchCriteria
    ) -> float:
        query = criteria.original_query
        threshold = self.settings.similarity_threshold
        relevance = tag_relevance(process_tags(record.tags), query, threshold)

        ai_raw = ",".join(t for t in (record.ai_generated_tags, metadata.ai_tags if metadata else None) if t)
        ai_tags = process_tags(ai_raw)
        if ai_tags:
            relevance = max(relevance, tag_relevance(ai_tags, query, threshold) * self.settings.ai_tag_factor)
        return relevance

    def filename_signal(self, record: ImageRecord, criteria: SearchCriteria) -> float:
        score = 0.0
        if record.original_name:
            score = max(score, self._text_against_criteria(record.original_name, criteria))
        if record.file_name:
            score = max(
                score, self._text_against_criteria(record.file_name, criteria) * self.settings.stored_filename_factor
            )
        return score

    def metadata_signal(
        self, record: ImageRecord, metadata: Optional[DescriptiveMetadata], criteria: SearchCriteria
    ) -> float:
        checks = self._metadata_checks(record, metadata, criteria)
        if not checks:
            return 0.0
        satisfied = sum(1 for ok in checks if ok)
        return min(1.0, self.settings.metadata_match * satisfied / len(checks))

    def _metadata_checks(
        self, record: ImageRecord, metadata: Optional[DescriptiveMetadata], criteria: SearchCriteria
    ) -> List[bool]:
        checks: List[bool] = []

        if criteria.file_formats:
            checks.append(bool(record.file_format) and record.file_format.upper() in criteria.file_formats)

        if criteria.min_resolution or criteria.max_resolution:
            rank = resolution_rank(record.resolution_category)
            low = resolution_rank(criteria.min_resolution)
            high = resolution_rank(criteria.max_resolution)
            checks.append(
                rank is not None and (low is None or rank >= low) and (high is None or rank <= high)
            )

        if criteria.orientation:
            checks.append(bool(record.orientation) and record.orientation.upper() == criteria.orientation)

        if criteria.min_brightness is not None or criteria.max_brightness is not None:
            level = record.brightness_level
            checks.append(
                level is not None
                and (criteria.min_brightness is None or level >= criteria.min_brightness)
                and (criteria.max_brightness is None or level <= criteria.max_brightness)
            )

        if criteria.has_transparency is not None:
            checks.append(record.has_transparency is criteria.has_transparency)

        if criteria.is_animated is not None:
            checks.append(record.is_animated is criteria.is_animated)

        if criteria.content_categories:
            checks.append(bool(record.content_category) and record.content_category in criteria.content_categories)

        if criteria.color_keywords:
            palette = [color.lower() for color in record.dominant_colors]
            if metadata is not None and metadata.color_palette:
                palette.append(metadata.color_palette.lower())
            checks.append(any(color in entry for color in criteria.color_keywords for entry in palette))

        if criteria.scene_type:
            checks.append(metadata is not None and metadata.scene_classification == criteria.scene_type)

        return checks

    def _text_against_criteria(self, text: str, criteria: SearchCriteria) -> float:
        if not text.strip():
            return 0.0

        lowered = text.lower()
        score = 0.0
        matches = 0
        for keyword in criteria.keywords:
            if keyword in lowered:
                score += self.settings.partial_match
                matches += 1
        for phrase in criteria.phrases:
            if phrase.lower() in lowered:
                score += self.settings.exact_match
                matches += 1

        if matches:
            score /= max(1, len(criteria.terms))
        return min(1.0, score)

    # Weights, bonuses and penalties.

    def weights_for(self, criteria: SearchCriteria) -> Dict[str, float]:
        table = self.settings.weights
        base = table.get(criteria.primary_type.value) or table["SEMANTIC"]
        weights = {label: float(base.get(label, 0.0)) for label in SIGNAL_LABELS}

        if criteria.complexity is QueryComplexity.COMPLEX:
            weights["description"] = min(0.5, weights["description"] * 1.1)
            weights["tags"] = min(0.4, weights["tags"] * 1.1)
            weights["filename"] *= 0.9
            weights["metadata"] *= 0.9
        return weights

    def bonuses(
        self,
        hit: CandidateHit,
        record: ImageRecord,
        metadata: Optional[DescriptiveMetadata],
        criteria: SearchCriteria,
        raw: Dict[str, float],
        now: datetime,
    ) -> List[Adjustment]:
        s = self.settings
        found: List[Adjustment] = []

        agreeing = sum(1 for label in ("description", "tags", "filename") if raw[label] > 0)
        if agreeing >= 2:
            found.append(Adjustment("multi-signal agreement", s.multi_signal_bonus * (agreeing - 1)))

        if hit.confidence >= s.high_confidence_threshold:
            found.append(Adjustment("high strategy confidence", s.high_confidence_bonus))

        if metadata is not None and metadata.scene_classification:
            requested = criteria.scene_type and metadata.scene_classification == criteria.scene_type
            if requested or hit.match_type in (MatchType.SCENE, MatchType.VISUAL_SIMILARITY):
                found.append(Adjustment("scene classification", s.scene_bonus))

        if record.created_at is not None:
            age = days_between(now, record.created_at)
            base = s.time_reference_freshness_bonus if criteria.has_time_reference else s.freshness_bonus
            freshness = max(0.0, base * (1.0 - age / s.freshness_decay_days))
            if freshness > 0:
                found.append(Adjustment("freshness", freshness))

        richness_fields = [
            record.description,
            record.tags,
            record.ai_generated_tags,
            record.dominant_colors,
            metadata.ai_description if metadata else None,
            metadata.ai_tags if metadata else None,
        ]
        filled = sum(1 for value in richness_fields if value)
        if filled:
            found.append(Adjustment("metadata richness", min(s.richness_bonus_cap, filled * s.richness_bonus_per_field)))

        if record.view_count > 0:
            found.append(Adjustment("popularity", min(s.popularity_bonus_cap, math.log(record.view_count + 1) * 0.01)))

        return found

    def penalties(
        self,
        record: ImageRecord,
        metadata: Optional[DescriptiveMetadata],
        criteria: SearchCriteria,
        now: datetime,
    ) -> List[Adjustment]:
        s = self.settings
        found: List[Adjustment] = []

        if metadata is None:
            found.append(Adjustment("missing AI metadata", s.missing_metadata_penalty))
        else:
            if metadata.processed_at is not None and days_between(now, metadata.processed_at) > s.stale_metadata_days:
                found.append(Adjustment("stale AI metadata", s.stale_metadata_penalty))
            if metadata.confidence_score is not None and metadata.confidence_score < s.low_ai_confidence_threshold:
                found.append(Adjustment("low AI confidence", s.low_ai_confidence_penalty))

        if not record.description or not record.description.strip():
            found.append(Adjustment("missing description", s.missing_description_penalty))
        if not record.tags or not record.tags.strip():
            found.append(Adjustment("missing tags", s.missing_tags_penalty))

        if criteria.has_time_reference and record.created_at is not None:
            if days_between(now, record.created_at) > s.freshness_decay_days:
                found.append(Adjustment("outdated record", s.outdated_record_penalty))

        return found

    def explain(
        self,
        hit: CandidateHit,
        weighted: Dict[str, float],
        bonuses: List[Adjustment],
        penalties: List[Adjustment],
    ) -> str:
        """Name contributing signals and adjustments, largest contribution first."""

        parts: List[str] = []

        signals = _by_contribution([(label, weighted[label]) for label in SIGNAL_LABELS if weighted[label] > 0])
        if signals:
            parts.append(f"matched {_join(signals)}")
        else:
            parts.append(f"matched via {hit.match_type.value} strategy only")

        for label in _by_contribution([(b.label, b.value) for b in bonuses if b.value > 0]):
            parts.append(f"{label} bonus applied")

        penalized = _by_contribution([(p.label, p.value) for p in penalties if p.value > 0])
        if penalized:
            parts.append(f"penalized for {_join(penalized)}")

        return "; ".join(parts)


def _by_contribution(items: List[Tuple[str, float]]) -> List[str]:
    # sorted() is stable, so equal contributions keep their declaration order.
    return [label for label, _ in sorted(items, key=lambda item: -item[1])]


def _join(labels: List[str]) -> str:
    if len(labels) == 1:
        return labels[0]
    return ", ".join(labels[:-1]) + " and " + labels[-1]

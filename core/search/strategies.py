# Path: core/search/strategies.py
# Purpose: Define search strategies that turn a query into scored candidate hits.
# Layer: core/search.
# Details: Each strategy reads from the catalog accessor, skips inactive records, and returns an owned hit list.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from config.settings import StrategySettings
from core.catalog.base import CatalogAccessor
from core.logger import get_logger
from core.models.domain import CandidateHit, MatchType, SearchQuery, StrategyKind

from .jitter import JitterSource
from .text import contains_ci

logger = get_logger("search.strategies")


class SearchStrategy(ABC):
    """Interface for producing candidate hits from one kind of query signal."""

    kind: StrategyKind
    description: str

    def __init__(self, settings: Optional[StrategySettings] = None, jitter: Optional[JitterSource] = None) -> None:
        self.settings = settings or StrategySettings()
        self.jitter = jitter or JitterSource()

    @abstractmethod
    def run(self, query: SearchQuery, catalog: CatalogAccessor) -> List[CandidateHit]:
        """Return candidate hits with confidences in [0, 1]."""


class TextFallbackSearch:
    """Case-insensitive substring match over live record descriptions and tags."""

    def __init__(self, settings: Optional[StrategySettings] = None) -> None:
        self.settings = settings or StrategySettings()

    def run(self, text: str, catalog: CatalogAccessor) -> List[CandidateHit]:
        hits: List[CandidateHit] = []
        for record in catalog.find_recent(self.settings.fallback_sample_size):
            if not record.is_active:
                continue

            confidence = 0.0
            features: List[str] = []
            if contains_ci(record.description, text):
                confidence += 0.8
                features.append("description")
            if contains_ci(record.tags, text):
                confidence += 0.6
                features.append("tags")

            if confidence > 0:
                hits.append(
                    CandidateHit(
                        image_id=record.id,
                        confidence=min(confidence, 1.0),
                        match_type=MatchType.TEXT,
                        matched_features=features,
                    )
                )
        hits.sort(key=lambda hit: (-hit.confidence, hit.image_id))
        return hits


class SemanticSearch(SearchStrategy):
    """Strategy matching the text query against AI descriptions and AI tags."""

    kind = StrategyKind.SEMANTIC
    description = "Keyword match over AI-generated descriptions and tags, with text fallback."

    def __init__(self, settings: Optional[StrategySettings] = None, jitter: Optional[JitterSource] = None) -> None:
        super().__init__(settings, jitter)
        self.fallback = TextFallbackSearch(self.settings)

    def run(self, query: SearchQuery, catalog: CatalogAccessor) -> List[CandidateHit]:
        text = (query.text or "").strip()
        if not text:
            raise ValueError("SemanticSearch requires a text query.")

        hits: List[CandidateHit] = []
        for record, metadata in catalog.search_metadata_by_description(text):
            if not record.is_active:
                continue

            confidence = 0.5
            features: List[str] = []
            if contains_ci(metadata.ai_description, text):
                confidence += 0.4
                features.append("ai_description")
            if contains_ci(metadata.ai_tags, text):
                confidence += 0.3
                features.append("ai_tags")

            hits.append(
                CandidateHit(
                    image_id=record.id,
                    confidence=min(confidence + self.jitter.draw(self.settings.semantic_jitter), 1.0),
                    match_type=MatchType.SEMANTIC,
                    matched_features=features,
                    ai_description=metadata.ai_description,
                )
            )

        if not hits:
            logger.debug("No metadata hits for %r, falling back to basic text match", text)
            return self.fallback.run(text, catalog)
        return hits


class VisualSimilaritySearch(SearchStrategy):
    """Strategy finding records that share the reference record's scene classification."""

    kind = StrategyKind.VISUAL
    description = "Records sharing the reference image's scene, plus an unmeasured object/color contribution."

    def run(self, query: SearchQuery, catalog: CatalogAccessor) -> List[CandidateHit]:
        if query.image_id is None:
            raise ValueError("VisualSimilaritySearch requires a reference image id.")

        reference = catalog.find_metadata_by_id(query.image_id)
        if reference is None or not reference.scene_classification:
            logger.debug("Reference image %s has no scene classification", query.image_id)
            return []

        hits: List[CandidateHit] = []
        for record, metadata in catalog.find_by_scene(reference.scene_classification):
            if record.id == query.image_id or not record.is_active:
                continue

            similarity = 0.5
            if metadata.scene_classification == reference.scene_classification:
                similarity += 0.3
            similarity += self.jitter.draw(self.settings.visual_jitter)

            hits.append(
                CandidateHit(
                    image_id=record.id,
                    confidence=min(similarity, 1.0),
                    match_type=MatchType.VISUAL_SIMILARITY,
                    matched_features=["scene", "objects", "colors"],
                    ai_description=metadata.ai_description,
                )
            )
        hits.sort(key=lambda hit: (-hit.confidence, hit.image_id))
        return hits


class ColorSearch(SearchStrategy):
    """Strategy matching the color query against tags of recently added records."""

    kind = StrategyKind.COLOR
    description = "Color keyword match over tags of a bounded recent-record sample."

    def run(self, query: SearchQuery, catalog: CatalogAccessor) -> List[CandidateHit]:
        color = (query.color_query or "").strip()
        if not color:
            raise ValueError("ColorSearch requires a color query.")

        hits: List[CandidateHit] = []
        for record in catalog.find_recent(self.settings.color_sample_size):
            if not record.is_active or not contains_ci(record.tags, color):
                continue
            hits.append(
                CandidateHit(
                    image_id=record.id,
                    confidence=min(0.7 + self.jitter.draw(self.settings.color_jitter), 1.0),
                    match_type=MatchType.COLOR,
                    matched_features=["color_palette"],
                )
            )
        return hits


class SceneSearch(SearchStrategy):
    """Strategy returning records whose scene classification equals the requested scene."""

    kind = StrategyKind.SCENE
    description = "Exact scene classification match scored by the stored AI confidence."

    def run(self, query: SearchQuery, catalog: CatalogAccessor) -> List[CandidateHit]:
        scene = (query.scene_type or "").strip()
        if not scene:
            raise ValueError("SceneSearch requires a scene type.")

        hits: List[CandidateHit] = []
        for record, metadata in catalog.find_by_scene(scene):
            if not record.is_active or metadata.scene_classification != scene:
                continue
            confidence = metadata.confidence_score if metadata.confidence_score is not None else 0.0
            hits.append(
                CandidateHit(
                    image_id=record.id,
                    confidence=max(0.0, min(confidence, 1.0)),
                    match_type=MatchType.SCENE,
                    matched_features=["scene_classification"],
                    ai_description=metadata.ai_description,
                )
            )
        return hits

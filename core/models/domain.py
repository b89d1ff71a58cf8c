# Path: core/models/domain.py
# Purpose: Define domain models shared across catalog, strategy, scoring, and enrichment stages.
# Layer: core/models.
# Details: Lightweight dataclasses simplify serialization between API, CLI, and core services.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class ImageStatus(int, Enum):
    """Lifecycle status of a catalog record."""

    DISABLED = 0
    ACTIVE = 1
    PROCESSING = 2


class StrategyKind(str, Enum):
    """Closed set of strategies a caller can opt into."""

    SEMANTIC = "semantic"
    VISUAL = "visual"
    COLOR = "color"
    SCENE = "scene"


class MatchType(str, Enum):
    """Tag describing which runner produced a candidate hit."""

    SEMANTIC = "semantic"
    VISUAL_SIMILARITY = "visual_similarity"
    COLOR = "color"
    SCENE = "scene"
    TEXT = "text"


class ConfidenceLevel(str, Enum):
    VERY_HIGH = "VERY_HIGH"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    VERY_LOW = "VERY_LOW"


class SearchQuality(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    VERY_POOR = "VERY_POOR"
    NO_RESULTS = "NO_RESULTS"


@dataclass
class ImageRecord:
    """Catalog entry describing a stored image and its derived attributes."""

    id: int
    url: str
    thumbnail_url: Optional[str] = None
    original_name: Optional[str] = None
    file_name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[str] = None
    ai_generated_tags: Optional[str] = None
    file_format: Optional[str] = None
    file_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    resolution_category: Optional[str] = None
    orientation: Optional[str] = None
    content_category: Optional[str] = None
    dominant_colors: List[str] = field(default_factory=list)
    has_transparency: Optional[bool] = None
    is_animated: Optional[bool] = None
    brightness_level: Optional[float] = None
    status: ImageStatus = ImageStatus.ACTIVE
    deleted: bool = False
    created_at: Optional[datetime] = None
    view_count: int = 0

    @property
    def is_active(self) -> bool:
        """Return True when the record may be surfaced by any strategy."""

        return self.status == ImageStatus.ACTIVE and not self.deleted


@dataclass
class DescriptiveMetadata:
    """AI-derived metadata attached one-to-one to an image record."""

    image_id: int
    ai_description: Optional[str] = None
    ai_tags: Optional[str] = None
    scene_classification: Optional[str] = None
    objects_detected: List[str] = field(default_factory=list)
    color_palette: Optional[str] = None
    text_content: Optional[str] = None
    confidence_score: Optional[float] = None
    processed_at: Optional[datetime] = None


@dataclass
class SearchQuery:
    """User-facing query structure supplied by API and CLI layers.

    ``search_types`` is the explicit set of strategies to run. When it is None the
    strategies are derived from whichever optional signals are populated.
    """

    text: Optional[str] = None
    image_id: Optional[int] = None
    color_query: Optional[str] = None
    scene_type: Optional[str] = None
    limit: int = 10
    min_confidence: float = 0.5
    search_types: Optional[FrozenSet[StrategyKind]] = None
    file_formats: FrozenSet[str] = frozenset()
    orientation: Optional[str] = None

    def has_signal(self, kind: StrategyKind) -> bool:
        """Return True when the field a strategy kind consumes is populated."""

        if kind is StrategyKind.SEMANTIC:
            return bool(self.text and self.text.strip())
        if kind is StrategyKind.VISUAL:
            return self.image_id is not None
        if kind is StrategyKind.COLOR:
            return bool(self.color_query and self.color_query.strip())
        return bool(self.scene_type and self.scene_type.strip())

    def strategy_kinds(self) -> List[StrategyKind]:
        """Resolve the strategies to run, in declaration order."""

        if self.search_types is not None:
            return [kind for kind in StrategyKind if kind in self.search_types]
        return [kind for kind in StrategyKind if self.has_signal(kind)]


@dataclass
class CandidateHit:
    """A single strategy's evidence that a record matches the query."""

    image_id: int
    confidence: float
    match_type: MatchType
    matched_features: List[str] = field(default_factory=list)
    ai_description: Optional[str] = None


@dataclass
class StrategyFailure:
    """Report of a strategy whose data source call failed."""

    strategy: StrategyKind
    reason: str


@dataclass
class ScoredResult:
    """Search result item combining the record with its score breakdown."""

    record: ImageRecord
    hit: CandidateHit
    metadata: Optional[DescriptiveMetadata] = None
    description_score: float = 0.0
    tag_score: float = 0.0
    filename_score: float = 0.0
    metadata_score: float = 0.0
    bonus_score: float = 0.0
    penalty_score: float = 0.0
    total_score: float = 0.0
    explanation: str = ""
    confidence_level: ConfidenceLevel = ConfidenceLevel.VERY_LOW

    @property
    def image_id(self) -> int:
        return self.record.id


@dataclass
class SearchInsights:
    """Aggregate view of a result set for display next to the results."""

    match_distribution: Dict[str, float] = field(default_factory=dict)
    common_patterns: Dict[str, List[str]] = field(default_factory=dict)
    suggestions: List[str] = field(default_factory=list)
    message: Optional[str] = None


@dataclass
class SearchResponse:
    """Ranked, enriched answer to a single search query."""

    query: SearchQuery
    results: List[ScoredResult] = field(default_factory=list)
    average_confidence: float = 0.0
    highest_confidence: float = 0.0
    search_quality: SearchQuality = SearchQuality.NO_RESULTS
    insights: SearchInsights = field(default_factory=SearchInsights)
    strategies_run: List[StrategyKind] = field(default_factory=list)
    failed_strategies: List[StrategyFailure] = field(default_factory=list)
    processing_time_ms: float = 0.0

    @property
    def total_results(self) -> int:
        return len(self.results)

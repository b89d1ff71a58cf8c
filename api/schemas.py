# Path: api/schemas.py
# Purpose: Define the JSON request and response models of the HTTP API.
# Layer: api.
# Details: camelCase on the wire, snake_case in Python; converts to and from core domain models.

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.models.domain import ScoredResult, SearchQuery, SearchResponse, StrategyKind

SCENE_TYPES = [
    "landscape", "portrait", "architecture", "nature", "urban", "indoor", "outdoor",
    "food", "animal", "vehicle", "technology", "art", "sports", "travel",
]

COLOR_TYPES = [
    "red", "blue", "green", "yellow", "orange", "purple", "pink", "brown",
    "black", "white", "gray", "warm", "cool", "neutral", "vibrant",
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(CamelModel):
    """Body of ``POST /search``; range checks are left to the pipeline so errors share one shape."""

    query: Optional[str] = None
    image_id: Optional[int] = None
    color_query: Optional[str] = None
    scene_type: Optional[str] = None
    limit: int = 10
    min_confidence: float = 0.5
    search_types: Optional[List[StrategyKind]] = None
    file_formats: List[str] = Field(default_factory=list)
    orientation: Optional[str] = None

    def to_query(self) -> SearchQuery:
        return SearchQuery(
            text=self.query,
            image_id=self.image_id,
            color_query=self.color_query,
            scene_type=self.scene_type,
            limit=self.limit,
            min_confidence=self.min_confidence,
            search_types=frozenset(self.search_types) if self.search_types is not None else None,
            file_formats=frozenset(self.file_formats),
            orientation=self.orientation,
        )


class ResultItem(CamelModel):
    image_id: int
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
    dominant_colors: List[str] = Field(default_factory=list)
    has_transparency: Optional[bool] = None
    is_animated: Optional[bool] = None
    brightness_level: Optional[float] = None
    created_at: Optional[datetime] = None
    match_type: str
    matched_features: List[str] = Field(default_factory=list)
    ai_description: Optional[str] = None
    scene_classification: Optional[str] = None
    strategy_confidence: float
    total_score: float
    description_score: float
    tag_score: float
    filename_score: float
    metadata_score: float
    bonus_score: float
    penalty_score: float
    explanation: str
    confidence_level: str

    @classmethod
    def from_result(cls, result: ScoredResult) -> "ResultItem":
        record = result.record
        metadata = result.metadata
        return cls(
            image_id=record.id,
            url=record.url,
            thumbnail_url=record.thumbnail_url,
            original_name=record.original_name,
            file_name=record.file_name,
            description=record.description,
            tags=record.tags,
            ai_generated_tags=record.ai_generated_tags,
            file_format=record.file_format,
            file_size=record.file_size,
            width=record.width,
            height=record.height,
            resolution_category=record.resolution_category,
            orientation=record.orientation,
            content_category=record.content_category,
            dominant_colors=list(record.dominant_colors),
            has_transparency=record.has_transparency,
            is_animated=record.is_animated,
            brightness_level=record.brightness_level,
            created_at=record.created_at,
            match_type=result.hit.match_type.value,
            matched_features=list(result.hit.matched_features),
            ai_description=result.hit.ai_description or (metadata.ai_description if metadata else None),
            scene_classification=metadata.scene_classification if metadata else None,
            strategy_confidence=result.hit.confidence,
            total_score=result.total_score,
            description_score=result.description_score,
            tag_score=result.tag_score,
            filename_score=result.filename_score,
            metadata_score=result.metadata_score,
            bonus_score=result.bonus_score,
            penalty_score=result.penalty_score,
            explanation=result.explanation,
            confidence_level=result.confidence_level.value,
        )


class Insights(CamelModel):
    match_distribution: Dict[str, float] = Field(default_factory=dict)
    common_patterns: Dict[str, List[str]] = Field(default_factory=dict)
    suggestions: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class FailedStrategy(CamelModel):
    strategy: str
    reason: str


class SearchResponseBody(CamelModel):
    query: Optional[str] = None
    total_results: int
    results: List[ResultItem]
    average_confidence: float
    highest_confidence: float
    search_quality: str
    insights: Insights
    strategies_run: List[str]
    failed_strategies: List[FailedStrategy] = Field(default_factory=list)
    processing_time_ms: float

    @classmethod
    def from_response(cls, response: SearchResponse) -> "SearchResponseBody":
        insights = response.insights
        return cls(
            query=response.query.text,
            total_results=response.total_results,
            results=[ResultItem.from_result(result) for result in response.results],
            average_confidence=response.average_confidence,
            highest_confidence=response.highest_confidence,
            search_quality=response.search_quality.value,
            insights=Insights(
                match_distribution=dict(insights.match_distribution),
                # Pattern keys follow the same camelCase convention as every other field.
                common_patterns={to_camel(key): values for key, values in insights.common_patterns.items()},
                suggestions=list(insights.suggestions),
                message=insights.message,
            ),
            strategies_run=[kind.value for kind in response.strategies_run],
            failed_strategies=[
                FailedStrategy(strategy=failure.strategy.value, reason=failure.reason)
                for failure in response.failed_strategies
            ],
            processing_time_ms=response.processing_time_ms,
        )


class SearchOptions(CamelModel):
    scene_types: List[str] = Field(default_factory=lambda: list(SCENE_TYPES))
    color_types: List[str] = Field(default_factory=lambda: list(COLOR_TYPES))
    search_types: List[str] = Field(default_factory=lambda: [kind.value for kind in StrategyKind])

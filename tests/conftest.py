from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings, StrategySettings
from core.catalog import InMemoryCatalog
from core.models.domain import (
    CandidateHit,
    DescriptiveMetadata,
    ImageRecord,
    ImageStatus,
    SearchQuery,
    StrategyKind,
)
from core.search.jitter import FixedJitter
from core.search.pipeline import SearchPipeline
from core.search.strategies import ColorSearch, SceneSearch, SearchStrategy, SemanticSearch, VisualSimilaritySearch

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_record(image_id: int, **overrides) -> ImageRecord:
    values = dict(
        id=image_id,
        url=f"https://cdn.example.com/images/{image_id}.jpg",
        original_name=f"image_{image_id}.jpg",
        file_name=f"{image_id:08d}.jpg",
        file_format="JPEG",
        created_at=NOW - timedelta(days=30),
    )
    values.update(overrides)
    return ImageRecord(**values)


def make_metadata(image_id: int, **overrides) -> DescriptiveMetadata:
    values = dict(image_id=image_id, confidence_score=0.9, processed_at=NOW - timedelta(days=10))
    values.update(overrides)
    return DescriptiveMetadata(**values)


def fixed_strategies(settings: Optional[StrategySettings] = None, fraction: float = 0.0) -> Dict[StrategyKind, SearchStrategy]:
    settings = settings or StrategySettings()
    return {
        StrategyKind.SEMANTIC: SemanticSearch(settings, FixedJitter(fraction)),
        StrategyKind.VISUAL: VisualSimilaritySearch(settings, FixedJitter(fraction)),
        StrategyKind.COLOR: ColorSearch(settings, FixedJitter(fraction)),
        StrategyKind.SCENE: SceneSearch(settings, FixedJitter(fraction)),
    }


def make_pipeline(
    catalog: InMemoryCatalog,
    settings: Optional[AppSettings] = None,
    strategies: Optional[Dict[StrategyKind, SearchStrategy]] = None,
    fraction: float = 0.0,
) -> SearchPipeline:
    settings = settings or AppSettings()
    return SearchPipeline(
        catalog,
        settings,
        strategies=strategies or fixed_strategies(settings.strategies, fraction),
        clock=lambda: NOW,
    )


class StubStrategy(SearchStrategy):
    """Strategy returning canned hits, optionally failing or blocking on a gate."""

    def __init__(
        self,
        kind: StrategyKind,
        hits: Optional[List[CandidateHit]] = None,
        error: Optional[Exception] = None,
        gate: Optional[threading.Event] = None,
    ) -> None:
        super().__init__(jitter=FixedJitter())
        self.kind = kind
        self.description = f"stub {kind.value}"
        self.hits = hits or []
        self.error = error
        self.gate = gate
        self.calls = 0

    def run(self, query: SearchQuery, catalog) -> List[CandidateHit]:
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return [
            CandidateHit(hit.image_id, hit.confidence, hit.match_type, list(hit.matched_features), hit.ai_description)
            for hit in self.hits
        ]


@pytest.fixture
def catalog() -> InMemoryCatalog:
    store = InMemoryCatalog()
    store.add(
        make_record(
            1,
            description="a sunset over the ocean",
            tags="sunset, beach, orange",
            dominant_colors=["orange", "purple"],
            orientation="LANDSCAPE",
            resolution_category="HIGH",
            content_category="NATURE",
            view_count=120,
        ),
        make_metadata(
            1,
            ai_description="golden sunset above calm sea",
            ai_tags="sunset, sea, sky",
            scene_classification="landscape",
            color_palette="orange,purple",
            confidence_score=0.95,
        ),
    )
    store.add(
        make_record(
            2,
            description="mountain lake at dawn",
            tags="mountain, lake, blue",
            orientation="LANDSCAPE",
            resolution_category="ULTRA_HIGH",
            content_category="NATURE",
        ),
        make_metadata(
            2,
            ai_description="snowy mountain reflected in a lake",
            ai_tags="mountain, lake",
            scene_classification="landscape",
            confidence_score=0.85,
        ),
    )
    store.add(
        make_record(
            3,
            description="city skyline at night",
            tags="city, night, urban",
            file_format="PNG",
            orientation="PORTRAIT",
            resolution_category="MEDIUM",
        ),
        make_metadata(3, ai_description="lit towers of a city at night", scene_classification="urban"),
    )
    store.add(
        make_record(
            4,
            description="forest trail in autumn",
            tags="forest, green, autumn",
            orientation="LANDSCAPE",
            content_category="NATURE",
        ),
        make_metadata(
            4, ai_description="path through autumn forest", scene_classification="landscape", confidence_score=0.7
        ),
    )
    store.add(
        make_record(5, description="sunset over hills", tags="sunset, blue", status=ImageStatus.DISABLED),
        make_metadata(5, ai_description="sunset hills", scene_classification="landscape"),
    )
    store.add(
        make_record(6, description="blue sunset", tags="blue, sunset", deleted=True),
        make_metadata(6, ai_description="blue sunset sky", scene_classification="landscape"),
    )
    store.add(make_record(7, description="sunset in progress", tags="sunset, blue", status=ImageStatus.PROCESSING))
    store.add(
        make_record(
            8,
            description="a cat sleeping on a sofa",
            tags="cat, indoor, blue",
            file_format="PNG",
            orientation="PORTRAIT",
        )
    )
    return store


@pytest.fixture
def pipeline(catalog: InMemoryCatalog) -> SearchPipeline:
    return make_pipeline(catalog)

# Path: core/search/criteria.py
# Purpose: Analyze a search query into the structured criteria consumed by the scoring engine.
# Layer: core/search.
# Details: Detects query type and complexity, extracts terms and phrases, and derives structural filters.

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set

from core.models.domain import SearchQuery

COLOR_KEYWORDS: Dict[str, FrozenSet[str]] = {
    "red": frozenset({"red", "crimson", "scarlet", "burgundy"}),
    "blue": frozenset({"blue", "navy", "azure", "cyan"}),
    "green": frozenset({"green", "emerald", "lime", "forest"}),
    "yellow": frozenset({"yellow", "gold", "amber", "lemon"}),
    "purple": frozenset({"purple", "violet", "magenta", "lavender"}),
    "orange": frozenset({"orange", "coral", "peach", "tangerine"}),
    "black": frozenset({"black", "dark", "ebony", "charcoal"}),
    "white": frozenset({"white", "ivory", "pearl", "snow"}),
}

TECHNICAL_KEYWORDS = frozenset(
    {
        "jpg", "jpeg", "png", "gif", "webp", "bmp", "tiff",
        "high", "low", "resolution", "quality", "size", "format",
        "animated", "transparent", "compression",
    }
)

VISUAL_KEYWORDS = frozenset(
    {
        "landscape", "portrait", "square", "panoramic",
        "bright", "dark", "colorful", "monochrome", "vibrant",
        "contrast", "saturation", "exposure",
    }
)

CONTENT_KEYWORDS: Dict[str, FrozenSet[str]] = {
    "NATURE": frozenset({"nature", "landscape", "outdoor"}),
    "PEOPLE": frozenset({"people", "person", "portrait"}),
    "ARCHITECTURE": frozenset({"architecture", "building", "structure"}),
    "ART": frozenset({"art", "artistic", "creative"}),
    "TECHNOLOGY": frozenset({"technology", "tech", "digital"}),
}

FORMAT_KEYWORDS: Dict[str, FrozenSet[str]] = {
    "JPEG": frozenset({"jpg", "jpeg"}),
    "PNG": frozenset({"png"}),
    "GIF": frozenset({"gif"}),
    "WEBP": frozenset({"webp"}),
}

ORIENTATION_KEYWORDS = (
    ("LANDSCAPE", ("landscape", "wide")),
    ("PORTRAIT", ("portrait", "tall")),
    ("SQUARE", ("square",)),
    ("PANORAMIC", ("panoramic", "panorama")),
)

RESOLUTION_ORDER = ("LOW", "MEDIUM", "HIGH", "ULTRA_HIGH")

STOP_WORDS = frozenset({"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"})

_PHRASE_PATTERN = re.compile(r'"([^"]+)"')


class QueryType(str, Enum):
    SEMANTIC = "SEMANTIC"
    TECHNICAL = "TECHNICAL"
    VISUAL = "VISUAL"
    COLOR = "COLOR"
    CONTENT = "CONTENT"


class QueryComplexity(str, Enum):
    SIMPLE = "SIMPLE"
    MEDIUM = "MEDIUM"
    COMPLEX = "COMPLEX"


@dataclass
class SearchCriteria:
    """Structured interpretation of a query used to score candidates."""

    original_query: str = ""
    normalized_query: str = ""
    primary_type: QueryType = QueryType.SEMANTIC
    complexity: QueryComplexity = QueryComplexity.SIMPLE
    terms: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    phrases: List[str] = field(default_factory=list)
    has_time_reference: bool = False
    file_formats: Set[str] = field(default_factory=set)
    min_resolution: Optional[str] = None
    max_resolution: Optional[str] = None
    orientation: Optional[str] = None
    min_brightness: Optional[float] = None
    max_brightness: Optional[float] = None
    has_transparency: Optional[bool] = None
    is_animated: Optional[bool] = None
    content_categories: Set[str] = field(default_factory=set)
    color_keywords: Set[str] = field(default_factory=set)
    scene_type: Optional[str] = None


def mentions(text: str, term: str) -> bool:
    """Return True when ``term`` occurs in ``text`` on word boundaries."""

    return re.search(rf"\b{re.escape(term)}\b", text) is not None


def resolution_rank(category: Optional[str]) -> Optional[int]:
    if category is None or category not in RESOLUTION_ORDER:
        return None
    return RESOLUTION_ORDER.index(category)


class QueryAnalyzer:
    """Build :class:`SearchCriteria` from a :class:`SearchQuery`.

    Free-text cues ("png", "wide", "bright") imply filters; the explicit query
    fields (color query, scene type, file formats, orientation) are merged on top.
    """

    def analyze(self, query: SearchQuery) -> SearchCriteria:
        original = query.text or ""
        normalized = " ".join(original.lower().split())

        criteria = SearchCriteria(original_query=original, normalized_query=normalized)
        self._extract_terms(criteria)
        self._analyze_complexity(criteria)
        self._build_filters(criteria)
        self._apply_explicit_filters(criteria, query)
        criteria.primary_type = self._classify(criteria, query)
        return criteria

    def _extract_terms(self, criteria: SearchCriteria) -> None:
        criteria.terms = criteria.normalized_query.split() if criteria.normalized_query else []
        keywords: List[str] = []
        for term in criteria.terms:
            if term not in STOP_WORDS and len(term) > 2 and term not in keywords:
                keywords.append(term)
        criteria.keywords = keywords
        criteria.phrases = _PHRASE_PATTERN.findall(criteria.original_query)

    def _analyze_complexity(self, criteria: SearchCriteria) -> None:
        query = criteria.normalized_query
        count = len(criteria.terms)
        if count <= 2:
            criteria.complexity = QueryComplexity.SIMPLE
        elif count <= 5:
            criteria.complexity = QueryComplexity.MEDIUM
        else:
            criteria.complexity = QueryComplexity.COMPLEX

        criteria.has_time_reference = any(mentions(query, word) for word in ("recent", "old", "new"))

    def _build_filters(self, criteria: SearchCriteria) -> None:
        query = criteria.normalized_query
        if not query:
            return

        for file_format, words in FORMAT_KEYWORDS.items():
            if any(mentions(query, word) for word in words):
                criteria.file_formats.add(file_format)

        if any(mentions(query, cue) for cue in ("high resolution", "hd", "high quality")):
            criteria.min_resolution = "HIGH"
        if any(mentions(query, cue) for cue in ("low resolution", "small")):
            criteria.max_resolution = "LOW"

        if any(mentions(query, cue) for cue in ("transparent", "transparency")):
            criteria.has_transparency = True
        if any(mentions(query, cue) for cue in ("animated", "animation")):
            criteria.is_animated = True

        for color, words in COLOR_KEYWORDS.items():
            if any(mentions(query, word) for word in words):
                criteria.color_keywords.add(color)

        if any(mentions(query, cue) for cue in ("bright", "light")):
            criteria.min_brightness = 0.7
        if any(mentions(query, cue) for cue in ("dark", "dim")):
            criteria.max_brightness = 0.3

        for orientation, cues in ORIENTATION_KEYWORDS:
            if any(mentions(query, cue) for cue in cues):
                criteria.orientation = orientation
                break

        for category, words in CONTENT_KEYWORDS.items():
            if any(mentions(query, word) for word in words):
                criteria.content_categories.add(category)

    def _apply_explicit_filters(self, criteria: SearchCriteria, query: SearchQuery) -> None:
        if query.color_query and query.color_query.strip():
            color = query.color_query.strip().lower()
            matched = [name for name, words in COLOR_KEYWORDS.items() if color in words]
            criteria.color_keywords.update(matched or [color])
        if query.scene_type and query.scene_type.strip():
            criteria.scene_type = query.scene_type.strip()
        if query.file_formats:
            criteria.file_formats.update(fmt.strip().upper() for fmt in query.file_formats if fmt.strip())
        if query.orientation and query.orientation.strip():
            criteria.orientation = query.orientation.strip().upper()

    def _classify(self, criteria: SearchCriteria, query: SearchQuery) -> QueryType:
        text = criteria.normalized_query
        if not text:
            if query.color_query:
                return QueryType.COLOR
            if query.image_id is not None or query.scene_type:
                return QueryType.VISUAL
            return QueryType.SEMANTIC

        if any(mentions(text, word) for words in COLOR_KEYWORDS.values() for word in words):
            return QueryType.COLOR
        if any(mentions(text, word) for word in TECHNICAL_KEYWORDS):
            return QueryType.TECHNICAL
        if any(mentions(text, word) for word in VISUAL_KEYWORDS):
            return QueryType.VISUAL
        if any(mentions(text, word) for word in ("nature", "people", "architecture", "art", "technology")):
            return QueryType.CONTENT
        return QueryType.SEMANTIC

from __future__ import annotations

from core.models.domain import SearchQuery
from core.search.criteria import QueryAnalyzer, QueryComplexity, QueryType, mentions, resolution_rank


def analyze(**kwargs):
    return QueryAnalyzer().analyze(SearchQuery(**kwargs))


def test_terms_keywords_and_stop_words():
    criteria = analyze(text="A Photo of the  Beach")
    assert criteria.normalized_query == "a photo of the beach"
    assert criteria.terms == ["a", "photo", "of", "the", "beach"]
    assert criteria.keywords == ["photo", "beach"]
    assert criteria.complexity is QueryComplexity.MEDIUM


def test_quoted_phrases_are_extracted():
    criteria = analyze(text='"golden hour" beach')
    assert criteria.phrases == ["golden hour"]


def test_complexity_buckets():
    assert analyze(text="sunset beach").complexity is QueryComplexity.SIMPLE
    assert analyze(text="one two three four five six").complexity is QueryComplexity.COMPLEX


def test_filters_derived_from_text():
    criteria = analyze(text="red png sunset")
    assert criteria.color_keywords == {"red"}
    assert criteria.file_formats == {"PNG"}
    assert criteria.primary_type is QueryType.COLOR


def test_visual_cues_set_orientation_brightness_and_category():
    criteria = analyze(text="wide bright landscape")
    assert criteria.orientation == "LANDSCAPE"
    assert criteria.min_brightness == 0.7
    assert "NATURE" in criteria.content_categories
    assert criteria.primary_type is QueryType.VISUAL


def test_time_reference_uses_word_boundaries():
    assert analyze(text="recent sunset photos").has_time_reference
    assert not analyze(text="newspaper clippings").has_time_reference


def test_explicit_fields_are_merged():
    criteria = analyze(color_query="Navy", scene_type="landscape", file_formats=frozenset({"webp"}), orientation="square")
    assert criteria.color_keywords == {"blue"}
    assert criteria.scene_type == "landscape"
    assert criteria.file_formats == {"WEBP"}
    assert criteria.orientation == "SQUARE"
    assert criteria.primary_type is QueryType.COLOR


def test_unknown_color_query_is_kept_verbatim():
    assert analyze(color_query="teal").color_keywords == {"teal"}


def test_textless_queries_classify_by_signal():
    assert analyze(image_id=3).primary_type is QueryType.VISUAL
    assert analyze(scene_type="urban").primary_type is QueryType.VISUAL


def test_technical_and_content_classification():
    assert analyze(text="animated banner").primary_type is QueryType.TECHNICAL
    assert analyze(text="people dancing").primary_type is QueryType.CONTENT
    assert analyze(text="birthday party").primary_type is QueryType.SEMANTIC


def test_helpers():
    assert mentions("a red car", "red")
    assert not mentions("a reddish car", "red")
    assert resolution_rank("HIGH") > resolution_rank("LOW")
    assert resolution_rank(None) is None

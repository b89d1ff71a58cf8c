from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from config import ScoringSettings
from core.models.domain import CandidateHit, MatchType, SearchQuery
from core.search.criteria import QueryAnalyzer
from core.search.scoring import SIGNAL_LABELS, WeightedScorer, clamp, days_between

from conftest import NOW, make_metadata, make_record


def criteria_for(**kwargs):
    return QueryAnalyzer().analyze(SearchQuery(**kwargs))


def _no_signals():
    return {label: 0.0 for label in SIGNAL_LABELS}


def labels(adjustments):
    return [adjustment.label for adjustment in adjustments]


def component_sum(result):
    return clamp(
        result.description_score
        + result.tag_score
        + result.filename_score
        + result.metadata_score
        + result.bonus_score
        - result.penalty_score
    )


def test_total_is_clamped_sum_of_components(catalog):
    scorer = WeightedScorer()
    criteria = criteria_for(text="sunset beach", scene_type="landscape")
    for image_id in (1, 2, 3, 4, 8):
        record = catalog.find_active_by_id(image_id)
        metadata = catalog.find_metadata_by_id(image_id)
        result = scorer.score(CandidateHit(image_id, 0.9, MatchType.TEXT), record, metadata, criteria, NOW)

        assert 0.0 <= result.total_score <= 1.0
        assert result.total_score == pytest.approx(component_sum(result))


def test_description_match_is_weighted_by_query_type():
    record = make_record(1, description="a sunset over the ocean")
    result = WeightedScorer().score(CandidateHit(1, 0.8, MatchType.TEXT), record, None, criteria_for(text="sunset"), NOW)

    # Partial keyword match (0.6) under the semantic description weight (0.45).
    assert result.description_score == pytest.approx(0.27)
    assert result.tag_score == 0.0


def test_explanation_lists_signals_by_contribution():
    record = make_record(1, description="sunset", tags="sunset")
    result = WeightedScorer().score(CandidateHit(1, 1.0, MatchType.TEXT), record, None, criteria_for(text="sunset"), NOW)

    assert result.description_score == pytest.approx(0.45)
    assert result.tag_score == pytest.approx(0.35)
    assert result.explanation.startswith("matched description and tags; multi-signal agreement bonus applied")
    assert result.explanation.endswith("penalized for missing AI metadata")


def test_explanation_without_text_signals_names_the_strategy():
    record = make_record(1)
    result = WeightedScorer().score(
        CandidateHit(1, 0.7, MatchType.COLOR), record, None, criteria_for(color_query="blue"), NOW
    )
    assert result.explanation.startswith("matched via color strategy only")


def test_scene_agreement_bonus():
    record = make_record(1, description="hills")
    metadata = make_metadata(1, scene_classification="landscape")
    result = WeightedScorer().score(
        CandidateHit(1, 0.95, MatchType.SCENE), record, metadata, criteria_for(scene_type="landscape"), NOW
    )

    assert "scene classification bonus applied" in result.explanation
    # Only the scene check applies: 0.8 raw under the visual metadata weight (0.3).
    assert result.metadata_score == pytest.approx(0.24)


def test_metadata_checks_cover_structural_filters():
    scorer = WeightedScorer()
    criteria = criteria_for(text="wide bright landscape")
    record = make_record(1, orientation="LANDSCAPE", content_category="NATURE")

    assert scorer.metadata_signal(record, None, criteria) == pytest.approx(0.8 * 2 / 3)
    assert scorer.metadata_signal(make_record(2, file_format="PNG"), None, criteria_for(text="png")) == pytest.approx(0.8)
    assert scorer.metadata_signal(make_record(3), None, criteria_for(text="png")) == 0.0


def test_color_check_reads_dominant_colors_and_palette():
    scorer = WeightedScorer()
    criteria = criteria_for(color_query="navy")

    assert scorer.metadata_signal(make_record(1, dominant_colors=["Blue"]), None, criteria) == pytest.approx(0.8)
    assert scorer.metadata_signal(make_record(2), make_metadata(2, color_palette="light blue,white"), criteria) == pytest.approx(0.8)
    assert scorer.metadata_signal(make_record(3, dominant_colors=["red"]), None, criteria) == 0.0


def test_complex_queries_shift_weight_to_text_signals():
    criteria = criteria_for(text="one two three four five six")
    weights = WeightedScorer().weights_for(criteria)

    assert weights["description"] == pytest.approx(0.495)
    assert weights["tags"] == pytest.approx(0.385)
    assert weights["filename"] == pytest.approx(0.135)
    assert weights["metadata"] == pytest.approx(0.045)


def test_stale_and_low_confidence_metadata_are_penalized():
    record = make_record(1, description="x", tags="x")
    metadata = make_metadata(1, processed_at=NOW - timedelta(days=400), confidence_score=0.3)
    penalties = WeightedScorer().penalties(record, metadata, criteria_for(text="x"), NOW)

    assert labels(penalties) == ["stale AI metadata", "low AI confidence"]


def test_missing_fields_are_penalized():
    penalties = WeightedScorer().penalties(make_record(1), None, criteria_for(text="x"), NOW)
    assert labels(penalties) == ["missing AI metadata", "missing description", "missing tags"]


def test_time_references_favor_fresh_records():
    scorer = WeightedScorer()
    criteria = criteria_for(text="recent sunset")
    hit = CandidateHit(1, 0.5, MatchType.TEXT)

    fresh = make_record(1, created_at=NOW)
    fresh_bonus = {b.label: b.value for b in scorer.bonuses(hit, fresh, None, criteria, _no_signals(), NOW)}
    assert fresh_bonus["freshness"] == pytest.approx(0.2)

    old = make_record(2, created_at=NOW - timedelta(days=400))
    assert "freshness" not in labels(scorer.bonuses(hit, old, None, criteria, _no_signals(), NOW))
    assert "outdated record" in labels(scorer.penalties(old, None, criteria, NOW))


def test_popularity_and_richness_bonuses_are_capped():
    record = make_record(
        1,
        description="d",
        tags="t",
        ai_generated_tags="a",
        dominant_colors=["red"],
        view_count=10**9,
    )
    metadata = make_metadata(1, ai_description="d", ai_tags="t")
    bonuses = {
        b.label: b.value
        for b in WeightedScorer().bonuses(
            CandidateHit(1, 0.1, MatchType.TEXT), record, metadata, criteria_for(text="q"), _no_signals(), NOW
        )
    }
    assert bonuses["metadata richness"] == pytest.approx(0.1)
    assert bonuses["popularity"] == pytest.approx(0.05)


def test_total_is_clamped_to_unit_interval():
    record = make_record(1, description="sunset")
    hit = CandidateHit(1, 0.9, MatchType.TEXT)
    criteria = criteria_for(text="sunset")

    low = WeightedScorer(ScoringSettings(missing_metadata_penalty=2.0)).score(hit, record, None, criteria, NOW)
    assert low.total_score == 0.0
    assert low.penalty_score >= 2.0

    high = WeightedScorer(ScoringSettings(high_confidence_bonus=5.0)).score(hit, record, None, criteria, NOW)
    assert high.total_score == 1.0


def test_scoring_is_deterministic_for_a_fixed_reference_time(catalog):
    scorer = WeightedScorer()
    criteria = criteria_for(text="sunset ocean")
    record = catalog.find_active_by_id(1)
    metadata = catalog.find_metadata_by_id(1)
    hit = CandidateHit(1, 0.9, MatchType.SEMANTIC)

    assert scorer.score(hit, record, metadata, criteria, NOW) == scorer.score(hit, record, metadata, criteria, NOW)


def test_naive_timestamps_are_accepted():
    record = make_record(1, description="sunset", created_at=datetime(2025, 12, 1))
    result = WeightedScorer().score(CandidateHit(1, 0.9, MatchType.TEXT), record, None, criteria_for(text="sunset"), NOW)
    assert 0.0 <= result.total_score <= 1.0


def _no_signals():
    return {"description": 0.0, "tags": 0.0, "filename": 0.0, "metadata": 0.0}


def test_record_age_counts_whole_days():
    assert days_between(NOW, NOW - timedelta(days=2, hours=23)) == 2
    assert days_between(NOW, NOW - timedelta(hours=1)) == 0
    assert days_between(NOW.replace(tzinfo=None), NOW - timedelta(days=1)) == 1


def test_freshness_is_stable_within_a_day():
    scorer = WeightedScorer()
    criteria = criteria_for(text="sunset")
    hit = CandidateHit(1, 0.5, MatchType.TEXT)
    record = make_record(1, created_at=NOW - timedelta(days=10))

    morning = {b.label: b.value for b in scorer.bonuses(hit, record, None, criteria, _no_signals(), NOW)}
    evening = {b.label: b.value for b in scorer.bonuses(hit, record, None, criteria, _no_signals(), NOW + timedelta(hours=6))}
    assert morning["freshness"] == evening["freshness"]

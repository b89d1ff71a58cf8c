from __future__ import annotations

import pytest

from core.search.text import (
    MAX_TAGS_COUNT,
    contains_ci,
    edit_similarity,
    levenshtein_distance,
    overlap_similarity,
    process_tags,
    tag_relevance,
)


def test_process_tags_splits_cleans_and_dedupes():
    assert process_tags("Sunset, beach; sky  sunset,, #ocean!") == ["Sunset", "beach", "sky", "sunset", "ocean"]


def test_process_tags_handles_empty_input():
    assert process_tags(None) == []
    assert process_tags("  ") == []


def test_process_tags_caps_tag_count_and_length():
    tags = process_tags(",".join(f"tag{i}" for i in range(40)))
    assert len(tags) == MAX_TAGS_COUNT

    long_tag = process_tags("x" * 80)[0]
    assert len(long_tag) == 50


def test_levenshtein_distance_matches_known_values():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("same", "same") == 0
    assert levenshtein_distance("flaw", "lawn") == 2
    assert levenshtein_distance("abc", "xaxbxc") == 3
    assert levenshtein_distance("sunday", "saturday") == 3


def test_edit_similarity_is_normalised():
    assert edit_similarity("sunset", "sunset") == 1.0
    assert edit_similarity("sunsets", "sunset") == pytest.approx(1 - 1 / 7)
    assert edit_similarity("", "") == 1.0


def test_overlap_similarity_prefers_equality_then_containment():
    assert overlap_similarity("sunset", "sunset") == 1.0
    assert overlap_similarity("a sunset over the ocean", "sunset") == 0.8
    assert overlap_similarity("abc", "xyz") == 0.0


def test_tag_relevance_exact_and_partial_matches():
    assert tag_relevance(["sunset"], "sunset") == 1.0
    # One exact match normalised by two tags.
    assert tag_relevance(["sunset", "beach"], "sunset") == pytest.approx(0.5)
    # Partial containment plus edit similarity.
    assert tag_relevance(["sunsets"], "sunset") == pytest.approx(1.0)


def test_tag_relevance_without_overlap_is_zero():
    assert tag_relevance(["cat"], "ocean") == 0.0
    assert tag_relevance([], "ocean") == 0.0
    assert tag_relevance(["cat"], None) == 0.0


def test_contains_ci_treats_missing_text_as_no_match():
    assert contains_ci("A Sunset Over", "sunset")
    assert not contains_ci(None, "sunset")
    assert not contains_ci("sunset", "")

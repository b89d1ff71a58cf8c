# Path: core/search/text.py
# Purpose: Text helpers shared by strategy runners and the scoring engine.
# Layer: core/search.
# Details: Tag splitting and cleanup, tag relevance, and edit-distance based string similarity.

from __future__ import annotations

import re
from typing import List, Optional, Sequence

import numpy as np

TAG_DELIMITER_PATTERN = re.compile(r"[,;\s]+")
# Keep word characters, CJK ideographs, hyphens and underscores.
TAG_CLEANUP_PATTERN = re.compile(r"[^\w\u4e00-\u9fff\-_]")
MAX_TAG_LENGTH = 50
MAX_TAGS_COUNT = 20


def contains_ci(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test that treats a missing haystack as no match."""

    if not haystack or not needle:
        return False
    return needle.lower() in haystack.lower()


def process_tags(raw_tags: Optional[str]) -> List[str]:
    """Split a delimited tag string into cleaned, distinct tags (first occurrence wins)."""

    if not raw_tags or not raw_tags.strip():
        return []

    tags: List[str] = []
    for piece in TAG_DELIMITER_PATTERN.split(raw_tags):
        tag = TAG_CLEANUP_PATTERN.sub("", piece.strip())[:MAX_TAG_LENGTH]
        if tag and tag not in tags:
            tags.append(tag)
        if len(tags) >= MAX_TAGS_COUNT:
            break
    return tags


def levenshtein_distance(first: str, second: str) -> int:
    """Classic edit distance, with each row updated as whole numpy vectors."""

    if not first:
        return len(second)
    if not second:
        return len(first)

    other = np.array([ord(char) for char in second])
    offsets = np.arange(len(second) + 1)
    previous = offsets
    for i, char in enumerate(first, start=1):
        cost = (other != ord(char)).astype(int)
        candidates = np.empty_like(previous)
        candidates[0] = i
        candidates[1:] = np.minimum(previous[1:] + 1, previous[:-1] + cost)
        # Insertions chain left to right: current[j] = min over k <= j of candidates[k] + (j - k).
        previous = np.minimum.accumulate(candidates - offsets) + offsets
    return int(previous[-1])


def edit_similarity(first: str, second: str) -> float:
    """Return ``1 - distance / max_len`` in [0, 1]."""

    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(first, second) / longest


def overlap_similarity(text: str, term: str) -> float:
    """Similarity of a term against free text.

    Equal strings score 1.0 and containment scores 0.8. Otherwise the score is
    the Jaccard overlap of the character sets.
    """

    if text == term:
        return 1.0
    if term in text or text in term:
        return 0.8
    first, second = set(text), set(term)
    union = first | second
    return len(first & second) / len(union) if union else 0.0


def tag_relevance(tags: Sequence[str], query: Optional[str], similarity_threshold: float = 0.7) -> float:
    """Score how well a tag list covers the query terms, in [0, 1].

    Exact tag matches add 1.0. A tag that only partially matches adds 0.6, and
    a further 0.4 when it is also edit-similar to a term. The sum is normalised
    by the larger of tag count and term count.
    """

    if not tags or not query or not query.strip():
        return 0.0

    terms = [term for term in TAG_DELIMITER_PATTERN.split(query.lower().strip()) if term]
    if not terms:
        return 0.0

    total = 0.0
    matches = 0
    for tag in tags:
        normalized = tag.lower()
        if normalized in terms:
            total += 1.0
            matches += 1
            continue
        if any(normalized in term or term in normalized for term in terms):
            total += 0.6
            matches += 1
        if any(edit_similarity(normalized, term) > similarity_threshold for term in terms):
            total += 0.4
            matches += 1

    if matches == 0:
        return 0.0
    return min(total / max(len(tags), len(terms)), 1.0)

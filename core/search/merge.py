# Path: core/search/merge.py
# Purpose: Combine the hit lists of all strategies into one deduplicated candidate set.
# Layer: core/search.
# Details: Keeps the most confident hit per record, then ranks and truncates before scoring.

from __future__ import annotations

from typing import Dict, Iterable, List

from core.models.domain import CandidateHit


def merge_hits(hit_lists: Iterable[List[CandidateHit]], limit: int) -> List[CandidateHit]:
    """Deduplicate by record id and return at most ``limit`` hits, most confident first.

    Ties on confidence keep the first hit encountered; ties in the final ranking
    are broken by ascending record id.
    """

    best: Dict[int, CandidateHit] = {}
    for hits in hit_lists:
        for hit in hits:
            current = best.get(hit.image_id)
            if current is None or hit.confidence > current.confidence:
                best[hit.image_id] = hit

    ranked = sorted(best.values(), key=lambda hit: (-hit.confidence, hit.image_id))
    return ranked[:limit]

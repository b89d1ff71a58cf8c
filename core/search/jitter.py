# Path: core/search/jitter.py
# Purpose: Isolate the random confidence contributions of the strategy runners behind an injectable source.
# Layer: core/search.
# Details: Wraps a numpy Generator; tests pin values with a seed or with FixedJitter.

from __future__ import annotations

import threading
from typing import List, Optional

import numpy as np


class JitterSource:
    """Bounded random contribution standing in for an unmeasured similarity signal.

    A single source may be shared by concurrent requests, so draws are
    serialized; numpy generators are not thread-safe.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self._lock = threading.Lock()

    def draw(self, upper: float) -> float:
        """Return a value in ``[0, upper)``; zero when ``upper`` is not positive."""

        if upper <= 0:
            return 0.0
        with self._lock:
            return float(self._rng.uniform(0.0, upper))

    @classmethod
    def spawn(cls, seed: Optional[int], count: int) -> List["JitterSource"]:
        """Create ``count`` independent sources derived from one seed."""

        children = np.random.SeedSequence(seed).spawn(count)
        return [cls(np.random.default_rng(child)) for child in children]


class FixedJitter(JitterSource):
    """Deterministic source returning ``fraction * upper`` for every draw."""

    def __init__(self, fraction: float = 0.0) -> None:
        if not 0.0 <= fraction < 1.0:
            raise ValueError("fraction must be in [0, 1).")
        super().__init__(np.random.default_rng(0))
        self.fraction = fraction

    def draw(self, upper: float) -> float:
        if upper <= 0:
            return 0.0
        return self.fraction * upper

# Path: core/errors.py
# Purpose: Define the structured error hierarchy raised by the search engine.
# Layer: core.
# Details: Errors carry a stable code, HTTP status, and optional detail payload for API serialization.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from core.models.domain import StrategyFailure, StrategyKind


@dataclass(eq=False)
class SearchError(Exception):
    code: str
    message: str
    http_status: int = 400
    detail: Any | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }
        if self.detail is not None:
            payload["error"]["detail"] = self.detail
        return payload


class InvalidQueryError(SearchError):
    def __init__(self, message: str, *, detail: Any | None = None):
        super().__init__(code="INVALID_QUERY", message=message, http_status=400, detail=detail)


class AccessorUnavailableError(SearchError):
    def __init__(self, message: str = "Catalog accessor unavailable", *, detail: Any | None = None):
        super().__init__(code="ACCESSOR_UNAVAILABLE", message=message, http_status=503, detail=detail)


class AllStrategiesFailedError(SearchError):
    def __init__(self, failures: List[StrategyFailure]):
        super().__init__(
            code="ALL_STRATEGIES_FAILED",
            message="Every applicable search strategy failed",
            http_status=503,
            detail=[{"strategy": f.strategy.value, "reason": f.reason} for f in failures],
        )
        self.failures = failures

    @property
    def strategies(self) -> List[StrategyKind]:
        return [f.strategy for f in self.failures]


class SearchCancelledError(SearchError):
    def __init__(self, message: str = "Search was cancelled by the caller"):
        super().__init__(code="SEARCH_CANCELLED", message=message, http_status=499)


__all__ = [
    "AccessorUnavailableError",
    "AllStrategiesFailedError",
    "InvalidQueryError",
    "SearchCancelledError",
    "SearchError",
]

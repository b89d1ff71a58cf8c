# Path: core/catalog/base.py
# Purpose: Define the CatalogAccessor interface consumed by the search strategies.
# Layer: core/catalog.
# Details: Read-only lookups and bulk fetches over image records and their descriptive metadata.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from core.models.domain import DescriptiveMetadata, ImageRecord

RecordWithMetadata = Tuple[ImageRecord, DescriptiveMetadata]


class CatalogAccessor(ABC):
    """Abstract base class for pluggable catalog backends.

    Implementations hand out copies; the search engine never mutates what it
    receives. Any backend failure must be raised as
    :class:`core.errors.AccessorUnavailableError` so the orchestrator can report
    which strategy was affected.
    """

    name: str

    @abstractmethod
    def find_active_by_id(self, image_id: int) -> Optional[ImageRecord]:
        """Return the record when it exists and is active, otherwise None."""

    @abstractmethod
    def find_by_scene(self, scene: str) -> List[RecordWithMetadata]:
        """Return records whose metadata scene classification equals ``scene``."""

    @abstractmethod
    def find_recent(self, limit: int) -> List[ImageRecord]:
        """Return up to ``limit`` active records, newest first."""

    @abstractmethod
    def find_metadata_by_id(self, image_id: int) -> Optional[DescriptiveMetadata]:
        """Return descriptive metadata for a record if it has been generated."""

    @abstractmethod
    def search_metadata_by_description(self, keyword: str) -> List[RecordWithMetadata]:
        """Return records whose AI description matches any word of ``keyword``."""

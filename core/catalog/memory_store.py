# Path: core/catalog/memory_store.py
# Purpose: Provide an in-memory catalog accessor backed by a JSON snapshot.
# Layer: core/catalog.
# Details: Implements the accessor lookups over dictionaries; used by the API bootstrap, CLI, and tests.

from __future__ import annotations

import copy
import json
import re
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from core.models.domain import DescriptiveMetadata, ImageRecord, ImageStatus

from .base import CatalogAccessor, RecordWithMetadata

_WORD_PATTERN = re.compile(r"\w+")


class InMemoryCatalog(CatalogAccessor):
    """Minimal catalog accessor compatible with the search pipeline.

    Lookups return deep copies so callers cannot mutate stored state.
    """

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self._records: Dict[int, ImageRecord] = {}
        self._metadata: Dict[int, DescriptiveMetadata] = {}

    def add(self, record: ImageRecord, metadata: Optional[DescriptiveMetadata] = None) -> None:
        """Insert or replace a record and, optionally, its descriptive metadata."""

        if metadata is not None and metadata.image_id != record.id:
            raise ValueError(f"Metadata image_id {metadata.image_id} does not match record id {record.id}.")
        self._records[record.id] = copy.deepcopy(record)
        if metadata is not None:
            self._metadata[record.id] = copy.deepcopy(metadata)

    def add_many(self, records: Iterable[ImageRecord]) -> None:
        for record in records:
            self.add(record)

    def remove(self, image_id: int) -> None:
        """Drop a record and its metadata; unknown ids are ignored."""

        self._records.pop(image_id, None)
        self._metadata.pop(image_id, None)

    def __len__(self) -> int:
        return len(self._records)

    def find_active_by_id(self, image_id: int) -> Optional[ImageRecord]:
        record = self._records.get(image_id)
        if record is None or not record.is_active:
            return None
        return copy.deepcopy(record)

    def find_by_scene(self, scene: str) -> List[RecordWithMetadata]:
        pairs = [
            (record, self._metadata[record.id])
            for record in self._records.values()
            if record.id in self._metadata and self._metadata[record.id].scene_classification == scene
        ]
        return self._copy_pairs(self._by_confidence(pairs))

    def find_recent(self, limit: int) -> List[ImageRecord]:
        active = [record for record in self._records.values() if record.is_active]
        active.sort(key=lambda r: (r.created_at.timestamp() if r.created_at else float("-inf"), r.id), reverse=True)
        return [copy.deepcopy(record) for record in active[:limit]]

    def find_metadata_by_id(self, image_id: int) -> Optional[DescriptiveMetadata]:
        metadata = self._metadata.get(image_id)
        return copy.deepcopy(metadata) if metadata is not None else None

    def search_metadata_by_description(self, keyword: str) -> List[RecordWithMetadata]:
        words = set(_WORD_PATTERN.findall(keyword.lower()))
        if not words:
            return []

        pairs = []
        for image_id, metadata in self._metadata.items():
            record = self._records.get(image_id)
            if record is None or not metadata.ai_description:
                continue
            if words & set(_WORD_PATTERN.findall(metadata.ai_description.lower())):
                pairs.append((record, metadata))
        return self._copy_pairs(self._by_confidence(pairs))

    def save(self, path: str) -> None:
        """Persist records and metadata to disk as a JSON snapshot."""

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "records": [_encode(asdict(record)) for record in self._records.values()],
            "metadata": [_encode(asdict(metadata)) for metadata in self._metadata.values()],
        }
        target.write_text(json.dumps(payload, indent=2))

    def load(self, path: str) -> None:
        """Load a snapshot previously written by :meth:`save`, replacing current contents."""

        target = Path(path)
        if not target.exists():
            raise FileNotFoundError(f"Missing catalog snapshot {path}.")

        payload = json.loads(target.read_text())
        self._records = {}
        self._metadata = {}
        for raw in payload.get("records", []):
            record = record_from_dict(raw)
            self._records[record.id] = record
        for raw in payload.get("metadata", []):
            metadata = metadata_from_dict(raw)
            self._metadata[metadata.image_id] = metadata

    @classmethod
    def from_file(cls, path: str) -> "InMemoryCatalog":
        catalog = cls()
        catalog.load(path)
        return catalog

    @staticmethod
    def _by_confidence(pairs: List[RecordWithMetadata]) -> List[RecordWithMetadata]:
        return sorted(pairs, key=lambda pair: (-(pair[1].confidence_score or 0.0), pair[0].id))

    @staticmethod
    def _copy_pairs(pairs: List[RecordWithMetadata]) -> List[RecordWithMetadata]:
        return [(copy.deepcopy(record), copy.deepcopy(metadata)) for record, metadata in pairs]


def record_from_dict(raw: Dict[str, Any]) -> ImageRecord:
    """Build an :class:`ImageRecord` from a JSON-compatible mapping."""

    data = dict(raw)
    data["status"] = ImageStatus(int(data.get("status", ImageStatus.ACTIVE)))
    data["created_at"] = _parse_datetime(data.get("created_at"))
    data["dominant_colors"] = list(data.get("dominant_colors") or [])
    return ImageRecord(**data)


def metadata_from_dict(raw: Dict[str, Any]) -> DescriptiveMetadata:
    """Build a :class:`DescriptiveMetadata` from a JSON-compatible mapping."""

    data = dict(raw)
    data["processed_at"] = _parse_datetime(data.get("processed_at"))
    data["objects_detected"] = list(data.get("objects_detected") or [])
    if data.get("confidence_score") is not None:
        data["confidence_score"] = float(data["confidence_score"])
    return DescriptiveMetadata(**data)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _encode(data: Dict[str, Any]) -> Dict[str, Any]:
    encoded: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, datetime):
            encoded[key] = value.isoformat()
        elif isinstance(value, ImageStatus):
            encoded[key] = int(value)
        else:
            encoded[key] = value
    return encoded

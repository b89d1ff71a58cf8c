# Path: core/catalog/__init__.py
# Purpose: Package initializer for catalog accessor implementations.
# Layer: core/catalog.
# Details: Exposes the accessor interface and the in-memory JSON-backed accessor.

from .base import CatalogAccessor, RecordWithMetadata
from .memory_store import InMemoryCatalog, metadata_from_dict, record_from_dict

__all__ = ["CatalogAccessor", "InMemoryCatalog", "RecordWithMetadata", "metadata_from_dict", "record_from_dict"]

# Path: api/__init__.py
# Purpose: Package initializer for HTTP API layer.
# Layer: api.
# Details: Exposes the FastAPI application factory and the catalog-backed pipeline builder.

from .app import build_pipeline, create_app

__all__ = ["build_pipeline", "create_app"]

# Path: api/app.py
# Purpose: Expose a FastAPI application for image search operations.
# Layer: api.
# Details: Provides health checks, the aggregated search endpoint, and shortcut endpoints over the core pipeline.

from __future__ import annotations

from typing import Dict, Optional

from config import AppSettings
from core.catalog import InMemoryCatalog
from core.errors import SearchError
from core.logger import configure_logging, get_logger
from core.models.domain import SearchQuery, StrategyKind
from core.search.pipeline import SearchPipeline

from .schemas import SearchOptions, SearchRequest, SearchResponseBody

logger = get_logger("api")


def build_pipeline(settings: AppSettings) -> Optional[SearchPipeline]:
    """Load the configured catalog snapshot into a pipeline, or return None when none is configured."""

    if settings.catalog_path is None:
        return None
    catalog = InMemoryCatalog.from_file(str(settings.catalog_path))
    logger.info("Loaded %d catalog records from %s", len(catalog), settings.catalog_path)
    return SearchPipeline(catalog, settings)


def create_app(pipeline: Optional[SearchPipeline] = None, settings: Optional[AppSettings] = None):  # type: ignore[override]
    """Create a FastAPI app instance configured with the provided search pipeline."""

    from fastapi import FastAPI, HTTPException, Query, Request
    from fastapi.responses import JSONResponse

    settings = settings or (pipeline.settings if pipeline is not None else AppSettings.from_env())
    configure_logging(settings.log_level, settings.log_dir)
    if pipeline is None:
        pipeline = build_pipeline(settings)

    app = FastAPI(title="ImgSearch API", version="0.1.0")

    @app.exception_handler(SearchError)
    async def handle_search_error(_request: Request, exc: SearchError):
        logger.warning("Search failed: %s", exc)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    def run(query: SearchQuery) -> SearchResponseBody:
        if pipeline is None:
            raise HTTPException(status_code=500, detail="Search pipeline is not configured.")
        return SearchResponseBody.from_response(pipeline.search(query))

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Return a simple health status payload."""

        return {"status": "ok"}

    @app.post("/search", response_model=SearchResponseBody)
    def search(payload: SearchRequest):
        """Run an aggregated search across every applicable strategy."""

        return run(payload.to_query())

    @app.get("/search/images/{image_id}/similar", response_model=SearchResponseBody)
    def similar_images(image_id: int, limit: int = Query(default=10)):
        """Find images sharing the scene of a reference image."""

        return run(
            SearchQuery(
                image_id=image_id,
                limit=limit,
                min_confidence=0.3,
                search_types=frozenset({StrategyKind.VISUAL}),
            )
        )

    @app.get("/search/scene/{scene}", response_model=SearchResponseBody)
    def search_by_scene(scene: str, limit: int = Query(default=20)):
        return run(
            SearchQuery(
                scene_type=scene,
                limit=limit,
                min_confidence=0.6,
                search_types=frozenset({StrategyKind.SCENE}),
            )
        )

    @app.get("/search/color/{color}", response_model=SearchResponseBody)
    def search_by_color(color: str, limit: int = Query(default=15)):
        return run(
            SearchQuery(
                color_query=color,
                limit=limit,
                min_confidence=0.5,
                search_types=frozenset({StrategyKind.COLOR}),
            )
        )

    @app.get("/search/options", response_model=SearchOptions)
    def search_options():
        """List the scene, color and search types accepted by the search endpoints."""

        return SearchOptions()

    return app

# Path: scripts/quick_search_demo.py
# Purpose: Simple CLI to run a search query against a JSON catalog snapshot.
# Layer: scripts.
# Details: Loads the in-memory catalog, runs the search pipeline, and prints ranked results with explanations.

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings, StrategySettings
from core.catalog import InMemoryCatalog
from core.errors import SearchError
from core.logger import configure_logging
from core.models.domain import SearchQuery, StrategyKind
from core.search.pipeline import SearchPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a quick search against an image catalog snapshot")
    parser.add_argument("--catalog", type=Path, default=None, help="JSON catalog file (defaults to IMGSEARCH_CATALOG_PATH)")
    parser.add_argument("--text", type=str, default=None, help="Free-text query")
    parser.add_argument("--image-id", type=int, default=None, help="Reference image id for visual similarity")
    parser.add_argument("--color", type=str, default=None, help="Color to search for")
    parser.add_argument("--scene", type=str, default=None, help="Scene classification to search for")
    parser.add_argument("--limit", type=int, default=10, help="Number of results to return")
    parser.add_argument("--min-confidence", type=float, default=0.5, help="Minimum strategy confidence")
    parser.add_argument(
        "--types",
        nargs="+",
        choices=[kind.value for kind in StrategyKind],
        default=None,
        help="Explicit strategies to run; derived from the populated fields when omitted",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for strategy jitter")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Execute a quick search from the command line."""

    args = build_parser().parse_args(argv)

    settings = AppSettings.from_env()
    if args.seed is not None:
        settings.strategies = StrategySettings(**{**settings.strategies.model_dump(), "seed": args.seed})
    configure_logging(settings.log_level, settings.log_dir)

    catalog_path = args.catalog or settings.catalog_path
    if catalog_path is None:
        print("No catalog given; pass --catalog or set IMGSEARCH_CATALOG_PATH", file=sys.stderr)
        return 2

    pipeline = SearchPipeline(InMemoryCatalog.from_file(str(catalog_path)), settings)
    query = SearchQuery(
        text=args.text,
        image_id=args.image_id,
        color_query=args.color,
        scene_type=args.scene,
        limit=args.limit,
        min_confidence=args.min_confidence,
        search_types=frozenset(StrategyKind(value) for value in args.types) if args.types else None,
    )

    try:
        response = pipeline.search(query)
    except SearchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"{response.total_results} results, quality={response.search_quality.value}")
    for result in response.results:
        print(
            f"id={result.image_id} score={result.total_score:.3f} level={result.confidence_level.value} "
            f"url={result.record.url} :: {result.explanation}"
        )
    for failure in response.failed_strategies:
        print(f"strategy {failure.strategy.value} failed: {failure.reason}")
    for suggestion in response.insights.suggestions:
        print(f"hint: {suggestion}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

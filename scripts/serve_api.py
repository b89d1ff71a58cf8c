# Path: scripts/serve_api.py
# Purpose: Launch the HTTP search API over a JSON catalog snapshot.
# Layer: scripts.
# Details: Builds the FastAPI app from IMGSEARCH_* settings and serves it with uvicorn.

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api.app import create_app
from config import AppSettings


def main() -> None:
    """Serve the search API until interrupted."""

    import uvicorn

    parser = argparse.ArgumentParser(description="Serve the image search API")
    parser.add_argument("--catalog", type=Path, default=None, help="JSON catalog file (defaults to IMGSEARCH_CATALOG_PATH)")
    parser.add_argument("--host", type=str, default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.catalog is not None:
        settings.catalog_path = args.catalog

    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()

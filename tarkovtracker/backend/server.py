"""Command line entry point that serves the API with uvicorn."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from tarkovtracker.backend.api import create_app
from tarkovtracker.backend.config import load_settings
from tarkovtracker.backend.store import DocumentStore, InMemoryDocumentStore, create_store

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="TarkovTracker progress API")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--seed-file",
        type=Path,
        default=None,
        help="JSON file of {collection: {document_id: data}} loaded into an in-memory store",
    )
    return parser.parse_args(argv)


def build_store(seed_file: Path | None) -> DocumentStore:
    settings = load_settings()
    if seed_file is None:
        return create_store(database_url=settings.database_url, firestore_project=settings.firestore_project)
    store = InMemoryDocumentStore()
    store.seed(json.loads(seed_file.read_text(encoding="utf-8")))
    logger.info("Loaded seed documents from %s", seed_file)
    return store


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )

    app = create_app(store=build_store(args.seed_file))
    logger.info("Serving TarkovTracker API on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

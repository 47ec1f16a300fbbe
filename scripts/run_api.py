#!/usr/bin/env python3
"""
Run the catalog API with uvicorn.

Equivalent to:
  uvicorn --factory catalog.api.main:default_app --host 0.0.0.0 --port 8000

Set MONGODB_URL to use MongoDB; otherwise the in-memory store is used.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from catalog.api.main import create_app
from catalog.utils.config_loader import configure_logging, load_catalog_config

logger = logging.getLogger("run_api")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the catalog API")
    parser.add_argument("--config", type=Path, default=None, help="Path to catalog_config.yml")
    parser.add_argument("--host", default=None, help="Override server.host")
    parser.add_argument("--port", type=int, default=None, help="Override server.port")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    cfg = load_catalog_config(args.config)
    configure_logging(cfg.logging, verbose=args.verbose)

    host = args.host or cfg.server.host
    port = args.port or cfg.server.port
    logger.info("Listening on http://%s:%d", host, port)

    uvicorn.run(create_app(cfg), host=host, port=port, log_level="debug" if args.verbose else "info")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Create the catalog collections ("products", "categories") in MongoDB.

Uses MONGODB_URL (and optionally MONGODB_DB). Does NOT drop existing collections.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# Make sure the catalog package is on sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from catalog.utils.config_loader import load_catalog_config


async def _init(url: str, database: str, collections: list[str], timeout_ms: int) -> None:
    client = AsyncMongoClient(url, serverSelectionTimeoutMS=timeout_ms)
    try:
        await client.admin.command("ping")
        print("✅ Database connection OK")

        db = client[database]
        existing = set(await db.list_collection_names())
        for name in collections:
            if name in existing:
                print(f"   - {name}: already exists")
                continue
            await db.create_collection(name)
            print(f"   + {name}: created")
    finally:
        await client.close()


def main() -> int:
    cfg = load_catalog_config()
    if not cfg.store.url:
        print("MONGODB_URL is not set", file=sys.stderr)
        return 1

    try:
        asyncio.run(
            _init(
                cfg.store.url,
                cfg.store.database,
                [cfg.store.products_collection, cfg.store.categories_collection],
                cfg.store.server_selection_timeout_ms,
            )
        )
    except PyMongoError as e:
        print(f"❌ MongoDB error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

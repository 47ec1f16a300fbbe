"""
Application context: the store handle and the subscriber registry.

Built once at startup and handed to the API through FastAPI's lifespan, so
nothing in the service reaches for a module-level connection.
"""

from __future__ import annotations

import logging
from typing import Optional

from catalog.notifications.bus import NotificationBus
from catalog.services.catalog_service import CatalogService
from catalog.utils.config_loader import CatalogConfig

logger = logging.getLogger(__name__)


class CatalogContext:
    def __init__(self, config: CatalogConfig, db, bus: Optional[NotificationBus] = None) -> None:
        self.config = config
        self.db = db
        self.bus = bus or NotificationBus(topic=config.notifications.topic)
        self.service = CatalogService(db.categories, db.products, self.bus)

    async def connect(self) -> None:
        await self.db.connect()
        logger.info("Catalog context ready (store=%s)", self.db.backend)

    async def close(self) -> None:
        await self.bus.close()
        await self.db.close()
        logger.info("Catalog context closed")


def build_context(config: CatalogConfig) -> CatalogContext:
    """Use MongoDB when a store url is configured, else the in-memory store."""
    if config.store.url:
        from catalog.database.mongo_real import MongoCatalogDB

        db = MongoCatalogDB(
            url=config.store.url,
            database=config.store.database,
            products_collection=config.store.products_collection,
            categories_collection=config.store.categories_collection,
            server_selection_timeout_ms=config.store.server_selection_timeout_ms,
        )
    else:
        from catalog.database.mongo import InMemoryCatalogDB

        db = InMemoryCatalogDB()
    return CatalogContext(config, db)

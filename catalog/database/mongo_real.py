"""
Real MongoDB-backed catalog store for production when MONGODB_URL is set.
Implements the same interface as catalog.database.mongo (in-memory stub).

Product documents keep ``categoryIds`` as native ObjectIds so the joined
listing can be answered with a single ``$lookup`` aggregation.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from catalog.database.models import (
    Category,
    JoinedProductView,
    Product,
    ProductDraft,
    resolve_categories,
)
from catalog.error_handler import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error("MongoDB %s failed: %s", operation, e)
        raise StoreError(f"Store operation '{operation}' failed", details=str(e)) from e


def _category_from_doc(doc: Dict[str, Any]) -> Category:
    return Category(id=doc["_id"], name=doc.get("name", ""))


def _product_from_doc(doc: Dict[str, Any]) -> Product:
    return Product(
        id=doc["_id"],
        name=doc.get("name", ""),
        about=doc.get("about", ""),
        price=doc.get("price", 0),
        category_ids=list(doc.get("categoryIds") or []),
    )


def _draft_to_doc(draft: ProductDraft) -> Dict[str, Any]:
    return {
        "name": draft.name,
        "about": draft.about,
        "price": draft.price,
        "categoryIds": list(draft.category_ids),
    }


class CategoryStore:
    def __init__(self, collection) -> None:
        self._collection = collection

    async def create(self, name: str) -> Category:
        async with _store_errors("insert category"):
            ack = await self._collection.insert_one({"name": name})
        return Category(id=ack.inserted_id, name=name)

    async def get_many(self, ids: Iterable[ObjectId]) -> List[Category]:
        wanted = list(set(ids))
        if not wanted:
            return []
        async with _store_errors("find categories"):
            docs = await self._collection.find({"_id": {"$in": wanted}}).to_list(None)
        return [_category_from_doc(d) for d in docs]


class ProductStore:
    def __init__(self, collection, categories_collection_name: str) -> None:
        self._collection = collection
        self._categories_collection_name = categories_collection_name

    async def insert(self, draft: ProductDraft) -> Product:
        async with _store_errors("insert product"):
            ack = await self._collection.insert_one(_draft_to_doc(draft))
        return Product.from_draft(ack.inserted_id, draft)

    async def find_by_id(self, product_id: ObjectId) -> Optional[Product]:
        async with _store_errors("find product"):
            doc = await self._collection.find_one({"_id": product_id})
        return _product_from_doc(doc) if doc else None

    async def list_all_joined(self) -> List[JoinedProductView]:
        pipeline = [
            {"$match": {}},
            {
                "$lookup": {
                    "from": self._categories_collection_name,
                    "localField": "categoryIds",
                    "foreignField": "_id",
                    "as": "categories",
                }
            },
        ]
        async with _store_errors("list products"):
            cursor = await self._collection.aggregate(pipeline)
            docs = await cursor.to_list(None)

        views = []
        for doc in docs:
            product = _product_from_doc(doc)
            found = [_category_from_doc(c) for c in doc.get("categories") or []]
            views.append(JoinedProductView(product=product, categories=resolve_categories(product.category_ids, found)))
        return views

    async def replace(self, product_id: ObjectId, draft: ProductDraft) -> bool:
        async with _store_errors("update product"):
            ack = await self._collection.update_one({"_id": product_id}, {"$set": _draft_to_doc(draft)})
        return ack.matched_count > 0

    async def remove(self, product_id: ObjectId) -> bool:
        async with _store_errors("delete product"):
            ack = await self._collection.delete_one({"_id": product_id})
        return ack.deleted_count > 0


class MongoCatalogDB:
    """
    MongoDB data access for the catalog. Use when MONGODB_URL is set.

    The client connects lazily; ``connect()`` pings the server so a wrong URL
    fails at startup instead of on the first request.
    """

    backend = "mongo"

    def __init__(
        self,
        url: str,
        database: str = "myDB",
        products_collection: str = "products",
        categories_collection: str = "categories",
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self.client = AsyncMongoClient(url, serverSelectionTimeoutMS=server_selection_timeout_ms)
        self.db = self.client[database]
        self.categories = CategoryStore(self.db[categories_collection])
        self.products = ProductStore(self.db[products_collection], categories_collection)

    async def connect(self) -> None:
        async with _store_errors("ping"):
            await self.client.admin.command("ping")
        logger.info("Connected to MongoDB database '%s'", self.db.name)

    async def close(self) -> None:
        await self.client.close()

    async def ping(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError:
            return False

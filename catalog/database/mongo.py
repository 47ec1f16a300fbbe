"""
Lightweight in-memory MongoDB replacement for local development and tests.

Implements the same adapter interface as ``catalog.database.mongo_real`` so
the API can run without a database server. Identifiers are real ``ObjectId``s,
records are copied on the way in and out so callers never share state with
the store. It is NOT intended for production use.
"""

from __future__ import annotations

from dataclasses import replace as _copy
from typing import Dict, Iterable, List, Optional

from bson import ObjectId

from catalog.database.identifiers import new_identifier
from catalog.database.models import (
    Category,
    JoinedProductView,
    Product,
    ProductDraft,
    resolve_categories,
)


class CategoryStore:
    def __init__(self) -> None:
        # Dict preserves insertion order, which stands in for natural order.
        self._categories: Dict[ObjectId, Category] = {}

    async def create(self, name: str) -> Category:
        category = Category(id=new_identifier(), name=name)
        self._categories[category.id] = category
        return _copy(category)

    async def get_many(self, ids: Iterable[ObjectId]) -> List[Category]:
        found = []
        for cid in set(ids):
            category = self._categories.get(cid)
            if category is not None:
                found.append(_copy(category))
        return found


class ProductStore:
    def __init__(self, categories: CategoryStore) -> None:
        self._categories = categories
        self._products: Dict[ObjectId, Product] = {}

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #
    async def insert(self, draft: ProductDraft) -> Product:
        product = Product.from_draft(new_identifier(), draft)
        self._products[product.id] = product
        return _copy(product, category_ids=list(product.category_ids))

    async def replace(self, product_id: ObjectId, draft: ProductDraft) -> bool:
        if product_id not in self._products:
            return False
        self._products[product_id] = Product.from_draft(product_id, draft)
        return True

    async def remove(self, product_id: ObjectId) -> bool:
        return self._products.pop(product_id, None) is not None

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    async def find_by_id(self, product_id: ObjectId) -> Optional[Product]:
        product = self._products.get(product_id)
        if product is None:
            return None
        return _copy(product, category_ids=list(product.category_ids))

    async def list_all_joined(self) -> List[JoinedProductView]:
        views = []
        for product in list(self._products.values()):
            found = await self._categories.get_many(product.category_ids)
            views.append(
                JoinedProductView(
                    product=_copy(product, category_ids=list(product.category_ids)),
                    categories=resolve_categories(product.category_ids, found),
                )
            )
        return views


class InMemoryCatalogDB:
    """Both adapters plus the lifecycle hooks the application context expects."""

    backend = "memory"

    def __init__(self) -> None:
        self.categories = CategoryStore()
        self.products = ProductStore(self.categories)

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def ping(self) -> bool:
        return True

"""
Catalog service: validated writes, joined reads and change notification.

Every mutating operation runs the same linear pipeline:

1. parse the request body (shape and types),
2. decode identifiers (path id, then category references),
3. apply the write to the store adapter,
4. hand back a ``Mutation`` so the caller can respond,
5. ``publish`` the mutation's event once the response is on its way.

Nothing touches the store before steps 1-2 succeed, and an event only exists
for a write the store has already acknowledged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from catalog.api.schemas import ParseResult, parse_category_request, parse_product_request
from catalog.database import identifiers
from catalog.database.models import Category, JoinedProductView, Product, ProductDraft
from catalog.error_handler import NotFoundError, PayloadValidationError
from catalog.notifications.bus import CatalogChangeEvent, NotificationBus

logger = logging.getLogger(__name__)


@dataclass
class Mutation:
    """Outcome of a successful write: what to answer and what to broadcast."""

    event: CatalogChangeEvent
    product: Optional[Product] = None


class CatalogService:
    def __init__(self, categories, products, bus: NotificationBus):
        self.categories = categories
        self.products = products
        self.bus = bus

    # ------------------------------------------------------------------ #
    # Categories
    # ------------------------------------------------------------------ #
    async def create_category(self, body: Any) -> Category:
        """Create a category. Categories have no change events."""
        request = _unwrap(parse_category_request(body))
        category = await self.categories.create(request.name)
        logger.info("Created category %s", identifiers.encode(category.id))
        return category

    # ------------------------------------------------------------------ #
    # Product writes
    # ------------------------------------------------------------------ #
    async def create_product(self, body: Any) -> Mutation:
        draft = _draft(_unwrap(parse_product_request(body)))
        product = await self.products.insert(draft)
        logger.info("Created product %s", identifiers.encode(product.id))
        return Mutation(event=CatalogChangeEvent.created(product.to_dict()), product=product)

    async def replace_product(self, raw_id: Any, body: Any) -> Mutation:
        request = _unwrap(parse_product_request(body))
        product_id = identifiers.decode(raw_id, field="id")
        draft = _draft(request)
        if not await self.products.replace(product_id, draft):
            raise NotFoundError("Product", raw_id)
        logger.info("Replaced product %s", raw_id)
        return Mutation(event=CatalogChangeEvent.updated(identifiers.encode(product_id)))

    async def delete_product(self, raw_id: Any) -> Mutation:
        product_id = identifiers.decode(raw_id, field="id")
        if not await self.products.remove(product_id):
            raise NotFoundError("Product", raw_id)
        logger.info("Deleted product %s", raw_id)
        return Mutation(event=CatalogChangeEvent.deleted(identifiers.encode(product_id)))

    async def publish(self, event: CatalogChangeEvent) -> int:
        return await self.bus.broadcast(event)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    async def get_product(self, raw_id: Any) -> Product:
        product_id = identifiers.decode(raw_id, field="id")
        product = await self.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", raw_id)
        return product

    async def list_products(self) -> List[JoinedProductView]:
        return await self.products.list_all_joined()


def _unwrap(result: ParseResult):
    if not result.ok:
        raise PayloadValidationError(result.errors)
    return result.value


def _draft(request) -> ProductDraft:
    return ProductDraft(
        name=request.name,
        about=request.about,
        price=request.price,
        category_ids=identifiers.decode_many(request.categoryIds),
    )

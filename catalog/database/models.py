"""
Catalog records shared by the in-memory and MongoDB store adapters.

Identifiers are kept in their store-native form (``ObjectId``) and only
encoded to strings by ``to_dict()`` at the API boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from bson import ObjectId

from catalog.database.identifiers import encode


@dataclass
class Category:
    id: ObjectId
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": encode(self.id), "name": self.name}


@dataclass
class ProductDraft:
    """Validated, decoded write payload for a Product (no id yet)."""

    name: str
    about: str
    price: float
    category_ids: List[ObjectId] = field(default_factory=list)


@dataclass
class Product:
    id: ObjectId
    name: str
    about: str
    price: float
    category_ids: List[ObjectId] = field(default_factory=list)

    @classmethod
    def from_draft(cls, product_id: ObjectId, draft: ProductDraft) -> "Product":
        return cls(
            id=product_id,
            name=draft.name,
            about=draft.about,
            price=draft.price,
            category_ids=list(draft.category_ids),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": encode(self.id),
            "name": self.name,
            "about": self.about,
            "price": self.price,
            "categoryIds": [encode(c) for c in self.category_ids],
        }


@dataclass
class JoinedProductView:
    """A Product with its category references resolved; never persisted."""

    product: Product
    categories: List[Category] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.product.to_dict()
        data["categories"] = [c.to_dict() for c in self.categories]
        return data


def resolve_categories(category_ids: List[ObjectId], found: List[Category]) -> List[Category]:
    """Order resolved categories like ``category_ids``; unknown ids are dropped."""
    by_id = {c.id: c for c in found}
    resolved: List[Category] = []
    seen = set()
    for cid in category_ids:
        if cid in seen or cid not in by_id:
            continue
        seen.add(cid)
        resolved.append(by_id[cid])
    return resolved

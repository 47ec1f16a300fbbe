"""
Request DTOs for the catalog API.

Bodies are parsed explicitly (not through FastAPI's implicit body binding) so
a malformed payload turns into a ``ParseResult`` failure that the service
maps to a 400, with the same error shape for both schemas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, StrictStr, ValidationError

T = TypeVar("T")


class CreateCategoryRequest(BaseModel):
    name: StrictStr


class ProductRequest(BaseModel):
    """Body of POST /products and PUT /products/{id}."""

    name: StrictStr
    about: StrictStr
    price: float = Field(..., gt=0, strict=True, allow_inf_nan=False)
    categoryIds: List[StrictStr]


@dataclass
class ParseResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, errors: List[Dict[str, Any]]) -> "ParseResult[T]":
        return cls(ok=False, errors=errors)


def _error_list(exc: ValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


def _parse(model: type, body: Any) -> ParseResult:
    if not isinstance(body, dict):
        return ParseResult.failure([{"loc": [], "msg": "Request body must be a JSON object", "type": "dict_type"}])
    try:
        return ParseResult.success(model.model_validate(body))
    except ValidationError as e:
        return ParseResult.failure(_error_list(e))


def parse_category_request(body: Any) -> ParseResult[CreateCategoryRequest]:
    return _parse(CreateCategoryRequest, body)


def parse_product_request(body: Any) -> ParseResult[ProductRequest]:
    return _parse(ProductRequest, body)

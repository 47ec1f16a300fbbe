"""
Identifier codec: external string ids <-> store-native ``ObjectId``.

Only 24-digit hexadecimal strings are accepted. ``bson.ObjectId`` itself also
accepts raw 12-byte values, which must never reach the store from the API.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from catalog.error_handler import InvalidIdentifierError

_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")


def decode(raw: Any, field: Optional[str] = None) -> ObjectId:
    if not isinstance(raw, str) or not _OBJECT_ID_RE.fullmatch(raw):
        raise InvalidIdentifierError(raw, field=field)
    try:
        return ObjectId(raw)
    except InvalidId as e:  # pragma: no cover - regex already guarantees the format
        raise InvalidIdentifierError(raw, field=field) from e


def encode(identifier: ObjectId) -> str:
    return str(identifier)


def decode_many(raws: Iterable[Any], field: str = "categoryIds") -> List[ObjectId]:
    """Decode every entry or none of them; order and duplicates are preserved."""
    return [decode(raw, field=f"{field}[{i}]") for i, raw in enumerate(raws)]


def new_identifier() -> ObjectId:
    return ObjectId()

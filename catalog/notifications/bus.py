"""
In-process notification bus for catalog change events.

Delivery is at-most-once and best-effort: an event goes to the subscribers
connected at broadcast time, nothing is persisted or replayed, and
subscribers never acknowledge. A subscriber whose send fails is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

PRODUCTS_TOPIC = "products"


class Subscriber(Protocol):
    async def send_json(self, data: Any) -> None: ...


@dataclass(frozen=True)
class CatalogChangeEvent:
    action: str  # created / updated / deleted
    product: Optional[Dict[str, Any]] = None
    id: Optional[str] = None

    @classmethod
    def created(cls, product: Dict[str, Any]) -> "CatalogChangeEvent":
        return cls(action="created", product=product)

    @classmethod
    def updated(cls, product_id: str) -> "CatalogChangeEvent":
        return cls(action="updated", id=product_id)

    @classmethod
    def deleted(cls, product_id: str) -> "CatalogChangeEvent":
        return cls(action="deleted", id=product_id)

    def to_message(self) -> Dict[str, Any]:
        if self.product is not None:
            return {"action": self.action, "product": self.product}
        return {"action": self.action, "id": self.id}


class NotificationBus:
    def __init__(self, topic: str = PRODUCTS_TOPIC) -> None:
        self.topic = topic
        # Keyed by identity: WebSocket objects are Mappings, so neither hashable
        # nor safe to compare with ==.
        self._subscribers: Dict[int, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers[id(subscriber)] = subscriber
        logger.info("Subscriber connected to '%s' (%d connected)", self.topic, len(self._subscribers))

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if self._subscribers.pop(id(subscriber), None) is not None:
            logger.info("Subscriber disconnected from '%s' (%d connected)", self.topic, len(self._subscribers))

    async def broadcast(self, event: CatalogChangeEvent) -> int:
        """Send ``event`` to every current subscriber; returns the number of deliveries."""
        message = event.to_message()
        delivered = 0
        # Snapshot: subscribers may come and go while we await sends.
        for key, subscriber in list(self._subscribers.items()):
            try:
                await subscriber.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping subscriber after failed send on '%s': %s", self.topic, e)
                self._subscribers.pop(key, None)
        logger.info("Broadcast '%s' event on '%s' to %d subscriber(s)", event.action, self.topic, delivered)
        return delivered

    async def close(self) -> None:
        self._subscribers.clear()

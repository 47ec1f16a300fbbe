"""Pytest fixtures for catalog store, service and API tests."""

import pytest
from starlette.testclient import TestClient

from catalog.api.main import create_app
from catalog.context import CatalogContext
from catalog.database.mongo import InMemoryCatalogDB
from catalog.notifications.bus import NotificationBus
from catalog.services.catalog_service import CatalogService
from catalog.utils.config_loader import CatalogConfig, ServerConfig


class RecordingSubscriber:
    """Stands in for a WebSocket; keeps every message it is sent."""

    def __init__(self, fail: bool = False):
        self.messages = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise ConnectionError("socket closed")
        self.messages.append(data)


@pytest.fixture
def db():
    """In-memory catalog store for tests."""
    return InMemoryCatalogDB()


@pytest.fixture
def bus():
    return NotificationBus()


@pytest.fixture
def subscriber(bus):
    sub = RecordingSubscriber()
    bus.subscribe(sub)
    return sub


@pytest.fixture
def service(db, bus):
    return CatalogService(db.categories, db.products, bus)


@pytest.fixture
def context(db):
    config = CatalogConfig(server=ServerConfig(static_dir=None))
    return CatalogContext(config, db)


@pytest.fixture
def client(context):
    # Entering the client runs the lifespan and keeps HTTP and WebSocket
    # traffic on one event loop.
    with TestClient(create_app(context=context)) as c:
        yield c


@pytest.fixture
def make_subscriber():
    return RecordingSubscriber

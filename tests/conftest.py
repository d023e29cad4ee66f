"""
Shared fixtures. Every test runs against the in-memory document store.

Run:  pytest tests/ -v
"""
import os

# Settings are read at import time; pin them before anything imports vdesk
os.environ["STORE_BACKEND"] = "memory"
os.environ["APP_ENV"] = "dev"
os.environ.pop("SENTRY_DSN", None)

import pytest

from vdesk.crud.memory import MemoryItemCRUD
from vdesk.services.item_repository import ItemRepository
from vdesk.services.item_service import ItemService


@pytest.fixture
def store():
    return MemoryItemCRUD()


@pytest.fixture
def repository(store):
    return ItemRepository(store)


@pytest.fixture
def service(store):
    return ItemService(store, timeout=5)


@pytest.fixture
def client():
    """FastAPI test client with a fresh in-memory store per test."""
    from fastapi.testclient import TestClient
    from vdesk.configs.setup import create_app

    with TestClient(create_app()) as test_client:
        yield test_client

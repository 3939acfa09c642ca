"""Common test fixtures and utilities."""

from unittest.mock import MagicMock

import pytest

from json2db.pub_sub import NotificationBus
from json2db.store import LocalDocumentStore, StoreEvent


@pytest.fixture
def store(tmp_path):
    """A store rooted in a fresh temporary directory."""
    return LocalDocumentStore(tmp_path / "data", notifications=NotificationBus())


@pytest.fixture
def recorded_events(store):
    """Collect every notification the store publishes."""
    events: list[StoreEvent] = []
    store.subscribe(events.append)
    return events


@pytest.fixture(autouse=True)
def suppress_logging(monkeypatch):
    """Suppress logging during tests to reduce noise."""
    monkeypatch.setattr("json2db.store.local.logger", MagicMock())

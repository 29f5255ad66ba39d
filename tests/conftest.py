"""Shared fixtures."""

import pytest

from user_notifications.catalog import NotificationRegistry
from user_notifications.core import User
from user_notifications.notifications import NotificationPreferencesService
from user_notifications.storage import InMemoryPreferenceStore, SQLitePreferenceStore

from sample_app import AppChannel, AppType


@pytest.fixture
def registry():
    """Registry holding the sample types and channels."""
    registry = NotificationRegistry()
    registry.register_types([AppType.WELCOME, AppType.ALERT])
    registry.register_channels([AppChannel.MAIL, AppChannel.PUSH])
    yield registry
    registry.clear()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each preference store implementation."""
    if request.param == "memory":
        return InMemoryPreferenceStore()
    return SQLitePreferenceStore(db_path=tmp_path / "preferences.db")


@pytest.fixture
def preferences(registry, store):
    return NotificationPreferencesService(registry, store)


@pytest.fixture
def user():
    return User(id=42, name="Ann", email="ann@example.com", locale="en")

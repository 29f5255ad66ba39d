"""Storage layer for notification preferences."""

from .models import PreferenceRow
from .base import PreferenceStore
from .database import SQLitePreferenceStore
from .memory import InMemoryPreferenceStore

__all__ = [
    "PreferenceRow",
    "PreferenceStore",
    "SQLitePreferenceStore",
    "InMemoryPreferenceStore",
]

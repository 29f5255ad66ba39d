"""Preference store interface."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from .models import PreferenceRow


class PreferenceStore(ABC):
    """Persisted sparse table of preference rows."""

    @abstractmethod
    def fetch(self, user_id: Any, type: Optional[Any] = None, channel: Optional[Any] = None) -> List[PreferenceRow]:
        """Read a user's rows, optionally filtered by type and/or channel."""
        pass

    @abstractmethod
    def replace_all(self, user_id: Any, rows: Iterable[PreferenceRow]):
        """Atomically replace every row of a user with ``rows``.

        On failure the previous rows must remain untouched.
        """
        pass

    @abstractmethod
    def delete_user(self, user_id: Any) -> int:
        """Remove all rows of a user. Returns the number removed."""
        pass

"""In-process preference store."""

import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .base import PreferenceStore
from .models import PreferenceRow


class InMemoryPreferenceStore(PreferenceStore):
    """Dict-backed store for tests and single-process setups."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Dict[Any, Dict[Tuple[Any, Any], PreferenceRow]] = {}

    def fetch(self, user_id: Any, type: Optional[Any] = None, channel: Optional[Any] = None) -> List[PreferenceRow]:
        rows = self._rows.get(user_id, {})
        return [
            row for row in rows.values()
            if (type is None or row.type == type) and (channel is None or row.channel == channel)
        ]

    def replace_all(self, user_id: Any, rows: Iterable[PreferenceRow]):
        replacement: Dict[Tuple[Any, Any], PreferenceRow] = {}
        for row in rows:
            if row.key in replacement:
                raise ValueError(f"Duplicate preference for {row.key!r}")
            replacement[row.key] = PreferenceRow(user_id, row.type, row.channel, bool(row.is_active))

        # Single assignment, so readers see the old or the new set
        with self._lock:
            self._rows[user_id] = replacement

    def delete_user(self, user_id: Any) -> int:
        with self._lock:
            return len(self._rows.pop(user_id, {}))

"""Data models for preference storage."""

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class PreferenceRow:
    """A stored (user, type, channel) switch.

    ``type`` and ``channel`` hold raw enum values, never enum members.
    """

    user_id: Any
    type: Any
    channel: Any
    is_active: bool

    @property
    def key(self) -> Tuple[Any, Any]:
        """Lookup key within one user's rows."""
        return (self.type, self.channel)

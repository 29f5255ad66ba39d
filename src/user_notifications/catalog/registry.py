"""Registry of notification types and channels."""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from ..core.errors import ConfigurationError
from .enums import NotificationChannelEnum, NotificationTypeEnum

logger = logging.getLogger(__name__)


class NotificationRegistry:
    """Catalog of registered types and channels.

    Built once at startup and passed to the services that need it.
    Entries are unique by value and keep first-registration order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._types: Dict[Any, NotificationTypeEnum] = {}
        self._channels: Dict[Any, NotificationChannelEnum] = {}

    def register_types(self, types: Iterable[NotificationTypeEnum]):
        """Merge notification types into the registry."""
        with self._lock:
            self._types = self._merge(self._types, types, NotificationTypeEnum)

    def register_channels(self, channels: Iterable[NotificationChannelEnum]):
        """Merge notification channels into the registry."""
        with self._lock:
            self._channels = self._merge(self._channels, channels, NotificationChannelEnum)

    @staticmethod
    def _merge(current: Dict[Any, Any], items: Iterable[Any], kind: type) -> Dict[Any, Any]:
        # Readers keep the old dict until the merged copy is swapped in
        merged = dict(current)
        for item in items:
            if not isinstance(item, kind):
                raise ConfigurationError(f"Expected {kind.__name__}, got {item!r}")
            if item.value in merged:
                continue
            merged[item.value] = item
            logger.debug(f"Registered {kind.__name__} {item.name}={item.value!r}")
        return merged

    def types(self) -> List[NotificationTypeEnum]:
        """Registered types in registration order."""
        return list(self._types.values())

    def channels(self) -> List[NotificationChannelEnum]:
        """Registered channels in registration order."""
        return list(self._channels.values())

    def type_values(self) -> List[Any]:
        return list(self._types.keys())

    def channel_values(self) -> List[Any]:
        return list(self._channels.keys())

    def get_type(self, value: Any) -> NotificationTypeEnum:
        """Look up a type by member or identifier."""
        key = value.value if isinstance(value, NotificationTypeEnum) else value
        try:
            return self._types[key]
        except KeyError:
            raise ConfigurationError(f"Unknown notification type: {value!r}") from None

    def get_channel(self, value: Any) -> NotificationChannelEnum:
        """Look up a channel by member or identifier."""
        key = value.value if isinstance(value, NotificationChannelEnum) else value
        try:
            return self._channels[key]
        except KeyError:
            raise ConfigurationError(f"Unknown notification channel: {value!r}") from None

    def find_type(self, token: str) -> Optional[NotificationTypeEnum]:
        """Find a type by name (case-insensitive) or identifier text."""
        return self._find(self._types.values(), token)

    def find_channel(self, token: str) -> Optional[NotificationChannelEnum]:
        """Find a channel by name (case-insensitive) or identifier text."""
        return self._find(self._channels.values(), token)

    @staticmethod
    def _find(members: Iterable[Any], token: str) -> Optional[Any]:
        token = str(token).strip()
        for member in members:
            if member.name.lower() == token.lower() or str(member.value) == token:
                return member
        return None

    def clear(self):
        """Drop every registration. Used to isolate tests."""
        with self._lock:
            self._types = {}
            self._channels = {}

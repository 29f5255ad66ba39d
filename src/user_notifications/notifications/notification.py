"""Base class for concrete notification kinds."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..catalog.enums import NotificationChannelEnum, NotificationTypeEnum
from ..core.users import NotifiableUser
from .content import Layout, Line


class UserNotification(ABC):
    """A notification sent to one user through preference-selected channels.

    Subclasses declare the type and content; the router decides channels.
    Instance setters return ``self`` so overrides can be chained::

        WelcomeNotification().set_channels([Channel.MAIL]).set_test()
    """

    def __init__(self):
        self._important: Optional[bool] = None
        self._channels: Optional[List[Any]] = None
        self._allow_log_event = True
        self._is_test = False

    @abstractmethod
    def notification_type(self) -> NotificationTypeEnum:
        """Catalog type this notification belongs to."""
        pass

    @abstractmethod
    def subject(self, user: NotifiableUser) -> Line:
        """Subject line; also the default title."""
        pass

    def title(self, user: NotifiableUser) -> Optional[Line]:
        """Heading shown above the body."""
        return self.subject(user)

    @abstractmethod
    def layout(self, user: NotifiableUser, channel: NotificationChannelEnum) -> Layout:
        """Body content for ``channel``."""
        pass

    # === CHANNEL OVERRIDES ===

    def default_channels(self, user: NotifiableUser) -> Optional[List[Any]]:
        """Channels that bypass preferences for every instance; None defers to preferences."""
        return None

    def set_channels(self, channels: Optional[Iterable[Any]]) -> "UserNotification":
        """Send only to ``channels``, ignoring preferences. None restores preference lookup."""
        self._channels = list(channels) if channels is not None else None
        return self

    def get_channels(self, user: NotifiableUser) -> Optional[List[Any]]:
        """Explicit channels, then per-kind defaults; None means use preferences."""
        if self._channels is not None:
            return self._channels
        return self.default_channels(user)

    # === IMPORTANCE ===

    def default_importance(self) -> bool:
        return False

    def is_important(self) -> bool:
        return self._important if self._important is not None else self.default_importance()

    def set_important(self, value: bool = True) -> "UserNotification":
        self._important = value
        return self

    # === LOG EVENTS ===

    def log_event_channel(self) -> Optional[type]:
        """Handler class receiving log events for this kind, if any."""
        return None

    def allow_log_event(self) -> bool:
        return self._allow_log_event

    def set_allow_log_event(self, allow: bool = True) -> "UserNotification":
        self._allow_log_event = allow
        return self

    # === TEST SENDS ===

    def is_test(self) -> bool:
        return self._is_test

    def set_test(self, value: bool = True) -> "UserNotification":
        """Mark as a test send, allowed outside production."""
        self._is_test = value
        return self

    @classmethod
    def test_list(cls, user: NotifiableUser) -> "NotificationTestList":
        """Sample instances used for previews."""
        return NotificationTestList()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.notification_type().name}>"


class HasLogEvent(ABC):
    """Mixin for notifications that emit an audit event when sent."""

    @abstractmethod
    def to_log_event(self, user: NotifiableUser) -> Dict[str, Any]:
        pass


@dataclass
class NotificationTest:
    """A preview sample: a notification and an optional user to render for."""
    notification: UserNotification
    user: Optional[NotifiableUser] = None


class NotificationTestList:
    """Ordered preview samples."""

    def __init__(self):
        self._tests: List[NotificationTest] = []

    def add(self, test: NotificationTest) -> "NotificationTestList":
        self._tests.append(test)
        return self

    def all(self) -> List[NotificationTest]:
        return list(self._tests)

    def __iter__(self) -> Iterator[NotificationTest]:
        return iter(self._tests)

    def __len__(self) -> int:
        return len(self._tests)

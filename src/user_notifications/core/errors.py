"""Error kinds raised by the notification engine."""

from typing import Any, Optional


class NotificationError(Exception):
    """Base class for notification engine errors."""


class ConfigurationError(NotificationError):
    """Deployment or setup defect. Never retried."""


class DeliveryError(NotificationError):
    """A channel handler failed to deliver a notification."""

    def __init__(self, message: str, channel: Any = None, original: Optional[BaseException] = None):
        super().__init__(message)
        self.channel = channel
        self.original = original

"""Core configuration, errors and user contract."""

from .config import NotificationSettings, SettingsManager
from .errors import NotificationError, ConfigurationError, DeliveryError
from .users import NotifiableUser, User

__all__ = [
    "NotificationSettings",
    "SettingsManager",
    "NotificationError",
    "ConfigurationError",
    "DeliveryError",
    "NotifiableUser",
    "User",
]

"""Notification type and channel catalog."""

from .enums import NotificationTypeEnum, NotificationChannelEnum
from .registry import NotificationRegistry

__all__ = [
    "NotificationTypeEnum",
    "NotificationChannelEnum",
    "NotificationRegistry",
]

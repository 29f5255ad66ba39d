"""Channel selection for a notification instance."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from ..catalog.enums import NotificationChannelEnum
from ..catalog.registry import NotificationRegistry
from ..core.errors import ConfigurationError
from ..core.users import NotifiableUser
from .notification import HasLogEvent, UserNotification
from .preferences import NotificationPreferencesService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """One delivery target. ``channel`` is None for the log-event route."""
    handler_class: type
    channel: Optional[NotificationChannelEnum] = None

    @property
    def name(self) -> str:
        return self.channel.name if self.channel is not None else self.handler_class.__name__


class NotificationRouter:
    """Decides which handlers receive a notification.

    Channel selection, first match wins:

    1. channels set on the instance, used as given (an empty list sends nowhere)
    2. the kind's ``default_channels(user)``
    3. the user's active preferences for the notification type

    A log-event route is then appended when the notification supports it,
    and everything is dropped outside production unless the send is a test.
    """

    def __init__(
        self,
        registry: NotificationRegistry,
        preferences: NotificationPreferencesService,
        is_production: Callable[[], bool] = lambda: True,
        log_events_enabled: bool = True,
    ):
        self.registry = registry
        self.preferences = preferences
        self.is_production = is_production
        self.log_events_enabled = log_events_enabled

    def via(self, notification: UserNotification, user: NotifiableUser) -> List[Route]:
        """Final routes for ``notification`` sent to ``user``."""
        routes = [
            Route(self._handler_class(channel), channel)
            for channel in self.via_channels(notification, user)
        ]

        log_route = self._log_event_route(notification)
        if log_route is not None:
            routes.append(log_route)

        if not self.is_production() and not notification.is_test():
            logger.info(f"Suppressed {notification!r} for user {user.get_key()!r}: not production and not a test send")
            return []

        logger.debug(f"Routing {notification!r} for user {user.get_key()!r} via {[r.name for r in routes]}")
        return routes

    def via_channels(self, notification: UserNotification, user: NotifiableUser) -> List[NotificationChannelEnum]:
        """Channel selection before log routes and environment gating."""
        channels = notification.get_channels(user)
        if channels is not None:
            return self._resolve_explicit(channels)

        if notification.is_important():
            # TODO: decide whether important notifications should bypass user preferences
            pass

        return self.preferences.enabled_channels(user, notification.notification_type())

    def _resolve_explicit(self, channels: Iterable[Any]) -> List[NotificationChannelEnum]:
        return [self.registry.get_channel(channel) for channel in channels]

    def _handler_class(self, channel: NotificationChannelEnum) -> type:
        try:
            return channel.handler_class()
        except NotImplementedError as e:
            raise ConfigurationError(str(e)) from e

    def _log_event_route(self, notification: UserNotification) -> Optional[Route]:
        if not (self.log_events_enabled and notification.allow_log_event()):
            return None
        if not isinstance(notification, HasLogEvent):
            return None

        handler_class = notification.log_event_channel()
        if handler_class is None:
            return None
        return Route(handler_class)

"""Notification channel handlers."""

import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..catalog.enums import NotificationChannelEnum
from ..core.errors import ConfigurationError
from ..core.users import NotifiableUser
from .middleware import LogDelivery, Middleware, require_email
from .notification import HasLogEvent, UserNotification
from .rendering import MarkdownRenderer, PlainTextRenderer, RenderedMessage
from .translation import Translator

logger = logging.getLogger(__name__)


class BaseChannel(ABC):
    """Base class for channel handlers.

    A handler owns its transport. It renders the notification for its
    channel and hands the result over; routing never touches transports.
    """

    renderer_class = PlainTextRenderer

    # Synchronous handlers ignore the configured default queue
    synchronous = False

    def __init__(
        self,
        channel: Optional[NotificationChannelEnum] = None,
        translator: Optional[Translator] = None,
        queue: Optional[str] = None,
    ):
        self.channel = channel
        self.translator = translator or Translator()
        self._queue = queue

    @abstractmethod
    def send(self, user: NotifiableUser, notification: UserNotification):
        """Deliver ``notification`` to ``user``. Raises on transport failure."""
        pass

    def middleware(self, user: NotifiableUser) -> List[Middleware]:
        """Behaviours applied before sending, outermost first."""
        return [LogDelivery(self.get_name())]

    def queue(self) -> Optional[str]:
        """Queue for asynchronous delivery, or None to send inline."""
        if self.channel is not None and self.channel.queue():
            return self.channel.queue()
        return self._queue

    def get_name(self) -> str:
        return self.channel.name.lower() if self.channel is not None else type(self).__name__

    def build_message(self, user: NotifiableUser, notification: UserNotification) -> RenderedMessage:
        """Render subject, title and body for this handler's channel."""
        renderer = self.renderer_class(self.translator.with_locale(user.notification_locale()))
        return renderer.message(
            notification.subject(user),
            notification.layout(user, self.channel),
            self.channel,
            notification.title(user),
        )


@dataclass
class MailMessage:
    """Rendered e-mail ready for a mail transport."""
    to: str
    to_name: str
    subject: str
    body: str
    actions: List[Tuple[str, str]] = field(default_factory=list)


class MailChannel(BaseChannel):
    """Markdown e-mail channel."""

    renderer_class = MarkdownRenderer

    def __init__(self, transport: Optional[Callable[[MailMessage], Any]] = None, **kwargs):
        super().__init__(**kwargs)
        self.transport = transport

    def middleware(self, user: NotifiableUser) -> List[Middleware]:
        return [require_email] + super().middleware(user)

    def send(self, user: NotifiableUser, notification: UserNotification):
        """Send notification via email."""
        rendered = self.build_message(user, notification)
        message = MailMessage(
            to=user.notification_email(),
            to_name=user.notification_name(),
            subject=rendered.subject,
            body=rendered.body,
            actions=rendered.actions,
        )

        if not self.transport:
            logger.info(f"[EMAIL] To: {message.to} Subject: {message.subject}")
            return
        self.transport(message)


@dataclass
class PushMessage:
    """Rendered push notification."""
    user_id: Any
    title: str
    body: str
    url: Optional[str] = None


class PushChannel(BaseChannel):
    """Push notification channel."""

    max_body_length = 100

    def __init__(self, transport: Optional[Callable[[PushMessage], Any]] = None, **kwargs):
        super().__init__(**kwargs)
        self.transport = transport

    def send(self, user: NotifiableUser, notification: UserNotification):
        """Send push notification."""
        rendered = self.build_message(user, notification)
        message = PushMessage(
            user_id=user.get_key(),
            title=rendered.title or rendered.subject,
            body=rendered.body[:self.max_body_length],
            url=rendered.actions[0][1] if rendered.actions else None,
        )

        if not self.transport:
            logger.info(f"[PUSH] To: {message.user_id} Title: {message.title}")
            return
        self.transport(message)


@dataclass
class InAppNotification:
    """In-app notification for display in the web/mobile UI."""
    id: str
    user_id: Any
    type: Any
    title: str
    message: str
    timestamp: datetime
    is_read: bool = False
    action_url: Optional[str] = None
    action_label: Optional[str] = None


class InAppChannel(BaseChannel):
    """In-app notification channel (stores for later display)."""

    synchronous = True

    def __init__(self, storage: Optional[Dict[Any, List[InAppNotification]]] = None, **kwargs):
        super().__init__(**kwargs)
        self.storage = storage if storage is not None else {}
        self._lock = threading.Lock()

    def send(self, user: NotifiableUser, notification: UserNotification):
        """Store notification for in-app display."""
        rendered = self.build_message(user, notification)
        label, url = rendered.actions[0] if rendered.actions else (None, None)

        in_app = InAppNotification(
            id=str(uuid.uuid4()),
            user_id=user.get_key(),
            type=notification.notification_type().value,
            title=rendered.title or rendered.subject,
            message=rendered.body,
            timestamp=datetime.now(),
            action_url=url,
            action_label=label,
        )

        with self._lock:
            self.storage.setdefault(in_app.user_id, []).append(in_app)
        logger.debug(f"[IN-APP] Stored for: {in_app.user_id}")

    def get_notifications(self, user_id: Any, limit: int = 50) -> List[InAppNotification]:
        """Get in-app notifications for a user, newest first."""
        return sorted(
            self.storage.get(user_id, []),
            key=lambda n: n.timestamp,
            reverse=True
        )[:limit]

    def mark_read(self, user_id: Any, notification_id: str) -> bool:
        """Mark a notification as read."""
        for notif in self.storage.get(user_id, []):
            if notif.id == notification_id:
                notif.is_read = True
                return True
        return False

    def get_unread_count(self, user_id: Any) -> int:
        """Get unread count for a user."""
        return len([n for n in self.storage.get(user_id, []) if not n.is_read])


class LogEventChannel(BaseChannel):
    """Audit channel fed by ``HasLogEvent.to_log_event``."""

    synchronous = True

    def __init__(self, sink: Optional[Callable[[Dict[str, Any]], Any]] = None, **kwargs):
        super().__init__(**kwargs)
        self.sink = sink

    def send(self, user: NotifiableUser, notification: UserNotification):
        if not isinstance(notification, HasLogEvent):
            raise ConfigurationError(f"{type(notification).__name__} does not implement HasLogEvent")

        event = notification.to_log_event(user)
        if self.sink:
            self.sink(event)
        else:
            logger.info(f"Notification event: {json.dumps(event, default=str)}")


class ChannelManager:
    """Builds and caches one handler per (handler class, channel)."""

    def __init__(self, translator: Optional[Translator] = None, default_queue: Optional[str] = "default"):
        self.translator = translator or Translator()
        self.default_queue = default_queue
        self._factories: Dict[type, Callable[..., BaseChannel]] = {}
        self._drivers: Dict[Tuple[type, Optional[NotificationChannelEnum]], BaseChannel] = {}
        self._lock = threading.Lock()

    def extend(self, handler_class: type, factory: Callable[..., BaseChannel]):
        """Use ``factory(channel=, translator=, queue=)`` to build ``handler_class``."""
        with self._lock:
            self._factories[handler_class] = factory
            self._drivers = {k: v for k, v in self._drivers.items() if k[0] is not handler_class}

    def driver(self, handler_class: type, channel: Optional[NotificationChannelEnum] = None) -> BaseChannel:
        """Handler instance for ``channel``."""
        key = (handler_class, channel)
        with self._lock:
            if key not in self._drivers:
                self._drivers[key] = self._create(handler_class, channel)
            return self._drivers[key]

    def _create(self, handler_class: type, channel: Optional[NotificationChannelEnum]) -> BaseChannel:
        if not (isinstance(handler_class, type) and issubclass(handler_class, BaseChannel)):
            raise ConfigurationError(f"{handler_class!r} is not a channel handler class")

        factory = self._factories.get(handler_class, handler_class)
        queue = None if handler_class.synchronous else self.default_queue
        handler = factory(channel=channel, translator=self.translator, queue=queue)
        if not isinstance(handler, BaseChannel):
            raise ConfigurationError(f"Factory for {handler_class.__name__} returned {handler!r}")
        return handler

    def drivers(self) -> List[BaseChannel]:
        """Handlers built so far."""
        return list(self._drivers.values())

    def via_queues(self) -> Dict[str, Optional[str]]:
        """Queue of every built handler, keyed by handler name."""
        return {handler.get_name(): handler.queue() for handler in self.drivers()}

"""Application wiring: one context object built at startup."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Union

from .catalog.enums import NotificationChannelEnum, NotificationTypeEnum
from .catalog.registry import NotificationRegistry
from .core.config import NotificationSettings
from .core.errors import ConfigurationError
from .core.users import NotifiableUser
from .notifications.channels import ChannelManager
from .notifications.dispatcher import DeliveryJob, DeliveryReport, NotificationSender
from .notifications.notification import UserNotification
from .notifications.preferences import NotificationPreferencesService
from .notifications.routing import NotificationRouter
from .notifications.translation import Translator
from .storage.base import PreferenceStore
from .storage.database import SQLitePreferenceStore

logger = logging.getLogger(__name__)


@dataclass
class NotificationContext:
    """Everything the engine needs, passed around explicitly."""
    settings: NotificationSettings
    registry: NotificationRegistry
    store: PreferenceStore
    preferences: NotificationPreferencesService
    translator: Translator
    router: NotificationRouter
    channels: ChannelManager
    sender: NotificationSender
    notifications: Dict[str, type] = field(default_factory=dict)

    def register_notifications(self, classes: Iterable[type]):
        """Make notification classes available for previews."""
        for cls in classes:
            if not (isinstance(cls, type) and issubclass(cls, UserNotification)):
                raise ConfigurationError(f"{cls!r} is not a UserNotification subclass")
            self.notifications.setdefault(cls.__name__, cls)

    def find_notification(self, name: str) -> type:
        for key, cls in self.notifications.items():
            if key.lower() == name.lower():
                return cls
        raise ConfigurationError(f"Unknown notification class: {name}")

    def send(self, users: Union[NotifiableUser, Iterable[NotifiableUser]],
             notification: UserNotification) -> DeliveryReport:
        return self.sender.send(users, notification)


def build_context(
    settings: Optional[NotificationSettings] = None,
    types: Iterable[NotificationTypeEnum] = (),
    channels: Iterable[NotificationChannelEnum] = (),
    store: Optional[PreferenceStore] = None,
    translator: Optional[Translator] = None,
    notifications: Iterable[type] = (),
    queue_dispatcher: Optional[Callable[[DeliveryJob], Any]] = None,
) -> NotificationContext:
    """Wire registry, storage, routing and delivery from ``settings``."""
    settings = settings or NotificationSettings.from_env()

    registry = NotificationRegistry()
    registry.register_types(types)
    registry.register_channels(channels)

    if store is None:
        store = SQLitePreferenceStore.from_settings(settings)

    if translator is None:
        if settings.lang_dir:
            translator = Translator.from_directory(settings.lang_dir, settings.default_locale, settings.fallback_locale)
        else:
            translator = Translator(locale=settings.default_locale, fallback_locale=settings.fallback_locale)

    preferences = NotificationPreferencesService(registry, store)
    router = NotificationRouter(
        registry,
        preferences,
        is_production=settings.is_production,
        log_events_enabled=settings.log_events_enabled,
    )
    channel_manager = ChannelManager(translator, settings.default_queue)
    sender = NotificationSender(router, channel_manager, queue_dispatcher, settings.parallel_delivery)

    context = NotificationContext(
        settings=settings,
        registry=registry,
        store=store,
        preferences=preferences,
        translator=translator,
        router=router,
        channels=channel_manager,
        sender=sender,
    )
    context.register_notifications(notifications)

    logger.debug(
        f"Notification context ready: {len(registry.types())} types, "
        f"{len(registry.channels())} channels, environment={settings.environment}"
    )
    return context

"""Per-user notification preference resolution."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..catalog.enums import NotificationChannelEnum, NotificationTypeEnum
from ..catalog.registry import NotificationRegistry
from ..core.errors import ConfigurationError
from ..core.users import NotifiableUser
from ..storage.base import PreferenceStore
from ..storage.models import PreferenceRow

logger = logging.getLogger(__name__)


@dataclass
class NotificationPreference:
    """Effective switch for one (type, channel) pair of a user."""
    user_id: Any
    type: NotificationTypeEnum
    channel: NotificationChannelEnum
    is_active: bool
    persisted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "channel": self.channel.value,
            "is_active": self.is_active,
        }


PreferenceInput = Union[NotificationPreference, Mapping[str, Any]]


def _user_key(user: NotifiableUser) -> Any:
    key = user.get_key()
    if key is None:
        raise ConfigurationError(f"{type(user).__name__} has no key; preferences need a persisted user")
    return key


class NotificationPreferencesService:
    """Reads and writes preferences against the registered catalog."""

    def __init__(self, registry: NotificationRegistry, store: PreferenceStore):
        self.registry = registry
        self.store = store

    def get_notification_preferences(
        self,
        user: NotifiableUser,
        notification_type: Optional[Any] = None,
        notification_channel: Optional[Any] = None,
    ) -> List[NotificationPreference]:
        """Full type x channel matrix for a user.

        Stored rows win; every other pair is active when the channel is
        among the type's default channels. Filters accept members or
        raw identifiers; unknown ones raise ConfigurationError.
        """
        user_id = _user_key(user)
        if notification_type is not None:
            notification_type = self.registry.get_type(notification_type)
        if notification_channel is not None:
            notification_channel = self.registry.get_channel(notification_channel)

        stored: Dict[Tuple[Any, Any], PreferenceRow] = {
            row.key: row
            for row in self.store.fetch(
                user_id,
                notification_type.value if notification_type is not None else None,
                notification_channel.value if notification_channel is not None else None,
            )
        }

        result = []
        for type_ in self.registry.types():
            if notification_type is not None and type_ != notification_type:
                continue
            defaults = type_.default_channels()
            for channel in self.registry.channels():
                if notification_channel is not None and channel != notification_channel:
                    continue

                row = stored.get((type_.value, channel.value))
                if row is not None:
                    result.append(NotificationPreference(user_id, type_, channel, row.is_active, persisted=True))
                else:
                    result.append(NotificationPreference(user_id, type_, channel, channel in defaults))

        return result

    resolve = get_notification_preferences

    def set_notification_preferences(self, user: NotifiableUser, preferences: Iterable[PreferenceInput]):
        """Replace all of a user's stored preferences with ``preferences``.

        This is not a merge: pairs left out fall back to type defaults.
        """
        user_id = _user_key(user)
        rows = [self._to_row(user_id, item) for item in preferences]
        self.store.replace_all(user_id, rows)

    replace_all = set_notification_preferences

    def _to_row(self, user_id: Any, item: PreferenceInput) -> PreferenceRow:
        if isinstance(item, NotificationPreference):
            type_, channel, is_active = item.type, item.channel, item.is_active
        else:
            try:
                type_, channel, is_active = item["type"], item["channel"], item["is_active"]
            except KeyError as e:
                raise ValueError(f"Preference is missing {e.args[0]!r}: {item!r}") from None

        return PreferenceRow(
            user_id=user_id,
            type=self.registry.get_type(type_).value,
            channel=self.registry.get_channel(channel).value,
            is_active=bool(is_active),
        )

    def enabled_channels(self, user: NotifiableUser,
                         notification_type: NotificationTypeEnum) -> List[NotificationChannelEnum]:
        """Active channels for one type, deduplicated, in registration order."""
        channels: List[NotificationChannelEnum] = []
        for preference in self.get_notification_preferences(user, notification_type):
            if preference.is_active and preference.channel not in channels:
                channels.append(preference.channel)
        return channels

    def reset(self, user: NotifiableUser):
        """Drop stored rows so every pair uses its default."""
        self.store.replace_all(_user_key(user), [])

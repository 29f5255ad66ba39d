"""Base enums that applications subclass to declare types and channels.

Example::

    class Channel(NotificationChannelEnum):
        MAIL = 1
        PUSH = 2

        def handler_class(self):
            return {Channel.MAIL: MailChannel, Channel.PUSH: PushChannel}[self]

    class Type(NotificationTypeEnum):
        WELCOME = 1

        def default_channels(self):
            return [Channel.MAIL]
"""

from enum import Enum
from typing import List, Optional


class NotificationChannelEnum(Enum):
    """A delivery medium backed by a channel handler class."""

    @property
    def title(self) -> str:
        return self.name.replace("_", " ").title()

    def handler_class(self) -> type:
        """Channel handler class that delivers this channel."""
        raise NotImplementedError(f"{type(self).__name__}.handler_class() is not implemented")

    def queue(self) -> Optional[str]:
        """Queue override for this channel; None defers to the handler."""
        return None


class NotificationTypeEnum(Enum):
    """A notification category with its default channel set."""

    @property
    def title(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def description(self) -> str:
        return ""

    def default_channels(self) -> List[NotificationChannelEnum]:
        """Channels active when the user has no stored preference."""
        return []

"""Notifiable user contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


class NotifiableUser(ABC):
    """A user that can receive notifications.

    Applications implement this on their own user model.
    """

    @abstractmethod
    def get_key(self) -> Any:
        """Stable identifier used as the preference owner."""
        pass

    def notification_locale(self) -> Optional[str]:
        """Preferred locale, or None for the translator default."""
        return None

    @abstractmethod
    def notification_name(self) -> str:
        """Display name."""
        pass

    def notification_email(self) -> Optional[str]:
        """Contact address, if the user has one."""
        return None


@dataclass
class User(NotifiableUser):
    """Plain user record."""

    id: Any
    name: str = ""
    email: Optional[str] = None
    locale: Optional[str] = None

    def get_key(self) -> Any:
        return self.id

    def notification_locale(self) -> Optional[str]:
        return self.locale

    def notification_name(self) -> str:
        return self.name or f"User #{self.id}"

    def notification_email(self) -> Optional[str]:
        return self.email

"""Notification engine settings loaded from JSON and the environment."""

import json
import logging
import os
import re
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, Dict, Any

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "USER_NOTIFICATION_"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class NotificationSettings:
    """Runtime settings for routing, storage and rendering."""

    # Anything other than "production" suppresses delivery unless a send is marked as a test
    environment: str = "production"

    database_path: Optional[str] = None
    preferences_table: str = "user_notification_preferences"

    # Queue handed to handlers that do not name their own; empty means synchronous
    default_queue: Optional[str] = "default"

    log_events_enabled: bool = True
    parallel_delivery: bool = False

    lang_dir: Optional[str] = None
    default_locale: str = "ru"
    fallback_locale: str = "en"

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Reject settings that would break storage."""
        if not _IDENTIFIER.match(self.preferences_table or ""):
            raise ConfigurationError(
                f"Invalid preferences table name: {self.preferences_table!r}"
            )

    def is_production(self) -> bool:
        """Whether real deliveries are allowed."""
        return self.environment.strip().lower() == "production"

    def resolved_database_path(self) -> Path:
        """Database file, defaulting to the user's home directory."""
        if self.database_path:
            return Path(self.database_path).expanduser()
        return Path.home() / ".user-notifications" / "preferences.db"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationSettings":
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls, base: Optional["NotificationSettings"] = None) -> "NotificationSettings":
        """Overlay USER_NOTIFICATION_* environment variables on ``base``."""
        data = (base or cls()).to_dict()

        mapping = {
            "ENV": ("environment", str),
            "DB_PATH": ("database_path", str),
            "PREFERENCES_TABLE": ("preferences_table", str),
            "DEFAULT_QUEUE": ("default_queue", str),
            "LOG_EVENTS": ("log_events_enabled", _env_bool),
            "PARALLEL": ("parallel_delivery", _env_bool),
            "LANG_DIR": ("lang_dir", str),
            "LOCALE": ("default_locale", str),
            "FALLBACK_LOCALE": ("fallback_locale", str),
        }
        for suffix, (name, convert) in mapping.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw is None:
                continue
            data[name] = convert(raw)

        if data.get("default_queue") == "":
            data["default_queue"] = None

        return cls.from_dict(data)


class SettingsManager:
    """Load and persist settings."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or Path.home() / ".user-notifications" / "settings.json"
        self.settings = self._load_settings()

    def _load_settings(self) -> NotificationSettings:
        """Load settings from file, then apply environment overrides."""
        base = NotificationSettings()
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    base = NotificationSettings.from_dict(json.load(f))
            except (OSError, ValueError) as e:
                logger.error(f"Error loading notification settings: {e}")

        return NotificationSettings.from_env(base)

    def save_settings(self):
        """Save settings to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.settings.to_dict(), f, indent=2)

    def update(self, **updates) -> NotificationSettings:
        """Update settings values and save."""
        data = self.settings.to_dict()
        for key, value in updates.items():
            if key in data:
                data[key] = value
        self.settings = NotificationSettings.from_dict(data)
        self.save_settings()
        return self.settings

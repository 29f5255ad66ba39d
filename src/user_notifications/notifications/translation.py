"""Template lookup and parameter interpolation."""

import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class Locale(Enum):
    """Supported notification locales."""
    RU = "ru"
    EN = "en"

    @classmethod
    def default(cls) -> "Locale":
        return cls.RU

    @classmethod
    def values(cls) -> List[str]:
        return [locale.value for locale in cls]


class Translator:
    """Resolve template keys against per-locale catalogs.

    A key missing from both the active and the fallback locale is used
    as the template itself, so content degrades instead of failing.
    """

    def __init__(
        self,
        catalogs: Optional[Dict[str, Dict[str, str]]] = None,
        locale: Optional[str] = None,
        fallback_locale: Optional[str] = Locale.EN.value,
    ):
        self.catalogs = catalogs or {}
        self.locale = locale or Locale.default().value
        self.fallback_locale = fallback_locale

    @classmethod
    def from_directory(cls, lang_dir: Path, locale: Optional[str] = None,
                       fallback_locale: Optional[str] = Locale.EN.value) -> "Translator":
        """Load ``<locale>.json`` files from a directory."""
        catalogs = {}
        for path in sorted(Path(lang_dir).glob("*.json")):
            with open(path, encoding="utf-8") as f:
                catalogs[path.stem] = json.load(f)
            logger.debug(f"Loaded {len(catalogs[path.stem])} translations for '{path.stem}'")
        return cls(catalogs, locale, fallback_locale)

    def with_locale(self, locale: Optional[str]) -> "Translator":
        """Copy bound to ``locale``; None keeps the current one."""
        if not locale or locale == self.locale:
            return self
        return Translator(self.catalogs, locale, self.fallback_locale)

    def has(self, key: str, locale: Optional[str] = None) -> bool:
        return key in self.catalogs.get(locale or self.locale, {})

    def get_template(self, key: str, locale: Optional[str] = None) -> str:
        """Template for ``key``, or the key itself on a miss."""
        for candidate in (locale or self.locale, self.fallback_locale):
            if candidate and key in self.catalogs.get(candidate, {}):
                return self.catalogs[candidate][key]

        logger.debug(f"Missing translation for '{key}' ({self.locale}), using key as text")
        return key

    def translate(self, key: str, params: Optional[Mapping[str, Any]] = None,
                  locale: Optional[str] = None) -> str:
        """Look up ``key`` and substitute ``params``."""
        return self.interpolate(self.get_template(key, locale), params or {})

    @staticmethod
    def interpolate(template: str, params: Mapping[str, Any]) -> str:
        """Replace :name, :Name, :NAME and {name} placeholders in one pass.

        Substituted values are never scanned again, so a value that looks
        like a placeholder stays literal.
        """
        replacements: Dict[str, str] = {}
        for name, raw in params.items():
            value = "" if raw is None else str(raw)
            replacements.setdefault(":" + name.upper(), value.upper())
            replacements.setdefault(":" + name[:1].upper() + name[1:], value[:1].upper() + value[1:])
            replacements.setdefault(":" + name, value)
            replacements.setdefault("{" + name + "}", value)

        if not replacements:
            return template

        # Longest placeholders first so :username is not eaten by :user
        pattern = re.compile("|".join(
            re.escape(placeholder) for placeholder in sorted(replacements, key=len, reverse=True)
        ))
        return pattern.sub(lambda match: replacements[match.group(0)], template)

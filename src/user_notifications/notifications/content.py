"""Channel-agnostic notification content.

A ``Layout`` is an ordered list of ``LineGroup`` and ``Action`` items. Each
item can be hidden from individual channels, so one layout serves every
channel without duplicating text.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from ..catalog.enums import NotificationChannelEnum
from .translation import Translator

MARKDOWN_SPECIAL_CHARS = ('*', '_', '#', '~', '`', '>')


def escape_markdown(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Replace markdown control characters with a space."""
    if value is None:
        return default

    text = str(value).strip()
    if not text:
        return default

    for char in MARKDOWN_SPECIAL_CHARS:
        text = text.replace(char, ' ')
    return text


class Component(Enum):
    """Presentational wrapper for a group of lines."""
    PANEL = "panel"
    SUBCOPY = "subcopy"
    TABLE = "table"


class ChannelVisibility:
    """Set of channels an item is hidden from."""

    def __init__(self):
        self._hidden: List[NotificationChannelEnum] = []

    def hide(self, channel: NotificationChannelEnum, value: bool = True):
        if value and channel not in self._hidden:
            self._hidden.append(channel)
        elif not value and channel in self._hidden:
            self._hidden.remove(channel)

    def is_hidden(self, channel: Optional[NotificationChannelEnum]) -> bool:
        return channel is not None and channel in self._hidden

    @property
    def hidden_channels(self) -> List[NotificationChannelEnum]:
        return list(self._hidden)


class Line:
    """A translatable template with named parameters.

    Parameter values are escaped on construction; the template is not.
    """

    def __init__(self, template: str, values: Optional[Dict[str, Any]] = None):
        self.template = template
        self.values: Dict[str, Optional[str]] = {
            name: escape_markdown(value) for name, value in (values or {}).items()
        }

    def format(self, translator: Optional[Translator] = None) -> str:
        """Expand the template through ``translator``."""
        translator = translator or Translator()
        return translator.translate(self.template, self.values)

    def __repr__(self) -> str:
        return f"Line({self.template!r}, {self.values!r})"


class LineGroup:
    """Ordered lines rendered as one block (glue) or as paragraphs."""

    def __init__(self, component: Optional[Component] = None, glue: bool = True):
        self.component = component
        self.glue = glue
        self.visibility = ChannelVisibility()
        self._lines: List[Line] = []

    def add(self, template: str, values: Optional[Dict[str, Any]] = None) -> "LineGroup":
        return self.add_line(Line(template, values))

    def add_line(self, line: Line) -> "LineGroup":
        self._lines.append(line)
        return self

    def hide_from(self, channel: NotificationChannelEnum, value: bool = True) -> "LineGroup":
        self.visibility.hide(channel, value)
        return self

    def is_hidden_from(self, channel: Optional[NotificationChannelEnum]) -> bool:
        return self.visibility.is_hidden(channel)

    def lines(self) -> List[Line]:
        return list(self._lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


class Action:
    """Call-to-action button: a text line and a target URL."""

    def __init__(self, text: Union[Line, str], url: str):
        self.text = text if isinstance(text, Line) else Line(text)
        self.url = url
        self.visibility = ChannelVisibility()

    def hide_from(self, channel: NotificationChannelEnum, value: bool = True) -> "Action":
        self.visibility.hide(channel, value)
        return self

    def is_hidden_from(self, channel: Optional[NotificationChannelEnum]) -> bool:
        return self.visibility.is_hidden(channel)


LayoutItem = Union[LineGroup, Action]


class Layout:
    """Ordered body of a notification."""

    def __init__(self):
        self._items: List[LayoutItem] = []

    def add(self, item: LayoutItem, prepend: bool = False) -> "Layout":
        """Append, or prepend, a line group or action."""
        if not isinstance(item, (LineGroup, Action)):
            raise TypeError(f"Layout items must be LineGroup or Action, got {type(item).__name__}")
        if prepend:
            self._items.insert(0, item)
        else:
            self._items.append(item)
        return self

    def add_lines(self, lines: LineGroup, prepend: bool = False) -> "Layout":
        return self.add(lines, prepend)

    def add_action(self, action: Action, prepend: bool = False) -> "Layout":
        return self.add(action, prepend)

    def items(self) -> List[LayoutItem]:
        return list(self._items)

    def visible_items(self, channel: Optional[NotificationChannelEnum]) -> List[LayoutItem]:
        """Items not hidden from ``channel``, in insertion order."""
        return [item for item in self._items if not item.is_hidden_from(channel)]

    def __iter__(self) -> Iterator[LayoutItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

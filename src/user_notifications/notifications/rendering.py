"""Render a layout for one channel."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..catalog.enums import NotificationChannelEnum
from .content import Action, Component, Layout, Line, LineGroup
from .translation import Translator


@dataclass
class RenderedMessage:
    """Content handed to a transport."""
    subject: str
    body: str
    title: Optional[str] = None
    actions: List[Tuple[str, str]] = field(default_factory=list)


class PlainTextRenderer:
    """Text for push, SMS and similar channels."""

    line_break = "\n"
    block_separator = "\n\n"
    include_title = False

    def __init__(self, translator: Optional[Translator] = None):
        self.translator = translator or Translator()

    def format_line(self, line: Line) -> str:
        return line.format(self.translator)

    def render_lines(self, group: LineGroup) -> List[str]:
        """One block for a glued group, one block per line otherwise."""
        texts = [self.format_line(line) for line in group]
        if not texts:
            return []
        if group.glue:
            return [self.line_break.join(texts)]
        return texts

    def render_action(self, action: Action) -> str:
        return f"{self.format_line(action.text)}: {action.url}"

    def blocks(self, layout: Layout, channel: Optional[NotificationChannelEnum]) -> List[str]:
        """Rendered blocks for every item visible to ``channel``."""
        blocks = []
        for item in layout.visible_items(channel):
            if isinstance(item, LineGroup):
                blocks.extend(self.render_lines(item))
            else:
                blocks.append(self.render_action(item))
        return blocks

    def render(self, layout: Layout, channel: Optional[NotificationChannelEnum],
               title: Optional[str] = None) -> str:
        blocks = self.blocks(layout, channel)
        if title:
            blocks.insert(0, title)
        return self.block_separator.join(blocks)

    def message(self, subject: Line, layout: Layout, channel: Optional[NotificationChannelEnum],
                title: Optional[Line] = None) -> RenderedMessage:
        """Subject, title and body for one channel."""
        title_text = self.format_line(title) if title is not None else None
        actions = [
            (self.format_line(item.text), item.url)
            for item in layout.visible_items(channel)
            if isinstance(item, Action)
        ]
        return RenderedMessage(
            subject=self.format_line(subject),
            title=title_text,
            body=self.render(layout, channel, title_text if self.include_title else None),
            actions=actions,
        )


class MarkdownRenderer(PlainTextRenderer):
    """Markdown for mail-like channels."""

    line_break = "  \n"
    include_title = True

    def format_line(self, line: Line) -> str:
        return line.format(self.translator).replace("\n", self.line_break)

    def render_lines(self, group: LineGroup) -> List[str]:
        blocks = super().render_lines(group)
        if group.component is Component.PANEL:
            return ["\n".join("> " + row for row in block.split("\n")) for block in blocks]
        if group.component is Component.SUBCOPY and blocks:
            return ["---"] + blocks
        return blocks

    def render_action(self, action: Action) -> str:
        return f"[{self.format_line(action.text)}]({action.url})"

    def render(self, layout: Layout, channel: Optional[NotificationChannelEnum],
               title: Optional[str] = None) -> str:
        return super().render(layout, channel, f"# {title}" if title else None)

#!/usr/bin/env python3
"""
Displayable text for lessons.

Question text, hints and choices may be plain strings, Markdown, or a
callable producing either. Everything the engine shows is wrapped in a
DisplayText so the renderer only ever deals with one type.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


@dataclass(frozen=True)
class DisplayText:
    """A piece of text to show the learner"""
    content: Union[str, Callable[[], Any]] = ''
    markdown: bool = False
    style: Optional[str] = None   # semantic tag: success|error|hint|info|title

    def resolve(self) -> 'DisplayText':
        """Call thunks until a concrete string is left"""
        content = self.content() if callable(self.content) else self.content
        if isinstance(content, DisplayText):
            inner = content.resolve()
            return DisplayText(inner.content, inner.markdown, self.style or inner.style)
        text = '' if content is None else str(content)
        return DisplayText(text, self.markdown, self.style)

    def render(self) -> str:
        """Return the text to display"""
        return self.resolve().content

    def is_empty(self) -> bool:
        return not self.render().strip()

    def styled(self, style: str) -> 'DisplayText':
        """Copy of this text with a different style tag"""
        return DisplayText(self.content, self.markdown, style)


def md(content: Union[str, Callable[[], Any]]) -> DisplayText:
    """Mark text as Markdown"""
    return DisplayText(content, markdown=True)


def as_display(value: Any, style: Optional[str] = None) -> DisplayText:
    """Coerce a string, callable or DisplayText into a DisplayText"""
    if isinstance(value, DisplayText):
        return value.styled(style) if style else value
    if value is None:
        return DisplayText('', style=style)
    if callable(value):
        return DisplayText(value, style=style)
    return DisplayText(str(value), style=style)

"""SuggestionList component: the candidate list shown while composing a mention."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from vartext.template import format_variable
from vartext.utils import truncate_to_width, visible_width

NO_MATCH_TEXT = "No matching variables"

# Column where descriptions start, counted from the end of the prefix
_NAME_COLUMN = 28


def _normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()


@dataclass
class SuggestionItem:
    name: str
    description: str | None = None

    @property
    def label(self) -> str:
        return format_variable(self.name)


class SuggestionListTheme(Protocol):
    selected_text: Callable[[str], str]
    description: Callable[[str], str]
    scroll_info: Callable[[str], str]
    no_match: Callable[[str], str]


class SuggestionList:
    """Windowed, render-only view of candidates around a selected index.

    Navigation lives in the mention state machine; the editor pushes the
    current candidates and selection here before rendering.
    """

    def __init__(self, max_visible: int, theme: SuggestionListTheme) -> None:
        self._items: list[SuggestionItem] = []
        self._selected_index = 0
        self._max_visible = max(1, max_visible)
        self._theme = theme

    @property
    def items(self) -> list[SuggestionItem]:
        return list(self._items)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    def set_items(self, items: Sequence[SuggestionItem], selected_index: int = 0) -> None:
        self._items = list(items)
        self.set_selected_index(selected_index)

    def set_selected_index(self, index: int) -> None:
        self._selected_index = max(0, min(index, len(self._items) - 1))

    def get_selected_item(self) -> SuggestionItem | None:
        if self._selected_index < len(self._items):
            return self._items[self._selected_index]
        return None

    def visible_range(self) -> tuple[int, int]:
        """``[start, end)`` of the rows currently on screen."""
        start = max(
            0,
            min(
                self._selected_index - self._max_visible // 2,
                len(self._items) - self._max_visible,
            ),
        )
        return start, min(start + self._max_visible, len(self._items))

    def render(self, width: int) -> list[str]:
        if not self._items:
            return [self._theme.no_match(truncate_to_width(f"  {NO_MATCH_TEXT}", width, ""))]

        lines: list[str] = []
        start, end = self.visible_range()
        for i in range(start, end):
            lines.append(self._render_item(self._items[i], i == self._selected_index, width))

        if start > 0 or end < len(self._items):
            scroll_text = f"  ({self._selected_index + 1}/{len(self._items)})"
            lines.append(self._theme.scroll_info(truncate_to_width(scroll_text, width - 2, "")))
        return lines

    def _render_item(self, item: SuggestionItem, selected: bool, width: int) -> str:
        prefix = "→ " if selected else "  "
        available = width - len(prefix) - 2
        description = _normalize_to_single_line(item.description) if item.description else None

        if description and width > 40:
            name = truncate_to_width(item.label, min(_NAME_COLUMN - 2, available), "")
            spacing = " " * max(1, _NAME_COLUMN - visible_width(name))
            remaining = width - len(prefix) - visible_width(name) - len(spacing) - 2
            if remaining > 10:
                desc = truncate_to_width(description, remaining, "")
                if selected:
                    return self._theme.selected_text(f"{prefix}{name}{spacing}{desc}")
                return prefix + name + self._theme.description(spacing + desc)

        line = prefix + truncate_to_width(item.label, available, "")
        return self._theme.selected_text(line) if selected else line

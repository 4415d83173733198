"""VariableEditor component: a text field that holds ``{{variable}}`` chips.

Typing the trigger character (``@`` by default) opens a suggestion list
filtered by what follows it; committing a suggestion replaces ``@query`` with
an atomic chip and a trailing space. Chips are never partially edited:
cursor movement steps over them and deletion removes them whole.

The owner talks to the component through a string value: ``set_value``
pushes a value in without notifying, and ``on_change`` reports the
serialized value after user edits, at most once per input event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol, Sequence, Union

from vartext.catalog import DEFAULT_CATALOG, VariableCatalog
from vartext.components.suggestion_list import (
    SuggestionItem,
    SuggestionList,
    SuggestionListTheme,
)
from vartext.deletion import handle_backspace, handle_forward_delete
from vartext.keybindings import get_editor_keybindings
from vartext.keys import is_key_release
from vartext.mention import DEFAULT_TRIGGER, MentionState, MentionStateMachine
from vartext.nodes import TextNode, node_length
from vartext.surface import EditableSurface
from vartext.utils import graphemes, truncate_to_width, visible_width

logger = logging.getLogger(__name__)

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

MIN_SUGGESTIONS_VISIBLE = 3
MAX_SUGGESTIONS_VISIBLE = 20

Catalog = Union[VariableCatalog, Sequence[str]]


class VariableEditorTheme(Protocol):
    @property
    def variable(self) -> Callable[[str], str]: ...

    @property
    def suggestion_list(self) -> SuggestionListTheme: ...


@dataclass
class VariableEditorOptions:
    single_line: bool = True
    trigger: str = DEFAULT_TRIGGER
    suggestions_max_visible: int = 5
    catalog: Catalog = field(default_factory=lambda: DEFAULT_CATALOG)

    def __post_init__(self) -> None:
        self.suggestions_max_visible = max(
            MIN_SUGGESTIONS_VISIBLE,
            min(MAX_SUGGESTIONS_VISIBLE, self.suggestions_max_visible),
        )


@dataclass
class _Atom:
    """One unbreakable piece of rendered output."""

    text: str
    width: int
    start: int
    line_break: bool = False


def _reverse(text: str) -> str:
    return f"\x1b[7m{text}\x1b[27m"


class VariableEditor:
    """Terminal editor for templates with atomic variable chips."""

    def __init__(
        self,
        theme: VariableEditorTheme,
        options: VariableEditorOptions | None = None,
        value: str = "",
    ) -> None:
        self._options = options or VariableEditorOptions()
        self._theme = theme
        self._surface = EditableSurface(value, single_line=self._options.single_line)
        self._catalog: VariableCatalog | None = None
        self._mention = MentionStateMachine(
            self._set_catalog_fields(self._options.catalog), self._options.trigger
        )
        self._suggestions = SuggestionList(
            self._options.suggestions_max_visible, theme.suggestion_list
        )

        self._is_in_paste = False
        self._paste_buffer = ""

        self.on_change: Callable[[str], None] | None = None
        self.on_submit: Callable[[str], None] | None = None

    @property
    def focused(self) -> bool:
        return self._surface.focused

    @property
    def single_line(self) -> bool:
        return self._options.single_line

    # -- Value -------------------------------------------------------------

    def get_value(self) -> str:
        return self._surface.get_value()

    def set_value(self, value: str) -> None:
        """Replace the content from the owner. Never calls ``on_change``."""
        if self._surface.rebuild(value):
            self._mention.cancel()

    def set_catalog(self, catalog: Catalog) -> None:
        self._mention.set_catalog(self._set_catalog_fields(catalog))

    def _set_catalog_fields(self, catalog: Catalog) -> list[str]:
        if isinstance(catalog, VariableCatalog):
            self._catalog = catalog
            return catalog.names()
        self._catalog = None
        return list(catalog)

    def _describe(self, name: str) -> str | None:
        if self._catalog is None:
            return None
        return self._catalog.describe(name) or None

    # -- Cursor ------------------------------------------------------------

    def get_cursor_position(self) -> int:
        return self._surface.get_cursor_position()

    def set_cursor_position(self, offset: int) -> None:
        self._surface.set_cursor_position(offset)
        self._refresh_mention()

    def is_cursor_at_start(self) -> bool:
        return self._surface.is_cursor_at_start()

    def is_cursor_at_end(self) -> bool:
        return self._surface.is_cursor_at_end()

    # -- Focus -------------------------------------------------------------

    def focus(self) -> None:
        self._surface.focus()

    def blur(self) -> None:
        self._surface.blur()
        self._mention.blur()

    # -- Suggestions -------------------------------------------------------

    def get_mention_state(self) -> MentionState:
        return self._mention.state

    def select_suggestion(self, index: int) -> None:
        """Highlight a candidate, e.g. on pointer hover."""
        self._mention.set_selected_index(index)

    def commit_suggestion(self, index: int | None = None) -> bool:
        """Insert the highlighted candidate (or the one at *index*).

        The trigger and query are replaced by the chip and a separator.
        Returns ``False`` when there is nothing to commit.
        """
        if index is not None:
            self._mention.set_selected_index(index)
        name = self._mention.selected_candidate()
        if name is None:
            return False

        state = self._mention.state
        self._surface.delete_range(state.anchor_offset, self._surface.get_cursor_position())
        self._surface.insert_variable(name)
        logger.debug("Committed suggestion %r at %d", name, state.anchor_offset)
        self._finish_edit()
        return True

    def cancel_suggestions(self) -> None:
        self._mention.cancel()

    def insert_variable(self, name: str) -> None:
        """Insert a chip at the cursor, as the "Insert Variable" menu does."""
        self._surface.insert_variable(name)
        self._finish_edit()

    def toggle_variable_menu(self) -> None:
        if self._mention.is_composing:
            self._mention.cancel()
        else:
            self._mention.open_menu(self._surface.get_cursor_position())

    # -- Input -------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        if PASTE_START in data:
            self._is_in_paste = True
            self._paste_buffer = ""
            data = data.replace(PASTE_START, "")

        if self._is_in_paste:
            self._paste_buffer += data
            end_index = self._paste_buffer.find(PASTE_END)
            if end_index != -1:
                paste_content = self._paste_buffer[:end_index]
                remaining = self._paste_buffer[end_index + len(PASTE_END) :]
                self._is_in_paste = False
                self._paste_buffer = ""
                self._surface.paste(paste_content)
                self._finish_edit()
                if remaining:
                    self.handle_input(remaining)
            return

        if is_key_release(data):
            return

        kb = get_editor_keybindings()

        if kb.matches(data, "toggleVariableMenu"):
            self.toggle_variable_menu()
            return

        if self._mention.is_composing:
            if kb.matches(data, "selectCancel"):
                self._mention.cancel()
                return
            if self._mention.has_candidates:
                if kb.matches(data, "selectUp"):
                    self._mention.move_selection(-1)
                    return
                if kb.matches(data, "selectDown"):
                    self._mention.move_selection(1)
                    return
                if kb.matches(data, "selectConfirm") or kb.matches(data, "tab"):
                    self.commit_suggestion()
                    return

        if kb.matches(data, "deleteCharBackward"):
            if not handle_backspace(self._surface):
                self._surface.delete_char_backward()
            self._finish_edit()
            return

        if kb.matches(data, "deleteCharForward"):
            if not handle_forward_delete(self._surface):
                self._surface.delete_char_forward()
            self._finish_edit()
            return

        if kb.matches(data, "cursorLeft"):
            self._surface.move_left()
            self._refresh_mention()
            return

        if kb.matches(data, "cursorRight"):
            self._surface.move_right()
            self._refresh_mention()
            return

        if kb.matches(data, "cursorLineStart"):
            self._surface.move_to_start()
            self._refresh_mention()
            return

        if kb.matches(data, "cursorLineEnd"):
            self._surface.move_to_end()
            self._refresh_mention()
            return

        if kb.matches(data, "newLine"):
            if not self.single_line:
                self._surface.insert_text("\n")
                self._finish_edit()
            return

        if kb.matches(data, "submit"):
            if self.single_line:
                if self.on_submit:
                    self.on_submit(self.get_value())
            else:
                self._surface.insert_text("\n")
                self._finish_edit()
            return

        if kb.matches(data, "tab"):
            return

        # Regular character input
        has_control = any(
            ord(ch) < 32 or ord(ch) == 0x7F or (0x80 <= ord(ch) <= 0x9F)
            for ch in data
        )
        if not has_control:
            self._surface.insert_text(data)
            self._finish_edit()

    def _finish_edit(self) -> None:
        value = self._surface.on_user_edit()
        if value is not None and self.on_change:
            self.on_change(value)
        self._refresh_mention()

    def _refresh_mention(self) -> None:
        self._mention.update(
            self._surface.get_text_before_cursor(),
            self._surface.get_cursor_position(),
        )

    # -- Rendering ---------------------------------------------------------

    def invalidate(self) -> None:
        pass

    def render(self, width: int) -> list[str]:
        width = max(1, width)
        lines = self._layout(self._atoms(width), width)

        state = self._mention.state
        if state.active:
            items = [SuggestionItem(name, self._describe(name)) for name in state.candidates]
            self._suggestions.set_items(items, state.selected_index)
            lines.extend(self._suggestions.render(width))
        return lines

    def _atoms(self, width: int) -> list[_Atom]:
        atoms: list[_Atom] = []
        position = 0
        for node in self._surface.nodes:
            if isinstance(node, TextNode):
                for g in graphemes(node.content):
                    if g == "\n":
                        atoms.append(_Atom(" ", 1, position))
                        atoms.append(_Atom("", 0, position + 1, line_break=True))
                    else:
                        atoms.append(_Atom(g, visible_width(g), position))
                    position += len(g)
            else:
                label = truncate_to_width(node.to_template(), width, "")
                atoms.append(_Atom(label, visible_width(label), position))
                position += node_length(node)

        if not self.focused:
            return atoms

        cursor = self._surface.get_cursor_position()
        for atom in atoms:
            if atom.start == cursor and not atom.line_break:
                atom.text = _reverse(atom.text)
                break
        else:
            atoms.append(_Atom(_reverse(" "), 1, cursor))
        return atoms

    def _layout(self, atoms: list[_Atom], width: int) -> list[str]:
        lines: list[str] = []
        current = ""
        used = 0
        chip_starts = self._chip_starts()
        for atom in atoms:
            if atom.line_break:
                lines.append(current)
                current, used = "", 0
                continue
            if used + atom.width > width and used > 0:
                lines.append(current)
                current, used = "", 0
            text = self._theme.variable(atom.text) if atom.start in chip_starts else atom.text
            current += text
            used += atom.width
        lines.append(current)
        return lines

    def _chip_starts(self) -> set[int]:
        starts: set[int] = set()
        position = 0
        for node in self._surface.nodes:
            if not isinstance(node, TextNode):
                starts.add(position)
            position += node_length(node)
        return starts

"""Editable surface: a live node list kept in sync with a template string."""

from __future__ import annotations

import logging
import re

from vartext.cursor import (
    caret_after_node,
    caret_at_end,
    caret_at_offset,
    cursor_offset,
    is_caret_at_end,
    is_caret_at_start,
    normalize_caret,
    text_before_caret,
    total_length,
)
from vartext.nodes import (
    SEPARATOR,
    Caret,
    EditableNode,
    TextNode,
    VariableNode,
    node_length,
    nodes_from_segments,
    normalize_nodes,
)
from vartext.template import (
    VARIABLE_PATTERN,
    collapse_line_breaks,
    parse,
    serialize,
    serialize_single_line,
)
from vartext.utils import first_grapheme_length, last_grapheme_length, strip_ansi

logger = logging.getLogger(__name__)

_PASTE_CONTROL_RE = re.compile(r"[\x00-\x09\x0b-\x1f\x7f]")


def clean_pasted_text(text: str) -> str:
    """Reduce pasted content to plain text.

    Escape sequences are stripped, line endings normalized to ``\\n``,
    tabs expanded to four spaces and other control characters dropped.
    """
    text = strip_ansi(text).replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\t", "    ")
    return _PASTE_CONTROL_RE.sub("", text)


class EditableSurface:
    """Owns a node list and a caret, and tracks the last emitted value.

    Every mutation keeps the list normalized (no empty or adjacent text
    runs) and never leaves a variable node partially edited.
    """

    def __init__(self, value: str = "", *, single_line: bool = False) -> None:
        self.single_line = single_line
        self.focused: bool = False
        self._nodes: list[EditableNode] = self._build_nodes(value)
        self._caret: Caret = caret_at_end(self._nodes)
        self._last_value: str = value

    # -- Accessors -----------------------------------------------------------

    @property
    def nodes(self) -> tuple[EditableNode, ...]:
        return tuple(self._nodes)

    @property
    def caret(self) -> Caret:
        return self._caret

    def get_value(self) -> str:
        if self.single_line:
            return serialize_single_line(self._nodes)
        return serialize(self._nodes)

    @property
    def last_value(self) -> str:
        """The value most recently received from or emitted to the owner."""
        return self._last_value

    # -- Synchronization with the owner ----------------------------------------

    def rebuild(self, value: str) -> bool:
        """Replace the tree from *value* unless it already matches.

        Returns ``True`` when the tree was rebuilt.
        """
        self._last_value = value
        if value == self.get_value():
            return False

        self._nodes = self._build_nodes(value)
        # Programmatic updates park the caret at the end; there is no better anchor.
        self._caret = caret_at_end(self._nodes)
        logger.debug("Rebuilt surface with %d nodes (focused=%s)", len(self._nodes), self.focused)
        return True

    def _build_nodes(self, value: str) -> list[EditableNode]:
        if self.single_line:
            value = collapse_line_breaks(value)
        return normalize_nodes(nodes_from_segments(parse(value)))

    def _reparse_tokens(self) -> None:
        """Turn any well-formed token left inside a text run into a chip.

        The caret keeps its offset, snapped out of the new chip.
        """
        if not any(
            isinstance(node, TextNode) and VARIABLE_PATTERN.search(node.content)
            for node in self._nodes
        ):
            return
        offset = self.get_cursor_position()
        self._nodes = normalize_nodes(nodes_from_segments(parse(serialize(self._nodes))))
        self._caret = caret_at_offset(self._nodes, offset)
        logger.debug("Reparsed typed tokens, cursor now at %d", self.get_cursor_position())

    def on_user_edit(self) -> str | None:
        """Return the new value if it changed since the last notification."""
        value = self.get_value()
        if value == self._last_value:
            return None
        self._last_value = value
        return value

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    # -- Cursor ----------------------------------------------------------------

    def get_cursor_position(self) -> int:
        return cursor_offset(self._nodes, self._caret)

    def set_cursor_position(self, offset: int) -> None:
        self._caret = caret_at_offset(self._nodes, offset)

    def set_cursor_at_end(self) -> None:
        self._caret = caret_at_end(self._nodes)

    def set_cursor_after_node(self, index: int) -> None:
        self._caret = caret_after_node(self._nodes, index)

    def get_text_before_cursor(self) -> str:
        return text_before_caret(self._nodes, self._caret)

    def is_cursor_at_start(self) -> bool:
        return is_caret_at_start(self._nodes, self._caret)

    def is_cursor_at_end(self) -> bool:
        return is_caret_at_end(self._nodes, self._caret)

    def move_left(self) -> None:
        caret = normalize_caret(self._nodes, self._caret)
        if caret.index < len(self._nodes):
            node = self._nodes[caret.index]
            if isinstance(node, TextNode) and caret.offset > 0:
                step = last_grapheme_length(node.content[: caret.offset])
                self._caret = Caret(caret.index, caret.offset - step)
                return

        gap = caret.index
        if gap == 0:
            return
        previous = self._nodes[gap - 1]
        if isinstance(previous, VariableNode):
            self._caret = normalize_caret(self._nodes, Caret(gap - 1, 0))
        else:
            step = last_grapheme_length(previous.content)
            self._caret = Caret(gap - 1, len(previous.content) - step)

    def move_right(self) -> None:
        caret = normalize_caret(self._nodes, self._caret)
        gap = caret.index
        if caret.index < len(self._nodes):
            node = self._nodes[caret.index]
            if isinstance(node, TextNode):
                if caret.offset < len(node.content):
                    step = first_grapheme_length(node.content[caret.offset :])
                    self._caret = Caret(caret.index, caret.offset + step)
                    return
                gap = caret.index + 1

        if gap >= len(self._nodes):
            return
        following = self._nodes[gap]
        if isinstance(following, VariableNode):
            self._caret = normalize_caret(self._nodes, Caret(gap, 1))
        else:
            self._caret = Caret(gap, first_grapheme_length(following.content))

    def move_to_start(self) -> None:
        self._caret = caret_at_offset(self._nodes, 0)

    def move_to_end(self) -> None:
        self.set_cursor_at_end()

    # -- Mutations -------------------------------------------------------------

    def insert_text(self, text: str) -> None:
        """Insert plain *text* at the caret."""
        if self.single_line:
            text = collapse_line_breaks(text)
        if not text:
            return

        caret = normalize_caret(self._nodes, self._caret)
        if caret.index < len(self._nodes) and isinstance(self._nodes[caret.index], TextNode):
            node = self._nodes[caret.index]
            node.content = node.content[: caret.offset] + text + node.content[caret.offset :]
            self._caret = Caret(caret.index, caret.offset + len(text))
        else:
            # Caret sits between chips (or at an edge next to one): start a new run.
            self._nodes.insert(caret.index, TextNode(text))
            self._caret = Caret(caret.index, len(text))
        self._reparse_tokens()

    def paste(self, text: str) -> None:
        self.insert_text(clean_pasted_text(text))

    def insert_variable(self, name: str) -> int:
        """Insert a chip plus a separator at the caret.

        Returns the cursor offset after the separator.
        """
        caret = normalize_caret(self._nodes, self._caret)
        index = caret.index
        variable = VariableNode(name)

        if index < len(self._nodes) and isinstance(self._nodes[index], TextNode):
            content = self._nodes[index].content
            before, after = content[: caret.offset], content[caret.offset :]
            replacement: list[EditableNode] = []
            if before:
                replacement.append(TextNode(before))
            replacement.extend([variable, TextNode(SEPARATOR + after)])
            self._nodes[index : index + 1] = replacement
            variable_index = index + (1 if before else 0)
        else:
            self._nodes[index:index] = [variable, TextNode(SEPARATOR)]
            variable_index = index

        self._nodes = normalize_nodes(self._nodes)
        self._caret = Caret(variable_index + 1, len(SEPARATOR))
        position = self.get_cursor_position()
        logger.debug("Inserted variable %r, cursor now at %d", name, position)
        return position

    def delete_range(self, start: int, end: int) -> bool:
        """Delete ``[start, end)`` in serialized space.

        A range touching a variable token grows to cover the whole token.
        Empty or out-of-range requests change nothing and return ``False``.
        """
        total = total_length(self._nodes)
        start, end = sorted((max(0, min(start, total)), max(0, min(end, total))))
        if start == end:
            return False

        position = 0
        for node in self._nodes:
            length = node_length(node)
            if isinstance(node, VariableNode) and position < end and position + length > start:
                start = min(start, position)
                end = max(end, position + length)
            position += length

        kept: list[EditableNode] = []
        position = 0
        for node in self._nodes:
            node_start = position
            position += node_length(node)
            if position <= start or node_start >= end:
                kept.append(node)
            elif isinstance(node, TextNode):
                head = node.content[: max(0, start - node_start)]
                tail = node.content[max(0, end - node_start) :]
                kept.append(TextNode(head + tail))

        self._nodes = normalize_nodes(kept)
        self._caret = caret_at_offset(self._nodes, start)
        logger.debug("Deleted range [%d, %d)", start, end)
        self._reparse_tokens()
        return True

    def delete_char_backward(self) -> bool:
        """Delete one grapheme (or one whole chip) before the caret."""
        caret = normalize_caret(self._nodes, self._caret)
        position = cursor_offset(self._nodes, caret)
        if position == 0:
            return False
        step = 1
        if caret.index < len(self._nodes):
            node = self._nodes[caret.index]
            if isinstance(node, TextNode) and caret.offset > 0:
                step = last_grapheme_length(node.content[: caret.offset])
        return self.delete_range(position - step, position)

    def delete_char_forward(self) -> bool:
        """Delete one grapheme (or one whole chip) after the caret."""
        caret = normalize_caret(self._nodes, self._caret)
        position = cursor_offset(self._nodes, caret)
        if position >= total_length(self._nodes):
            return False
        step = 1
        if caret.index < len(self._nodes):
            node = self._nodes[caret.index]
            if isinstance(node, TextNode) and caret.offset < len(node.content):
                step = first_grapheme_length(node.content[caret.offset :])
        return self.delete_range(position, position + step)

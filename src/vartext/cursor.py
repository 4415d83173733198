"""Cursor tracking over a node list.

Offsets live in serialized template space: a text node contributes its
length and a variable node contributes the length of its ``{{name}}`` token.
A caret is never placed inside a variable token; positions next to a chip
resolve to the neighbouring text run when there is one.
"""

from __future__ import annotations

from typing import Sequence

from vartext.nodes import Caret, EditableNode, TextNode, VariableNode, node_length
from vartext.template import serialize


def total_length(nodes: Sequence[EditableNode]) -> int:
    return sum(node_length(node) for node in nodes)


def _caret_at_gap(nodes: Sequence[EditableNode], gap: int) -> Caret:
    """Caret for the boundary between ``nodes[gap - 1]`` and ``nodes[gap]``."""
    if gap > 0 and isinstance(nodes[gap - 1], TextNode):
        return Caret(gap - 1, len(nodes[gap - 1].content))
    return Caret(gap, 0)


def normalize_caret(nodes: Sequence[EditableNode], caret: Caret) -> Caret:
    """Clamp *caret* and resolve chip boundaries to the nearest text boundary."""
    if not nodes:
        return Caret(0, 0)

    index = max(0, min(caret.index, len(nodes)))
    if index == len(nodes):
        return _caret_at_gap(nodes, index)

    node = nodes[index]
    if isinstance(node, TextNode):
        return Caret(index, max(0, min(caret.offset, len(node.content))))

    # Variable node: offset 0 is the gap before it, anything else the gap after.
    return _caret_at_gap(nodes, index if caret.offset <= 0 else index + 1)


def cursor_offset(nodes: Sequence[EditableNode], caret: Caret) -> int:
    """Return the serialized offset of *caret*. An empty list yields ``0``."""
    caret = normalize_caret(nodes, caret)
    position = 0
    for i, node in enumerate(nodes):
        if i == caret.index:
            if isinstance(node, TextNode):
                return position + caret.offset
            return position
        position += node_length(node)
    return position


def caret_at_offset(nodes: Sequence[EditableNode], offset: int) -> Caret:
    """Map a serialized offset back to a caret.

    Offsets are clamped to the document. An offset that falls inside a
    variable token snaps to the nearer edge of the token, the leading edge
    on a tie.
    """
    offset = max(0, min(offset, total_length(nodes)))
    position = 0
    for i, node in enumerate(nodes):
        length = node_length(node)
        if isinstance(node, TextNode):
            if offset <= position + length:
                return Caret(i, offset - position)
        elif isinstance(node, VariableNode) and offset < position + length:
            into = offset - position
            after = 0 if into <= length - into else 1
            return normalize_caret(nodes, Caret(i, after))
        position += length
    return _caret_at_gap(nodes, len(nodes))


def caret_at_end(nodes: Sequence[EditableNode]) -> Caret:
    return normalize_caret(nodes, Caret(len(nodes), 0))


def caret_after_node(nodes: Sequence[EditableNode], index: int) -> Caret:
    """Caret directly after ``nodes[index]``; the end when out of range."""
    if index < 0 or index >= len(nodes):
        return caret_at_end(nodes)
    node = nodes[index]
    if isinstance(node, TextNode):
        return Caret(index, len(node.content))
    return normalize_caret(nodes, Caret(index, 1))


def text_before_caret(nodes: Sequence[EditableNode], caret: Caret) -> str:
    """Serialize the part of the document that precedes *caret*."""
    caret = normalize_caret(nodes, caret)
    text = serialize(nodes[: caret.index])
    if caret.index < len(nodes):
        node = nodes[caret.index]
        if isinstance(node, TextNode):
            text += node.content[: caret.offset]
    return text


def is_caret_at_start(nodes: Sequence[EditableNode], caret: Caret) -> bool:
    return cursor_offset(nodes, caret) == 0


def is_caret_at_end(nodes: Sequence[EditableNode], caret: Caret) -> bool:
    return cursor_offset(nodes, caret) == total_length(nodes)

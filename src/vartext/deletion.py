"""Atomic deletion of variable chips.

Backspace right after a chip, or right after the separator that follows a
chip, removes the chip (and that separator) in one step. Forward delete
mirrors this: with the caret right before a chip it removes the chip and
the separator directly after it. Anything else falls through to ordinary
single-character deletion.
"""

from __future__ import annotations

import logging
from typing import Sequence

from vartext.cursor import cursor_offset, normalize_caret, total_length
from vartext.nodes import SEPARATOR, Caret, EditableNode, TextNode, VariableNode, node_length
from vartext.surface import EditableSurface

logger = logging.getLogger(__name__)


def atomic_span_before(nodes: Sequence[EditableNode], caret: Caret) -> tuple[int, int] | None:
    """Range removed by a backward deletion at *caret*, or ``None``."""
    caret = normalize_caret(nodes, caret)
    chip_index = caret.index - 1

    if caret.index < len(nodes) and isinstance(nodes[caret.index], TextNode):
        text = nodes[caret.index]
        at_separator = caret.offset == len(SEPARATOR) and text.content.startswith(SEPARATOR)
        if caret.offset != 0 and not at_separator:
            return None

    if chip_index < 0 or not isinstance(nodes[chip_index], VariableNode):
        return None
    return total_length(nodes[:chip_index]), cursor_offset(nodes, caret)


def atomic_span_after(nodes: Sequence[EditableNode], caret: Caret) -> tuple[int, int] | None:
    """Range removed by a forward deletion at *caret*, or ``None``."""
    caret = normalize_caret(nodes, caret)
    chip_index = caret.index

    if caret.index < len(nodes) and isinstance(nodes[caret.index], TextNode):
        if caret.offset < len(nodes[caret.index].content):
            return None
        chip_index = caret.index + 1

    if chip_index >= len(nodes) or not isinstance(nodes[chip_index], VariableNode):
        return None

    start = cursor_offset(nodes, caret)
    end = start + node_length(nodes[chip_index])
    following = nodes[chip_index + 1] if chip_index + 1 < len(nodes) else None
    if isinstance(following, TextNode) and following.content.startswith(SEPARATOR):
        end += len(SEPARATOR)
    return start, end


def handle_backspace(surface: EditableSurface) -> bool:
    """Delete the chip before the caret atomically. ``False`` means fall through."""
    span = atomic_span_before(surface.nodes, surface.caret)
    if span is None:
        return False
    logger.debug("Atomic backspace over [%d, %d)", *span)
    return surface.delete_range(*span)


def handle_forward_delete(surface: EditableSurface) -> bool:
    """Delete the chip after the caret atomically. ``False`` means fall through."""
    span = atomic_span_after(surface.nodes, surface.caret)
    if span is None:
        return False
    logger.debug("Atomic delete over [%d, %d)", *span)
    return surface.delete_range(*span)

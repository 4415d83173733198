"""Live node types for the editable surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from vartext.template import Segment, TextSegment, VariableSegment, format_variable

# Inserted after a variable so the user can keep typing without touching the chip.
SEPARATOR = " "


@dataclass
class TextNode:
    """Freely editable run of text."""

    content: str

    def to_template(self) -> str:
        return self.content


@dataclass
class VariableNode:
    """Atomic variable chip; removed only as a whole."""

    name: str
    atomic: bool = True

    def to_template(self) -> str:
        return format_variable(self.name)


EditableNode = Union[TextNode, VariableNode]


@dataclass(frozen=True)
class Caret:
    """Position of the live cursor inside a node list.

    For a ``TextNode`` at ``index``, ``offset`` counts characters into its
    content. For a ``VariableNode`` the only valid offsets are ``0`` (before
    the chip) and ``1`` (after it). ``index == len(nodes)`` with ``offset == 0``
    is the end boundary of the surface.
    """

    index: int = 0
    offset: int = 0


def node_length(node: EditableNode) -> int:
    """Length of *node* in serialized template space."""
    if isinstance(node, VariableNode):
        return len(format_variable(node.name))
    return len(node.content)


def nodes_from_segments(segments: list[Segment]) -> list[EditableNode]:
    nodes: list[EditableNode] = []
    for segment in segments:
        if isinstance(segment, VariableSegment):
            nodes.append(VariableNode(segment.name))
        elif isinstance(segment, TextSegment) and segment.content:
            nodes.append(TextNode(segment.content))
    return nodes


def normalize_nodes(nodes: list[EditableNode]) -> list[EditableNode]:
    """Merge adjacent text runs and drop empty ones."""
    result: list[EditableNode] = []
    for node in nodes:
        if isinstance(node, TextNode):
            if not node.content:
                continue
            if result and isinstance(result[-1], TextNode):
                result[-1] = TextNode(result[-1].content + node.content)
                continue
        result.append(node)
    return result

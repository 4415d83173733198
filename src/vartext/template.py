"""Template strings with ``{{variable}}`` placeholders.

A template is plain text interleaved with variable tokens. ``parse`` splits
a template into an ordered list of segments and ``serialize`` turns any
sequence of segments or editable nodes back into template text. Malformed
tokens (``{{}}``, ``{{first name}}``, an unterminated ``{{``) are kept as
literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol, Union

# Identifier characters follow the ASCII word class, same as the stored templates.
VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}", re.ASCII)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class TemplatePart(Protocol):
    """Anything that knows its own template text (segments and nodes)."""

    def to_template(self) -> str: ...


def format_variable(name: str) -> str:
    """Return the token text for *name*, e.g. ``{{first_name}}``."""
    return "{{" + name + "}}"


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextSegment:
    """A literal run of text."""

    content: str

    def to_template(self) -> str:
        return self.content


@dataclass(frozen=True)
class VariableSegment:
    """A reference to a named variable."""

    name: str

    def to_template(self) -> str:
        return format_variable(self.name)


Segment = Union[TextSegment, VariableSegment]


def parse(value: str) -> list[Segment]:
    """Split *value* into text and variable segments, left to right.

    Empty text runs are never produced. Any string is accepted.
    """
    segments: list[Segment] = []
    last_index = 0

    for match in VARIABLE_PATTERN.finditer(value):
        if match.start() > last_index:
            segments.append(TextSegment(value[last_index : match.start()]))
        segments.append(VariableSegment(match.group(1)))
        last_index = match.end()

    if last_index < len(value):
        segments.append(TextSegment(value[last_index:]))

    return segments


def serialize(parts: Iterable[TemplatePart]) -> str:
    """Join segments or nodes back into template text."""
    return "".join(part.to_template() for part in parts)


def collapse_line_breaks(text: str) -> str:
    """Replace every line separator with a single space."""
    return _LINE_BREAK_RE.sub(" ", text)


def serialize_single_line(parts: Iterable[TemplatePart]) -> str:
    """Like ``serialize`` but with line separators collapsed to spaces."""
    return collapse_line_breaks(serialize(parts))


# ---------------------------------------------------------------------------
# Helpers used by previews and catalog checks
# ---------------------------------------------------------------------------


def extract_variables(template: str) -> list[str]:
    """Return the distinct variable names in *template*, in first-seen order."""
    seen: dict[str, None] = {}
    for segment in parse(template):
        if isinstance(segment, VariableSegment):
            seen.setdefault(segment.name, None)
    return list(seen)


def unknown_variables(template: str, known: Iterable[str]) -> list[str]:
    """Return the variable names in *template* that are not in *known*."""
    known_names = set(known)
    return [name for name in extract_variables(template) if name not in known_names]


def render_template(template: str, data: Mapping[str, object]) -> str:
    """Substitute variable tokens with values from *data*.

    Tokens without a value (missing or ``None``) are left as they are.
    """
    parts: list[str] = []
    for segment in parse(template):
        value = data.get(segment.name) if isinstance(segment, VariableSegment) else None
        parts.append(segment.to_template() if value is None else str(value))
    return "".join(parts)

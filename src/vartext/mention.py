"""Mention autocomplete: ``@query`` detection, filtering and selection.

The machine is either idle or composing. While composing it remembers the
query typed after the trigger character, the offset of the trigger and the
highlighted candidate. It never touches the text itself; the editor applies
commits to its surface.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Sequence

logger = logging.getLogger(__name__)

DEFAULT_TRIGGER = "@"


@dataclass(frozen=True)
class MentionState:
    """Snapshot of the autocomplete state for rendering a suggestion list."""

    active: bool = False
    query: str = ""
    anchor_offset: int = -1
    selected_index: int = 0
    candidates: tuple[str, ...] = ()


IDLE = MentionState()


def filter_candidates(catalog: Sequence[str], query: str) -> list[str]:
    """Names containing *query* case-insensitively, in catalog order."""
    needle = query.lower()
    return [name for name in catalog if needle in name.lower()]


class MentionStateMachine:
    """Idle / Composing state machine over a read-only variable catalog."""

    def __init__(self, catalog: Sequence[str], trigger: str = DEFAULT_TRIGGER) -> None:
        if len(trigger) != 1:
            raise ValueError(f"trigger must be a single character, got {trigger!r}")
        self._catalog: tuple[str, ...] = tuple(catalog)
        self._trigger = trigger
        self._pattern = re.compile(re.escape(trigger) + r"(\w*)$", re.ASCII)
        self._state = IDLE

    # -- Accessors -----------------------------------------------------------

    @property
    def state(self) -> MentionState:
        return self._state

    @property
    def trigger(self) -> str:
        return self._trigger

    @property
    def catalog(self) -> tuple[str, ...]:
        return self._catalog

    @property
    def is_composing(self) -> bool:
        return self._state.active

    @property
    def has_candidates(self) -> bool:
        return self._state.active and bool(self._state.candidates)

    def set_catalog(self, catalog: Sequence[str]) -> None:
        self._catalog = tuple(catalog)
        if self._state.active:
            self._state = self._composing(self._state.query, self._state.anchor_offset)

    # -- Transitions -----------------------------------------------------------

    def update(self, text_before_cursor: str, cursor: int) -> MentionState:
        """Re-derive the state from the text that precedes the cursor."""
        match = self._pattern.search(text_before_cursor)
        if match is None:
            if self._state.active:
                logger.debug("Mention composing ended (no trigger before cursor)")
            self._state = IDLE
            return self._state

        query = match.group(1)
        anchor = cursor - len(match.group(0))
        previous = self._state
        if previous.active and previous.query == query and previous.anchor_offset == anchor:
            return previous

        self._state = self._composing(query, anchor)
        logger.debug("Mention composing query=%r anchor=%d matches=%d", query, anchor, len(self._state.candidates))
        return self._state

    def open_menu(self, cursor: int) -> MentionState:
        """Start composing without a trigger: the commit span is empty."""
        self._state = self._composing("", cursor)
        return self._state

    def move_selection(self, delta: int) -> None:
        """Move the highlight by *delta*, wrapping at both ends."""
        if not self.has_candidates:
            return
        count = len(self._state.candidates)
        self._state = replace(self._state, selected_index=(self._state.selected_index + delta) % count)

    def set_selected_index(self, index: int) -> None:
        if not self.has_candidates:
            return
        index = max(0, min(index, len(self._state.candidates) - 1))
        self._state = replace(self._state, selected_index=index)

    def selected_candidate(self) -> str | None:
        if not self.has_candidates:
            return None
        return self._state.candidates[self._state.selected_index]

    def cancel(self) -> None:
        """Escape: stop composing and leave the text alone."""
        self._state = IDLE

    def blur(self) -> None:
        """Focus left the editor and its suggestion list."""
        self._state = IDLE

    def _composing(self, query: str, anchor: int) -> MentionState:
        return MentionState(
            active=True,
            query=query,
            anchor_offset=anchor,
            selected_index=0,
            candidates=tuple(filter_candidates(self._catalog, query)),
        )

"""Editor keybindings manager."""

from __future__ import annotations

from typing import Literal

from vartext.keys import KeyId, matches_key

EditorAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    # Text input
    "newLine",
    "submit",
    "tab",
    # Suggestions
    "selectUp",
    "selectDown",
    "selectConfirm",
    "selectCancel",
    "toggleVariableMenu",
]

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    # Text input
    "newLine": ["shift+enter", "alt+enter"],
    "submit": "enter",
    "tab": "tab",
    # Suggestions
    "selectUp": "up",
    "selectDown": "down",
    "selectConfirm": "enter",
    "selectCancel": ["escape", "ctrl+c"],
    # Legacy terminals send "\n" for ctrl+j; the editor checks it before enter
    "toggleVariableMenu": "ctrl+j",
}


class EditorKeybindingsManager:
    """Resolves editor actions to the key ids bound to them.

    An override replaces the default keys of its action outright; an empty
    list leaves the action unbound.
    """

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        merged = {**DEFAULT_EDITOR_KEYBINDINGS, **(config or {})}
        self._bindings: dict[EditorAction, tuple[KeyId, ...]] = {
            action: tuple(keys) if isinstance(keys, list) else (keys,)
            for action, keys in merged.items()
        }

    def matches(self, data: str, action: EditorAction) -> bool:
        return any(matches_key(data, key) for key in self._bindings.get(action, ()))


_active_bindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    """Bindings used by every editor, created with defaults on first use."""
    global _active_bindings
    if _active_bindings is None:
        _active_bindings = EditorKeybindingsManager()
    return _active_bindings


def set_editor_keybindings(manager: EditorKeybindingsManager | None) -> None:
    """Install *manager* for all editors; ``None`` restores the defaults."""
    global _active_bindings
    _active_bindings = manager

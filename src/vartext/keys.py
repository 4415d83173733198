"""Keyboard input matching for the terminal editor.

Recognises the kitty keyboard protocol (``CSI <codepoint>;<modifier> u``),
xterm-style modified cursor sequences and the plain legacy bytes most
terminals send. ``matches_key`` answers whether a chunk of raw input is the
named key, e.g. ``"ctrl+a"`` or ``"shift+tab"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

KeyId = str


class Key:
    """Named key identifiers accepted by ``matches_key``."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

# Caps lock and num lock bits reported by kitty
LOCK_MASK = 64 + 128

CODEPOINTS: dict[str, int] = {
    "escape": 27,
    "tab": 9,
    "enter": 13,
    "space": 32,
    "backspace": 127,
    "kp_enter": 57414,
}

# Final byte of CSI sequences for cursor-style keys
_CURSOR_FINALS: dict[str, str] = {
    "up": "A",
    "down": "B",
    "right": "C",
    "left": "D",
    "home": "H",
    "end": "F",
}

# Parameter of ``CSI <n> ~`` sequences
_TILDE_NUMBERS: dict[str, int] = {
    "home": 1,
    "delete": 3,
    "end": 4,
}

LEGACY_KEY_SEQUENCES: dict[str, list[str]] = {
    "up": ["\x1b[A", "\x1bOA"],
    "down": ["\x1b[B", "\x1bOB"],
    "right": ["\x1b[C", "\x1bOC"],
    "left": ["\x1b[D", "\x1bOD"],
    "home": ["\x1b[H", "\x1bOH", "\x1b[1~", "\x1b[7~"],
    "end": ["\x1b[F", "\x1bOF", "\x1b[4~", "\x1b[8~"],
    "delete": ["\x1b[3~"],
}

# CSI u format: \x1b[<codepoint>(:<shifted>(:<base>))?(;<modifier>(:<event>))?u
_KITTY_CSI_U_RE = re.compile(
    r"\x1b\[(\d+)(?::(\d*)(?::(\d+))?)?(?:;(\d+)(?::(\d+))?)?u$"
)

# Modified cursor keys: \x1b[1;<modifier>(:<event>)?[ABCDHF]
_MODIFIED_CURSOR_RE = re.compile(r"\x1b\[1;(\d+)(?::(\d+))?([ABCDHF])$")

# Modified tilde keys: \x1b[<number>;<modifier>(:<event>)?~
_MODIFIED_TILDE_RE = re.compile(r"\x1b\[(\d+);(\d+)(?::(\d+))?~$")


@dataclass
class ParsedKittySequence:
    codepoint: int
    base_layout_key: Optional[int]
    modifier: int
    event_type: int  # 1 = press, 2 = repeat, 3 = release


def parse_kitty_sequence(data: str) -> ParsedKittySequence | None:
    """Parse a kitty ``CSI u`` sequence, or return ``None``."""
    m = _KITTY_CSI_U_RE.match(data)
    if not m:
        return None
    return ParsedKittySequence(
        codepoint=int(m.group(1)),
        base_layout_key=int(m.group(3)) if m.group(3) else None,
        modifier=int(m.group(4)) if m.group(4) else 1,
        event_type=int(m.group(5)) if m.group(5) else 1,
    )


def matches_kitty_sequence(
    data: str, expected_codepoint: int, expected_modifier: int
) -> bool:
    """Check if *data* is a kitty key press with the given codepoint and modifier."""
    parsed = parse_kitty_sequence(data)
    if parsed is None or parsed.event_type == 3:
        return False
    actual_mod = (parsed.modifier - 1) & ~LOCK_MASK
    if actual_mod != expected_modifier:
        return False
    return expected_codepoint in (parsed.codepoint, parsed.base_layout_key)


def is_key_release(data: str) -> bool:
    """Check if *data* is a kitty key release event."""
    parsed = parse_kitty_sequence(data)
    if parsed is not None:
        return parsed.event_type == 3
    m = _MODIFIED_CURSOR_RE.match(data) or _MODIFIED_TILDE_RE.match(data)
    if m is None:
        return False
    event = m.group(2) if m.re is _MODIFIED_CURSOR_RE else m.group(3)
    return event == "3"


def raw_ctrl_char(key: str) -> str | None:
    """Return the control character for a key, or ``None`` if not applicable.

    For example, ``raw_ctrl_char("a")`` returns ``"\\x01"``.
    """
    if len(key) != 1:
        return None
    code = ord(key.lower())
    if ord("a") <= code <= ord("z"):
        return chr(code & 0x1F)
    ctrl_map: dict[str, str] = {
        "[": chr(27),
        "\\": chr(28),
        "]": chr(29),
        "^": chr(30),
        "_": chr(31),
        "@": chr(0),
    }
    return ctrl_map.get(key)


def parse_key_id(key_id: str) -> tuple[int, str] | None:
    """Split ``"ctrl+shift+a"`` into ``(modifier_bits, "a")``.

    Returns ``None`` for an empty identifier or one with no base key.
    """
    if not key_id:
        return None
    modifier = 0
    key_parts: list[str] = []
    for part in key_id.split("+"):
        lower = part.lower()
        if lower in MODIFIERS:
            modifier |= MODIFIERS[lower]
        else:
            key_parts.append(part)
    key = "+".join(key_parts)
    if not key:
        return None
    return modifier, key


# ---------------------------------------------------------------------------
# matches_key
# ---------------------------------------------------------------------------


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if *data* (raw terminal input) is the named *key_id*."""
    parsed = parse_key_id(key_id)
    if parsed is None:
        return False
    mod, key = parsed
    if key == "esc":
        key = "escape"
    elif key == "return":
        key = "enter"

    if key in CODEPOINTS:
        if matches_kitty_sequence(data, CODEPOINTS[key], mod):
            return True
        if key == "enter" and matches_kitty_sequence(data, CODEPOINTS["kp_enter"], mod):
            return True
        return _match_legacy_special(data, key, mod)

    if key in _CURSOR_FINALS or key in _TILDE_NUMBERS:
        return _match_cursor_key(data, key, mod)

    return _match_char_key(data, key, mod)


def _match_legacy_special(data: str, key: str, mod: int) -> bool:
    alt = MODIFIERS["alt"]
    if key == "escape":
        return (mod == 0 and data == "\x1b") or (mod == alt and data == "\x1b\x1b")
    if key == "space":
        if mod == 0:
            return data == " "
        if mod == MODIFIERS["ctrl"]:
            return data == "\x00"
        return mod == alt and data == "\x1b "
    if key == "tab":
        if mod == 0:
            return data == "\t"
        if mod == MODIFIERS["shift"]:
            return data == "\x1b[Z"
        return mod == alt and data == "\x1b\t"
    if key == "enter":
        if mod == 0:
            return data in ("\r", "\n")
        return mod == alt and data in ("\x1b\r", "\x1b\n")
    if key == "backspace":
        if mod == 0:
            return data in ("\x7f", "\x08")
        if mod == MODIFIERS["ctrl"]:
            return data == "\x08"
        return mod == alt and data in ("\x1b\x7f", "\x1b\x08")
    return False


def _match_cursor_key(data: str, key: str, mod: int) -> bool:
    if mod == 0:
        return data in LEGACY_KEY_SEQUENCES.get(key, [])

    m = _MODIFIED_CURSOR_RE.match(data)
    if m and _CURSOR_FINALS.get(key) == m.group(3):
        return _modifier_param_matches(m.group(1), m.group(2), mod)

    m = _MODIFIED_TILDE_RE.match(data)
    if m and _TILDE_NUMBERS.get(key) == int(m.group(1)):
        return _modifier_param_matches(m.group(2), m.group(3), mod)

    # rxvt and older xterm send ESC-prefixed cursor keys for alt
    if mod == MODIFIERS["alt"]:
        return any(data == "\x1b" + seq for seq in LEGACY_KEY_SEQUENCES.get(key, []))
    return False


def _modifier_param_matches(param: str, event: str | None, mod: int) -> bool:
    if event == "3":
        return False
    return ((int(param) - 1) & ~LOCK_MASK) == mod


def _match_char_key(data: str, key: str, mod: int) -> bool:
    """Match a single character key (letter, digit or symbol) with modifiers."""
    if len(key) != 1:
        return False
    key_lower = key.lower()
    if matches_kitty_sequence(data, ord(key_lower), mod):
        return True

    ctrl, shift, alt = MODIFIERS["ctrl"], MODIFIERS["shift"], MODIFIERS["alt"]
    if mod == 0:
        return data == key
    if mod == shift:
        return key_lower.isalpha() and data == key_lower.upper()
    if mod == alt:
        return data == "\x1b" + key
    ctrl_char = raw_ctrl_char(key)
    if ctrl_char is None:
        return False
    if mod == ctrl:
        return data == ctrl_char
    if mod == ctrl | alt:
        return data == "\x1b" + ctrl_char
    return False

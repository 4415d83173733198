"""Exception types raised outside the editing core.

Editing operations themselves never raise; these cover configuration input
such as catalog files.
"""

from __future__ import annotations


class VartextError(Exception):
    """Base class for errors raised by vartext."""


class CatalogError(VartextError):
    """A variable catalog could not be read or validated."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

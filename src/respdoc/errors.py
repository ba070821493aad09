"""Diagnostics raised while compiling response annotations.

Every error is fatal for the declaration being compiled. The message is a
fixed string, optionally followed by a ``help`` hint, and is prefixed with the
source location when one is known.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from respdoc.models import Location


class RespdocError(Exception):
    """Base class for all compilation errors."""

    def __init__(self, message: str, location: Location | None = None, help: str | None = None) -> None:
        self.message = message
        self.location = location
        self.help = help
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.location}: {self.message}" if self.location else self.message
        if self.help:
            text += f"\n  help: {self.help}"
        return text


class GrammarError(RespdocError):
    """Unexpected or missing token in an annotation."""


class ConflictError(RespdocError):
    """Mutually exclusive constructs were used together."""


class ResolutionError(RespdocError):
    """A status literal does not match the fixed registry or range set."""


class ShapeError(RespdocError):
    """The annotated declaration has an unsupported shape."""

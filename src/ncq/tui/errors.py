"""Exception types raised by the prompt editor.

Configuration faults abort before any input is accepted, span faults signal
programmer errors that would otherwise corrupt the user's text, and render
faults report a failed terminal write without touching editor state.
"""

from __future__ import annotations


class EditorError(Exception):
    """Base class for all editor errors."""


class ConfigurationError(EditorError, ValueError):
    """Invalid construction-time configuration (key bindings, viewport size)."""


class KeyBindingError(ConfigurationError):
    """A key binding table that cannot be resolved unambiguously."""


class SpanRangeError(EditorError, ValueError):
    """A buffer span that lies outside the buffer or is inverted."""

    def __init__(self, start: int, end: int, length: int) -> None:
        super().__init__(
            f"span [{start}, {end}) is outside buffer of length {length}"
        )
        self.start = start
        self.end = end
        self.length = length


class RenderError(EditorError, RuntimeError):
    """Writing a frame to the output sink failed."""

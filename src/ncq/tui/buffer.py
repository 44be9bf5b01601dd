"""Logical text buffer with an absolute cursor offset."""

from __future__ import annotations

from ncq.tui.errors import SpanRangeError


class TextBuffer:
    """The editor's logical multi-line text and cursor.

    ``content`` is ``\\n``-separated and ``cursor`` is an offset into it,
    always within ``[0, len(content)]``.
    """

    def __init__(self, content: str = "", cursor: int | None = None) -> None:
        self._content = content
        self._cursor = len(content) if cursor is None else self._clamp(cursor)

    def __len__(self) -> int:
        return len(self._content)

    def __repr__(self) -> str:
        return f"TextBuffer(content={self._content!r}, cursor={self._cursor})"

    @property
    def content(self) -> str:
        return self._content

    @property
    def cursor(self) -> int:
        return self._cursor

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._content)))

    def set_cursor(self, offset: int) -> None:
        """Move the cursor, clamping into the buffer bounds."""
        self._cursor = self._clamp(offset)

    def set_text(self, text: str) -> None:
        """Replace all content and place the cursor at the end."""
        self._content = text
        self._cursor = len(text)

    # -- Edits ---------------------------------------------------------------

    def insert(self, text: str) -> None:
        """Insert *text* at the cursor and advance past it."""
        if not text:
            return
        c = self._cursor
        self._content = self._content[:c] + text + self._content[c:]
        self._cursor = c + len(text)

    def delete_back(self) -> None:
        """Delete the character before the cursor (backspace)."""
        if self._cursor == 0:
            return
        c = self._cursor
        self._content = self._content[: c - 1] + self._content[c:]
        self._cursor = c - 1

    def delete_forward(self) -> None:
        """Delete the character under the cursor."""
        if self._cursor >= len(self._content):
            return
        c = self._cursor
        self._content = self._content[:c] + self._content[c + 1 :]

    def replace_span(self, start: int, end: int, text: str) -> None:
        """Replace ``content[start:end]`` with *text*.

        The cursor ends up just after the inserted text.  An inverted span or
        one outside the buffer raises ``SpanRangeError``; it is never clamped.
        """
        length = len(self._content)
        if not 0 <= start <= end <= length:
            raise SpanRangeError(start, end, length)
        self._content = self._content[:start] + text + self._content[end:]
        self._cursor = start + len(text)

"""Line-aware cursor movement over a ``TextBuffer``."""

from __future__ import annotations

from ncq.tui.buffer import TextBuffer
from ncq.tui.line_mapper import Coordinate, WrappedLines, to_coordinate, to_offset, wrap


class NavigationEngine:
    """Moves the buffer cursor by logical lines and by wrapped rows.

    ``line_start``/``line_end`` work on logical (``\\n``-separated) lines.
    ``line_up``/``line_down`` work on wrapped rows as laid out at ``width``
    columns, with ``prefix`` (the prompt) occupying the start of the first
    row, so vertical movement follows what is on screen.
    """

    def __init__(
        self,
        buffer: TextBuffer,
        *,
        width: int = 80,
        prefix: str = "",
        multiline: bool = True,
    ) -> None:
        self._buffer = buffer
        self.width = width
        self.prefix = prefix
        self.multiline = multiline

    def layout(self) -> WrappedLines:
        """Wrap the prompt prefix plus buffer content at the current width."""
        return wrap(self.prefix + self._buffer.content, max(1, self.width))

    # -- Logical lines -------------------------------------------------------

    def line_start(self) -> None:
        cursor = self._buffer.cursor
        if cursor <= 0:
            return
        self._buffer.set_cursor(self._buffer.content.rfind("\n", 0, cursor) + 1)

    def line_end(self) -> None:
        content = self._buffer.content
        cursor = self._buffer.cursor
        if cursor >= len(content):
            return
        newline = content.find("\n", cursor)
        self._buffer.set_cursor(len(content) if newline == -1 else newline)

    # -- Characters ----------------------------------------------------------

    def cursor_left(self) -> None:
        self._buffer.set_cursor(self._buffer.cursor - 1)

    def cursor_right(self) -> None:
        self._buffer.set_cursor(self._buffer.cursor + 1)

    # -- Wrapped rows --------------------------------------------------------

    def line_up(self) -> None:
        wrapped = self.layout()
        here = to_coordinate(wrapped, len(self.prefix) + self._buffer.cursor)
        if here.row == 0:
            return
        self._move_to_row(wrapped, here.row - 1, here.col)

    def line_down(self) -> None:
        if self._buffer.cursor >= len(self._buffer) and self.multiline:
            self._buffer.insert("\n")
            return

        wrapped = self.layout()
        here = to_coordinate(wrapped, len(self.prefix) + self._buffer.cursor)
        if here.row >= len(wrapped) - 1:
            return
        self._move_to_row(wrapped, here.row + 1, here.col)

    def _move_to_row(self, wrapped: WrappedLines, row: int, col: int) -> None:
        col = min(col, len(wrapped[row]))
        # Landing on a soft wrap boundary would put the cursor on the next row.
        if col == len(wrapped[row]) and col > 0 and not wrapped.ends_line(row) and row < len(wrapped) - 1:
            col -= 1
        offset = to_offset(wrapped, Coordinate(row, col)) - len(self.prefix)
        self._buffer.set_cursor(max(0, offset))

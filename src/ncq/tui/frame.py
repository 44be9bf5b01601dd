"""Rendered frames and the writer that paints them onto the terminal.

A frame is the complete set of rows for the editor region plus the cursor
position inside it.  Each write repaints the whole region, so writing the
same frame twice produces the same screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from ncq.tui.errors import RenderError

logger = logging.getLogger(__name__)

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_TO_END = "\x1b[J"


@dataclass
class Frame:
    """Rows to draw and the cursor position relative to the first row."""

    lines: list[str] = field(default_factory=list)
    cursor_row: int = 0
    cursor_col: int = 0
    final: bool = False


class OutputSink(Protocol):
    """Anything that accepts raw terminal output."""

    def write(self, data: str) -> None: ...


class FrameWriter:
    """Paints frames in place, tracking where the previous frame left the cursor."""

    def __init__(self, sink: OutputSink) -> None:
        self._sink = sink
        self._cursor_row = 0
        self._line_count = 0

    @property
    def cursor_row(self) -> int:
        return self._cursor_row

    @staticmethod
    def move_cursor(from_row: int, row: int, col: int) -> str:
        """Escape sequence moving from *from_row* to (*row*, *col*) in the frame."""
        out: list[str] = []
        delta = from_row - row
        if delta > 0:
            out.append(f"\x1b[{delta}A")
        elif delta < 0:
            out.append(f"\x1b[{-delta}B")
        out.append("\r")
        if col > 0:
            out.append(f"\x1b[{col}C")
        return "".join(out)

    def write(self, frame: Frame) -> None:
        """Repaint the region with *frame*.

        Raises ``RenderError`` if the sink fails.  Bookkeeping is only updated
        after a successful write, so the next write starts from the last known
        good position.
        """
        out: list[str] = [_HIDE_CURSOR]

        # Navigate to row 0 of our region
        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r")
        out.append(_CLEAR_TO_END)
        out.append("\r\n".join(frame.lines))

        last_row = max(0, len(frame.lines) - 1)
        out.append(self.move_cursor(last_row, frame.cursor_row, frame.cursor_col))
        if not frame.final:
            out.append(_SHOW_CURSOR)

        self._emit("".join(out))
        self._cursor_row = frame.cursor_row
        self._line_count = len(frame.lines)

    def finish(self, frame: Frame) -> None:
        """Paint the final frame and leave the cursor on the line below it."""
        self.write(frame)
        last_row = max(0, self._line_count - 1)
        self._emit(self.move_cursor(self._cursor_row, last_row, 0) + "\r\n" + _SHOW_CURSOR)
        self._cursor_row = 0
        self._line_count = 0

    def _emit(self, data: str) -> None:
        try:
            self._sink.write(data)
        except OSError as exc:
            logger.warning("frame write failed: %s", exc)
            raise RenderError(f"could not write frame: {exc}") from exc

"""Fixed-height window over wrapped rows, plus a proportional scrollbar."""

from __future__ import annotations

import math

from ncq.tui.errors import ConfigurationError

SCROLL_UP_GLYPH = "▲"
SCROLL_DOWN_GLYPH = "▼"
SCROLL_THUMB = "\x1b[7m \x1b[27m"

# Columns taken by the scrollbar: one space then the glyph.
SCROLLBAR_GUTTER = 2


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positive values."""
    return math.floor(value + 0.5)


class Viewport:
    """Tracks the first visible wrapped row for a viewport of ``height`` rows."""

    def __init__(self, height: int, width: int, top_line: int = 0) -> None:
        if height < 1 or width < 1:
            raise ConfigurationError(
                f"viewport must be at least 1x1, got {width}x{height}"
            )
        self.height = height
        self.width = width
        self.top_line = max(0, top_line)

    def resize(self, height: int, width: int) -> None:
        if height < 1 or width < 1:
            raise ConfigurationError(
                f"viewport must be at least 1x1, got {width}x{height}"
            )
        self.height = height
        self.width = width

    def update(self, cursor_row: int, total_rows: int) -> None:
        """Scroll so that *cursor_row* is visible.

        Moving above the window scrolls up to the cursor row; moving below it
        scrolls so the cursor row becomes the top row, unless that would show
        past the end.  Content that fits resets the window to the top.
        """
        if cursor_row < self.top_line:
            self.top_line = max(min(cursor_row, total_rows - self.height), 0)
        elif cursor_row > self.top_line + self.height - 1:
            self.top_line = min(cursor_row, total_rows - self.height)
        elif total_rows <= self.height:
            self.top_line = 0
        self.top_line = max(0, self.top_line)

    def visible(self, rows: list[str]) -> list[str]:
        """Slice the visible rows, padding a short tail when content overflows."""
        shown = rows[self.top_line : self.top_line + self.height]
        if len(rows) > self.height and len(shown) < self.height:
            shown = shown + [""] * (self.height - len(shown))
        return shown


def scrollbar(total_rows: int, top_line: int, height: int) -> list[str]:
    """Return one scrollbar glyph per visible row.

    The thumb is ``round(height * height / total_rows)`` rows tall (at least
    one) and starts ``round(top_line * height / total_rows)`` rows down.  The
    remaining rows show an up arrow at the top, a down arrow at the bottom and
    blanks in between.  The thumb never starts so low that it leaves the bar.
    """
    if total_rows <= 0 or height <= 0:
        return []
    bar = min(height, max(1, round_half_up(height * height / total_rows)))
    scroll_top = round_half_up(top_line * height / total_rows)
    scroll_top = max(0, min(scroll_top, height - bar))

    glyphs: list[str] = []
    for i in range(height):
        if scroll_top <= i < scroll_top + bar:
            glyphs.append(SCROLL_THUMB)
        elif i == 0:
            glyphs.append(SCROLL_UP_GLYPH)
        elif i == height - 1:
            glyphs.append(SCROLL_DOWN_GLYPH)
        else:
            glyphs.append(" ")
    return glyphs

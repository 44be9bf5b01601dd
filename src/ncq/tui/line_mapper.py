"""Wrap logical text to a column width and map offsets to wrapped rows.

The on-screen text differs from the logical text once long lines wrap, so
cursor movement and cursor placement go through this mapping.  Rows are
slices of the source text: trailing spaces are kept, escape sequences are
zero width and never split.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, overload

from ncq.tui.utils import grapheme_width, split_ansi


@dataclass(frozen=True)
class Coordinate:
    """A (row, col) position inside ``WrappedLines``."""

    row: int
    col: int


class WrappedLines(Sequence[str]):
    """Read-only sequence of wrapped rows.

    Besides the row strings it records where each row starts in the source
    text and whether the row ends a logical line (is followed by ``\\n``).
    """

    __slots__ = ("_rows", "_starts", "_line_ends")

    def __init__(self, rows: list[str], starts: list[int], line_ends: list[bool]) -> None:
        self._rows = rows
        self._starts = starts
        self._line_ends = line_ends

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> list[str]: ...

    def __getitem__(self, index):
        return self._rows[index]

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rows)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, WrappedLines):
            return self._rows == other._rows and self._line_ends == other._line_ends
        if isinstance(other, list):
            return self._rows == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"WrappedLines({self._rows!r})"

    @property
    def rows(self) -> list[str]:
        return list(self._rows)

    def start_of(self, row: int) -> int:
        """Offset in the source text where *row* begins."""
        return self._starts[row]

    def ends_line(self, row: int) -> bool:
        """Whether *row* is followed by a logical line separator."""
        return self._line_ends[row]

    def row_span(self, row: int) -> int:
        """Length of *row* including its line separator, if any."""
        return len(self._rows[row]) + (1 if self._line_ends[row] else 0)


# ---------------------------------------------------------------------------
# wrap
# ---------------------------------------------------------------------------


def _wrap_logical_line(line: str, width: int) -> list[str]:
    """Hard-wrap one logical line at *width* visible columns."""
    rows: list[str] = []
    current: list[str] = []
    current_width = 0

    for token, is_escape in split_ansi(line):
        if is_escape:
            current.append(token)
            continue
        w = grapheme_width(token)
        # A row always takes at least one grapheme, even a too-wide one.
        if current_width + w > width and current_width > 0:
            rows.append("".join(current))
            current = []
            current_width = 0
        current.append(token)
        current_width += w

    rows.append("".join(current))
    return rows


def wrap(content: str, width: int) -> WrappedLines:
    """Split *content* on newlines and hard-wrap each line at *width* columns.

    Always returns at least one row.
    """
    if width < 1:
        raise ValueError(f"wrap width must be positive, got {width}")

    rows: list[str] = []
    starts: list[int] = []
    line_ends: list[bool] = []

    logical_lines = content.split("\n")
    offset = 0
    for index, line in enumerate(logical_lines):
        pieces = _wrap_logical_line(line, width)
        for piece in pieces:
            rows.append(piece)
            starts.append(offset)
            line_ends.append(False)
            offset += len(piece)
        if index < len(logical_lines) - 1:
            line_ends[-1] = True
            offset += 1

    return WrappedLines(rows, starts, line_ends)


# ---------------------------------------------------------------------------
# Offset <-> coordinate
# ---------------------------------------------------------------------------


def to_coordinate(wrapped: WrappedLines, offset: int) -> Coordinate:
    """Map an absolute offset to the wrapped row and column containing it.

    Rows are walked accumulating their length plus one for a line separator;
    the first row whose accumulated length exceeds *offset* contains it.  An
    offset exactly on a soft wrap boundary therefore belongs to the start of
    the next row.  Offsets past the end land on the last row.
    """
    consumed = 0
    for row in range(len(wrapped)):
        span = wrapped.row_span(row)
        if offset < consumed + span:
            return Coordinate(row, max(0, offset - consumed))
        consumed += span

    last = len(wrapped) - 1
    col = offset - wrapped.start_of(last)
    return Coordinate(last, max(0, min(col, len(wrapped[last]))))


def to_offset(wrapped: WrappedLines, coordinate: Coordinate) -> int:
    """Inverse of ``to_coordinate``; row and column are clamped to bounds."""
    row = max(0, min(coordinate.row, len(wrapped) - 1))
    col = max(0, min(coordinate.col, len(wrapped[row])))
    return wrapped.start_of(row) + col

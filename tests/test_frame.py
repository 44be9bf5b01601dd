"""Tests for ncq.tui.frame.FrameWriter."""

from __future__ import annotations

import pytest

from ncq.tui.errors import RenderError
from ncq.tui.frame import Frame, FrameWriter

from .virtual_terminal import VirtualTerminal

HIDE = "\x1b[?25l"
SHOW = "\x1b[?25h"
CLEAR = "\r\x1b[J"


class TestMoveCursor:
    def test_up_and_right(self) -> None:
        assert FrameWriter.move_cursor(3, 1, 4) == "\x1b[2A\r\x1b[4C"

    def test_down(self) -> None:
        assert FrameWriter.move_cursor(0, 2, 0) == "\x1b[2B\r"

    def test_same_row(self) -> None:
        assert FrameWriter.move_cursor(1, 1, 0) == "\r"


class TestWrite:
    def test_first_frame(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        writer.write(Frame(["ab", "cd"], cursor_row=0, cursor_col=1))
        assert term.output == f"{HIDE}{CLEAR}ab\r\ncd\x1b[1A\r\x1b[1C{SHOW}"
        assert writer.cursor_row == 0

    def test_next_frame_starts_from_previous_cursor(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        writer.write(Frame(["ab", "cd"], cursor_row=1, cursor_col=2))
        term.clear_buffer()
        writer.write(Frame(["x"], cursor_row=0, cursor_col=1))
        assert term.output == f"{HIDE}\x1b[1A{CLEAR}x\r\x1b[1C{SHOW}"

    def test_each_frame_is_one_write(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        writer.write(Frame(["a"]))
        writer.write(Frame(["a", "b"], cursor_row=1))
        assert term.write_count == 2

    def test_same_frame_twice_gives_same_output(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        frame = Frame(["one", "two"], cursor_row=1, cursor_col=3)
        writer.write(frame)
        term.clear_buffer()
        writer.write(frame)
        first = term.output
        term.clear_buffer()
        writer.write(frame)
        assert term.output == first


class TestFinish:
    def test_final_frame_moves_below_region(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        writer.finish(Frame(["a", "b"], cursor_row=1, cursor_col=1, final=True))
        assert term.output.endswith(f"\r\r\n{SHOW}")
        # Cursor stays hidden while the final frame is painted
        assert term.output.count(SHOW) == 1
        assert writer.cursor_row == 0

    def test_finish_from_upper_row(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        writer.finish(Frame(["a", "b", "c"], cursor_row=0, cursor_col=0, final=True))
        assert term.output.endswith(f"\x1b[2B\r\r\n{SHOW}")


class TestWriteFailure:
    def test_os_error_becomes_render_error(self) -> None:
        term = VirtualTerminal()
        term.fail_writes = 1
        writer = FrameWriter(term)
        with pytest.raises(RenderError) as excinfo:
            writer.write(Frame(["a"]))
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_failed_write_keeps_bookkeeping(self) -> None:
        term = VirtualTerminal()
        writer = FrameWriter(term)
        writer.write(Frame(["a", "b", "c"], cursor_row=2))
        term.fail_writes = 1
        with pytest.raises(RenderError):
            writer.write(Frame(["a"], cursor_row=0))
        assert writer.cursor_row == 2

        term.clear_buffer()
        writer.write(Frame(["a"], cursor_row=0))
        assert term.output.startswith(f"{HIDE}\x1b[2A{CLEAR}")

"""Tests for ncq.tui.viewport."""

from __future__ import annotations

import random

import pytest

from ncq.tui.buffer import TextBuffer
from ncq.tui.errors import ConfigurationError
from ncq.tui.line_mapper import to_coordinate
from ncq.tui.navigation import NavigationEngine
from ncq.tui.viewport import (
    SCROLL_DOWN_GLYPH,
    SCROLL_THUMB,
    SCROLL_UP_GLYPH,
    Viewport,
    round_half_up,
    scrollbar,
)


class TestViewportUpdate:
    def test_content_that_fits_stays_at_top(self) -> None:
        vp = Viewport(height=5, width=10)
        vp.update(cursor_row=3, total_rows=4)
        assert vp.top_line == 0

    def test_scrolls_down_to_cursor(self) -> None:
        vp = Viewport(height=3, width=10)
        vp.update(cursor_row=5, total_rows=10)
        assert vp.top_line == 5

    def test_scroll_down_never_shows_past_end(self) -> None:
        vp = Viewport(height=3, width=10)
        vp.update(cursor_row=9, total_rows=10)
        assert vp.top_line == 7

    def test_scrolls_up_to_cursor(self) -> None:
        vp = Viewport(height=3, width=10, top_line=6)
        vp.update(cursor_row=2, total_rows=10)
        assert vp.top_line == 2

    def test_cursor_inside_window_keeps_position(self) -> None:
        vp = Viewport(height=3, width=10, top_line=4)
        vp.update(cursor_row=5, total_rows=10)
        assert vp.top_line == 4

    def test_shrinking_content_resets_to_top(self) -> None:
        vp = Viewport(height=3, width=10, top_line=2)
        vp.update(cursor_row=2, total_rows=3)
        assert vp.top_line == 0

    def test_update_is_idempotent(self) -> None:
        vp = Viewport(height=4, width=10)
        vp.update(cursor_row=8, total_rows=12)
        first = vp.top_line
        vp.update(cursor_row=8, total_rows=12)
        assert vp.top_line == first

    @pytest.mark.parametrize("height,width", [(0, 10), (3, 0), (-1, -1)])
    def test_zero_size_is_configuration_error(self, height: int, width: int) -> None:
        with pytest.raises(ConfigurationError):
            Viewport(height=height, width=width)

    def test_resize_validates(self) -> None:
        vp = Viewport(height=3, width=10)
        with pytest.raises(ConfigurationError):
            vp.resize(0, 10)
        vp.resize(5, 20)
        assert (vp.height, vp.width) == (5, 20)


class TestViewportVisible:
    def test_short_content_is_not_padded(self) -> None:
        vp = Viewport(height=5, width=10)
        assert vp.visible(["a", "b"]) == ["a", "b"]

    def test_slices_window(self) -> None:
        vp = Viewport(height=2, width=10, top_line=1)
        assert vp.visible(["a", "b", "c", "d"]) == ["b", "c"]


class TestViewportInvariant:
    """After any edit or move, the cursor row stays inside the window."""

    @pytest.mark.parametrize("seed", range(8))
    def test_random_edit_sequences(self, seed: int) -> None:
        rng = random.Random(seed)
        buf = TextBuffer()
        nav = NavigationEngine(buf, width=7, prefix="> ")
        vp = Viewport(height=4, width=7)

        ops = [
            lambda: buf.insert(rng.choice("abcdefghij ")),
            lambda: buf.insert("\n"),
            lambda: buf.delete_back(),
            lambda: buf.delete_forward(),
            nav.line_up,
            nav.line_down,
            nav.line_start,
            nav.line_end,
            nav.cursor_left,
            nav.cursor_right,
        ]
        weights = [30, 5, 5, 3, 6, 6, 3, 3, 3, 3]

        for _ in range(300):
            rng.choices(ops, weights)[0]()
            wrapped = nav.layout()
            cursor = to_coordinate(wrapped, len(nav.prefix) + buf.cursor)
            vp.update(cursor.row, len(wrapped))

            assert vp.top_line >= 0
            if len(wrapped) > vp.height:
                assert vp.top_line <= cursor.row <= vp.top_line + vp.height - 1
            else:
                assert vp.top_line == 0


class TestScrollbar:
    def test_scenario_thumb_position_and_size(self) -> None:
        # height 3, 10 rows, top 4: scroll_top = round(1.2) = 1, bar = round(0.9) = 1
        assert scrollbar(total_rows=10, top_line=4, height=3) == [
            SCROLL_UP_GLYPH,
            SCROLL_THUMB,
            SCROLL_DOWN_GLYPH,
        ]

    def test_thumb_at_top(self) -> None:
        glyphs = scrollbar(total_rows=8, top_line=0, height=4)
        assert glyphs == [SCROLL_THUMB, SCROLL_THUMB, " ", SCROLL_DOWN_GLYPH]

    def test_thumb_at_bottom(self) -> None:
        glyphs = scrollbar(total_rows=8, top_line=4, height=4)
        assert glyphs == [SCROLL_UP_GLYPH, " ", SCROLL_THUMB, SCROLL_THUMB]

    def test_one_glyph_per_row(self) -> None:
        assert len(scrollbar(total_rows=50, top_line=10, height=7)) == 7

    @pytest.mark.parametrize("height", [1, 2, 3, 5, 10])
    def test_thumb_is_at_least_one_row(self, height: int) -> None:
        for total in range(height + 1, height * 40):
            for top in range(0, total - height + 1):
                glyphs = scrollbar(total, top, height)
                assert glyphs.count(SCROLL_THUMB) >= 1

    def test_half_rounds_up(self) -> None:
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(1.49) == 1

"""Tests for ncq.tui.editor.PromptEditor."""

from __future__ import annotations

import pytest

from ncq.tui.editor import EditorOptions, EditorTheme, PromptEditor
from ncq.tui.errors import ConfigurationError
from ncq.tui.keybindings import KeyBindings
from ncq.tui.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START
from ncq.tui.suggestions import Choice
from ncq.tui.viewport import SCROLL_THUMB, SCROLL_UP_GLYPH

# Raw escape codes for key sequences
KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_LEFT = "\x1b[D"
KEY_ENTER = "\r"
KEY_TAB = "\t"
KEY_ALT_ENTER = "\x1b\r"
KEY_BACKSPACE = "\x7f"
KEY_CTRL_A = "\x01"
KEY_CTRL_C = "\x03"

LODASH = Choice(id="1", label="lodash")
AXIOS = Choice(id="2", label="axios")


def _plain(text: str) -> str:
    return text


def _bracket(text: str) -> str:
    return f"[{text}]"


PLAIN_THEME = EditorTheme(
    prompt=_plain, highlight=_plain, focused=_plain, pointer=_plain, dim=_plain
)


def _make_editor(
    *,
    text: str = "",
    prompt: str = "",
    choices=(LODASH, AXIOS),
    footer=None,
    theme: EditorTheme | None = None,
    **options,
) -> PromptEditor:
    options.setdefault("scroll", False)
    return PromptEditor(
        choices=choices,
        options=EditorOptions(**options),
        theme=theme or PLAIN_THEME,
        footer=footer,
        prompt=prompt,
        text=text,
    )


def _type(editor: PromptEditor, text: str) -> None:
    for ch in text:
        editor.handle_input(ch)


class TestTyping:
    def test_printable_input_is_inserted(self) -> None:
        editor = _make_editor()
        _type(editor, "hi there")
        assert editor.get_text() == "hi there"
        assert editor.status == "editing"

    def test_multi_character_chunk_is_inserted(self) -> None:
        editor = _make_editor()
        editor.handle_input("日本")
        assert editor.get_text() == "日本"

    def test_backspace(self) -> None:
        editor = _make_editor(text="abc")
        editor.handle_input(KEY_BACKSPACE)
        assert editor.get_text() == "ab"

    def test_new_line_key(self) -> None:
        editor = _make_editor(text="a")
        editor.handle_input(KEY_ALT_ENTER)
        editor.handle_input("\n")
        assert editor.get_text() == "a\n\n"

    def test_new_line_ignored_in_single_line_mode(self) -> None:
        editor = _make_editor(text="a", multiline=False)
        editor.handle_input(KEY_ALT_ENTER)
        editor.handle_input(KEY_DOWN)
        assert editor.get_text() == "a"

    def test_unbound_control_input_is_ignored(self) -> None:
        editor = _make_editor(text="a")
        editor.handle_input("\x1b[24~")
        editor.handle_input("\x07")
        assert editor.get_text() == "a"

    def test_on_change(self) -> None:
        editor = _make_editor()
        changes: list[str] = []
        editor.on_change = changes.append
        _type(editor, "ab")
        editor.handle_input(KEY_LEFT)
        editor.handle_input(KEY_BACKSPACE)
        assert changes == ["a", "ab", "b"]


class TestPaste:
    def test_paste_normalises_line_endings(self) -> None:
        editor = _make_editor()
        editor.handle_input(f"{BRACKETED_PASTE_START}a\r\nb\rc{BRACKETED_PASTE_END}")
        assert editor.get_text() == "a\nb\nc"

    def test_paste_in_single_line_mode_uses_spaces(self) -> None:
        editor = _make_editor(multiline=False)
        editor.handle_paste("a\nb")
        assert editor.get_text() == "a b"

    def test_input_after_paste_is_dispatched(self) -> None:
        editor = _make_editor()
        editor.handle_input(f"{BRACKETED_PASTE_START}ab{BRACKETED_PASTE_END}c")
        assert editor.get_text() == "abc"

    def test_paste_expands_tabs_and_drops_control_characters(self) -> None:
        editor = _make_editor()
        editor.handle_paste("\t\t\tx\x1b[2Jy\x07")
        assert editor.get_text() == " " * 12 + "x[2Jy"
        frame = editor.render(10, 5)
        assert frame.lines == [" " * 10, "  x[2Jy"]
        assert (frame.cursor_row, frame.cursor_col) == (1, 7)

    def test_paste_of_only_control_characters_is_ignored(self) -> None:
        editor = _make_editor(text="a")
        changes: list[str] = []
        editor.on_change = changes.append
        editor.handle_paste("\x1b\x07")
        assert editor.get_text() == "a"
        assert changes == []


class TestNavigationKeys:
    def test_up_moves_between_lines(self) -> None:
        editor = _make_editor(text="hello\nworld")
        editor.handle_input(KEY_UP)
        assert editor.buffer.cursor == 5

    def test_down_at_end_adds_line(self) -> None:
        editor = _make_editor(text="abc")
        editor.handle_input(KEY_DOWN)
        assert editor.get_text() == "abc\n"

    def test_line_start_key(self) -> None:
        editor = _make_editor(text="ab\ncd")
        editor.handle_input(KEY_CTRL_A)
        assert editor.buffer.cursor == 3

    def test_vertical_moves_use_rendered_width(self) -> None:
        editor = _make_editor(text="abcdefgh")
        editor.render(5, 10)
        editor.handle_input(KEY_UP)
        assert editor.buffer.cursor == 3


class TestSuggestions:
    def test_lodash_scenario(self) -> None:
        submitted: list[str] = []
        editor = _make_editor()
        editor.on_submit = submitted.append

        editor.handle_input(KEY_TAB)
        assert editor.status == "suggesting"
        _type(editor, "lo")
        assert editor.suggestions.filtered == (LODASH,)

        editor.handle_input(KEY_ENTER)
        assert editor.get_text() == "lodash"
        assert editor.status == "editing"
        assert submitted == []

        editor.handle_input(KEY_ENTER)
        assert editor.status == "submitted"
        assert submitted == ["lodash"]

    def test_up_down_move_focus_while_suggesting(self) -> None:
        editor = _make_editor(text="x\n")
        editor.handle_input(KEY_TAB)
        editor.handle_input(KEY_DOWN)
        assert editor.suggestions.focused == AXIOS
        editor.handle_input(KEY_UP)
        assert editor.suggestions.focused == LODASH
        # Cursor and text untouched
        assert editor.get_text() == "x\n"
        assert editor.buffer.cursor == 2

    def test_submit_without_match_finishes(self) -> None:
        editor = _make_editor()
        editor.handle_input(KEY_TAB)
        _type(editor, "zz")
        editor.handle_input(KEY_ENTER)
        assert editor.status == "submitted"
        assert editor.get_text() == "zz"

    def test_toggle_without_choices_is_noop(self) -> None:
        editor = _make_editor(choices=())
        editor.handle_input(KEY_TAB)
        assert editor.status == "editing"
        assert editor.get_text() == ""

    def test_moving_before_anchor_closes_overlay(self) -> None:
        editor = _make_editor(text="run ")
        editor.handle_input(KEY_TAB)
        editor.handle_input(KEY_LEFT)
        assert editor.status == "editing"

    def test_line_start_closes_overlay(self) -> None:
        editor = _make_editor(text="run ")
        editor.handle_input(KEY_TAB)
        _type(editor, "ax")
        editor.handle_input(KEY_CTRL_A)
        assert editor.status == "editing"
        editor.handle_input(KEY_ENTER)
        assert editor.status == "submitted"
        assert editor.get_text() == "run ax"

    def test_set_choices_refilters(self) -> None:
        editor = _make_editor()
        editor.handle_input(KEY_TAB)
        _type(editor, "re")
        assert editor.suggestions.filtered == ()
        react = Choice(id="3", label="react")
        editor.set_choices((LODASH, react))
        assert editor.suggestions.filtered == (react,)


class TestCancel:
    def test_ctrl_c_cancels(self) -> None:
        cancelled: list[bool] = []
        editor = _make_editor(text="draft")
        editor.on_cancel = lambda: cancelled.append(True)
        editor.handle_input(KEY_CTRL_C)
        assert editor.status == "cancelled"
        assert editor.done
        assert cancelled == [True]
        assert "\x03" not in editor.get_text()

    def test_cancel_while_suggesting(self) -> None:
        editor = _make_editor()
        editor.handle_input(KEY_TAB)
        editor.handle_input(KEY_CTRL_C)
        assert editor.status == "cancelled"
        assert not editor.suggestions.active

    def test_input_after_finish_is_ignored(self) -> None:
        editor = _make_editor(text="a")
        editor.handle_input(KEY_ENTER)
        _type(editor, "bc")
        editor.handle_input(KEY_CTRL_C)
        assert editor.get_text() == "a"
        assert editor.status == "submitted"

    def test_cancel_method(self) -> None:
        editor = _make_editor()
        editor.cancel()
        assert editor.status == "cancelled"


class TestRender:
    def test_simple_frame(self) -> None:
        editor = _make_editor(prompt="> ", text="hi")
        frame = editor.render(20, 5)
        assert frame.lines == ["> hi"]
        assert (frame.cursor_row, frame.cursor_col) == (0, 4)
        assert not frame.final

    def test_prompt_is_styled(self) -> None:
        theme = EditorTheme(
            prompt=_bracket, highlight=_plain, focused=_plain, pointer=_plain, dim=_plain
        )
        editor = _make_editor(prompt="> ", text="hi", theme=theme)
        assert editor.render(20, 5).lines == ["[> ]hi"]

    def test_cursor_column_uses_visible_width(self) -> None:
        editor = _make_editor(text="日本")
        frame = editor.render(20, 5)
        assert frame.cursor_col == 4

    def test_cursor_stays_inside_full_row(self) -> None:
        editor = _make_editor(text="abcdefgh", scroll=True)
        frame = editor.render(10, 5)
        assert frame.lines == ["abcdefgh"]
        assert (frame.cursor_row, frame.cursor_col) == (0, 7)

    def test_cursor_stays_inside_full_row_without_scrollbar(self) -> None:
        editor = _make_editor(text="abcdefghij")
        frame = editor.render(10, 5)
        assert frame.cursor_col == 9

    def test_overlay_rows_follow_input(self) -> None:
        theme = EditorTheme(
            prompt=_plain, highlight=_bracket, focused=_plain, pointer=_plain, dim=_plain
        )
        editor = _make_editor(theme=theme)
        editor.handle_input(KEY_TAB)
        _type(editor, "lo")
        frame = editor.render(40, 10)
        assert frame.lines == ["lo", "❯ [lo]dash"]
        assert (frame.cursor_row, frame.cursor_col) == (0, 2)

    def test_overlay_marks_focused_row(self) -> None:
        editor = _make_editor()
        editor.handle_input(KEY_TAB)
        editor.handle_input(KEY_DOWN)
        assert editor.render(40, 10).lines == ["", "  lodash", "❯ axios"]

    def test_overlay_is_limited(self) -> None:
        choices = tuple(Choice(str(i), f"item{i}") for i in range(8))
        editor = _make_editor(choices=choices, suggestion_limit=3)
        editor.handle_input(KEY_TAB)
        lines = editor.render(40, 20).lines
        assert lines == ["", "❯ item0", "  item1", "  item2"]

    def test_scrollbar_and_viewport(self) -> None:
        editor = _make_editor(text="a\nb\nc\nd\ne", scroll=True)
        frame = editor.render(10, 3)
        pad = " " * 7
        assert frame.lines[0] == f"c{pad} {SCROLL_UP_GLYPH}"
        assert frame.lines[1] == f"d{pad} {SCROLL_THUMB}"
        assert frame.lines[2] == f"e{pad} {SCROLL_THUMB}"
        assert (frame.cursor_row, frame.cursor_col) == (2, 1)
        assert editor.viewport is not None
        assert editor.viewport.top_line == 2

    def test_no_scrollbar_when_content_fits(self) -> None:
        editor = _make_editor(text="a\nb", scroll=True)
        assert editor.render(10, 5).lines == ["a", "b"]

    def test_scroll_reserves_gutter_for_wrapping(self) -> None:
        editor = _make_editor(text="abcdefghij", scroll=True)
        assert editor.render(10, 5).lines == ["abcdefgh", "ij"]

    def test_render_is_idempotent(self) -> None:
        editor = _make_editor(text="line\n" * 12, scroll=True, footer="hint")
        first = editor.render(20, 6)
        second = editor.render(20, 6)
        assert first == second

    def test_cursor_row_stays_visible_while_moving_up(self) -> None:
        letters = "abcdefghij"
        editor = _make_editor(text="\n".join(letters), scroll=True)
        for row in range(8, -1, -1):
            editor.handle_input(KEY_UP)
            frame = editor.render(10, 4)
            assert 0 <= frame.cursor_row < 4
            assert frame.lines[frame.cursor_row].startswith(letters[row])


class TestFooter:
    def test_footer_reserves_overlay_space(self) -> None:
        editor = _make_editor(text="x", footer="hint")
        lines = editor.render(20, 10).lines
        # input, spacer, five reserved overlay rows, footer
        assert lines == ["x", "", "", "", "", "", "", "hint"]

    def test_footer_while_suggesting(self) -> None:
        editor = _make_editor(footer="hint")
        editor.handle_input(KEY_TAB)
        lines = editor.render(20, 10).lines
        assert lines == ["", "❯ lodash", "  axios", "", "hint"]

    def test_reserved_space_is_bounded_by_height(self) -> None:
        editor = _make_editor(text="x", footer="hint")
        assert editor.render(20, 4).lines == ["x", "", "", "hint"]

    def test_footer_is_truncated(self) -> None:
        editor = _make_editor(text="x", footer="0123456789abcdef")
        assert editor.render(10, 2).lines[-1] == "0123456789"

    def test_callable_footer(self) -> None:
        editor = _make_editor(text="x", footer=lambda: "dyn", suggestion_limit=0)
        assert editor.render(20, 5).lines == ["x", "", "dyn"]

    def test_max_height_limits_region(self) -> None:
        editor = _make_editor(text="x", footer="f", max_height=3)
        assert editor.render(20, 50).lines == ["x", "", "f"]


class TestFinalFrame:
    def test_submitted_frame_shows_plain_input(self) -> None:
        editor = _make_editor(prompt="> ", text="hi", footer="hint")
        editor.handle_input(KEY_TAB)
        editor.handle_input(KEY_ENTER)
        editor.handle_input(KEY_ENTER)
        frame = editor.render(20, 10)
        assert frame.final
        assert frame.lines == ["> hilodash"]
        assert (frame.cursor_row, frame.cursor_col) == (0, 10)

    def test_cancelled_frame_is_dimmed(self) -> None:
        theme = EditorTheme(
            prompt=_plain, highlight=_plain, focused=_plain, pointer=_plain, dim=_bracket
        )
        editor = _make_editor(prompt="> ", text="hi", theme=theme)
        editor.handle_input(KEY_CTRL_C)
        assert editor.render(20, 10).lines == ["> [hi]"]

    def test_final_frame_shows_every_row(self) -> None:
        editor = _make_editor(text="a\nb\nc\nd\ne", scroll=True)
        editor.handle_input(KEY_ENTER)
        assert editor.render(10, 3).lines == ["a", "b", "c", "d", "e"]

    def test_final_cursor_stays_inside_full_row(self) -> None:
        editor = _make_editor(text="abcdefghij")
        editor.handle_input(KEY_ENTER)
        frame = editor.render(10, 3)
        assert frame.lines == ["abcdefghij"]
        assert frame.cursor_col == 9


class TestConfiguration:
    def test_negative_suggestion_limit(self) -> None:
        with pytest.raises(ConfigurationError):
            _make_editor(suggestion_limit=-1)

    def test_zero_max_height(self) -> None:
        with pytest.raises(ConfigurationError):
            _make_editor(max_height=0)

    def test_footer_dropped_when_only_one_row(self) -> None:
        editor = _make_editor(text="x", footer="hint")
        frame = editor.render(20, 1)
        assert frame.lines == ["x"]
        assert (frame.cursor_row, frame.cursor_col) == (0, 1)

    def test_scrollbar_dropped_when_too_narrow(self) -> None:
        editor = _make_editor(text="a\nb\nc", scroll=True)
        frame = editor.render(2, 2)
        assert frame.lines == ["b", "c"]

    def test_max_height_without_room_for_footer(self) -> None:
        with pytest.raises(ConfigurationError):
            _make_editor(footer="hint", max_height=1)

    def test_max_height_of_one_without_footer(self) -> None:
        editor = _make_editor(text="a\nb", max_height=1)
        assert editor.render(20, 10).lines == ["b"]

    def test_custom_keybindings(self) -> None:
        editor = PromptEditor(
            keybindings=KeyBindings({"autocomplete": "ctrl+space"}),
            choices=(LODASH,),
            theme=PLAIN_THEME,
        )
        editor.handle_input(KEY_TAB)
        assert editor.status == "editing"
        editor.handle_input("\x00")
        assert editor.status == "suggesting"

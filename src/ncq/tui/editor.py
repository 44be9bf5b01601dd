"""Multi-line prompt editor with an inline suggestion overlay.

``PromptEditor`` composes the text buffer, navigation, suggestion and
viewport pieces.  Raw key input goes through ``handle_input``; ``render``
turns the current state into a ``Frame`` for a given terminal size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

from ncq.tui.buffer import TextBuffer
from ncq.tui.errors import ConfigurationError
from ncq.tui.frame import Frame
from ncq.tui.keybindings import KeyBindings
from ncq.tui.line_mapper import WrappedLines, to_coordinate, wrap
from ncq.tui.navigation import NavigationEngine
from ncq.tui.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START
from ncq.tui.suggestions import Choice, SuggestionEngine
from ncq.tui.utils import is_printable_text, pad_to_width, truncate_to_width, visible_width
from ncq.tui.viewport import SCROLLBAR_GUTTER, Viewport, scrollbar

logger = logging.getLogger(__name__)

EditorStatus = Literal["editing", "suggesting", "submitted", "cancelled"]

POINTER = "❯ "


def _sgr(start: str, end: str) -> Callable[[str], str]:
    def style(text: str) -> str:
        return f"\x1b[{start}m{text}\x1b[{end}m"

    return style


@dataclass
class EditorTheme:
    prompt: Callable[[str], str] = _sgr("1;36", "22;39")
    highlight: Callable[[str], str] = _sgr("4", "24")
    focused: Callable[[str], str] = _sgr("36", "39")
    pointer: Callable[[str], str] = _sgr("36", "39")
    dim: Callable[[str], str] = _sgr("90", "39")


@dataclass
class EditorOptions:
    multiline: bool = True
    scroll: bool = True
    suggestion_limit: int = 5
    max_height: int | None = None


class PromptEditor:
    """Multi-line input with autocomplete overlay, scrolling and scrollbar.

    Status moves from ``editing``/``suggesting`` to one of the terminal states
    ``submitted`` or ``cancelled``; input after that is ignored.
    """

    def __init__(
        self,
        *,
        keybindings: KeyBindings | None = None,
        choices: Sequence[Choice] = (),
        options: EditorOptions | None = None,
        theme: EditorTheme | None = None,
        footer: str | Callable[[], str] | None = None,
        prompt: str = "",
        text: str = "",
    ) -> None:
        if options is None:
            options = EditorOptions()
        if options.suggestion_limit < 0:
            raise ConfigurationError(
                f"suggestion_limit must not be negative, got {options.suggestion_limit}"
            )
        if options.max_height is not None and options.max_height < 1:
            raise ConfigurationError(f"max_height must be positive, got {options.max_height}")
        if footer is not None and options.max_height is not None and options.max_height < 2:
            raise ConfigurationError(
                f"max_height must leave a row for the footer, got {options.max_height}"
            )

        self._keybindings = keybindings if keybindings is not None else KeyBindings()
        self._options = options
        self._theme = theme or EditorTheme()
        self._footer = footer
        self._prompt = prompt
        self._choices: tuple[Choice, ...] = tuple(choices)

        self._buffer = TextBuffer(text)
        self._navigation = NavigationEngine(
            self._buffer, prefix=prompt, multiline=options.multiline
        )
        self._suggestions = SuggestionEngine()
        self._viewport: Viewport | None = None
        self._finished: Literal["submitted", "cancelled"] | None = None

        # Public callbacks
        self.on_submit: Callable[[str], None] | None = None
        self.on_cancel: Callable[[], None] | None = None
        self.on_change: Callable[[str], None] | None = None

    # -- State accessors -----------------------------------------------------

    @property
    def status(self) -> EditorStatus:
        if self._finished is not None:
            return self._finished
        return "suggesting" if self._suggestions.active else "editing"

    @property
    def done(self) -> bool:
        return self._finished is not None

    @property
    def buffer(self) -> TextBuffer:
        return self._buffer

    @property
    def suggestions(self) -> SuggestionEngine:
        return self._suggestions

    @property
    def viewport(self) -> Viewport | None:
        return self._viewport

    @property
    def keybindings(self) -> KeyBindings:
        return self._keybindings

    def get_text(self) -> str:
        return self._buffer.content

    def set_text(self, text: str) -> None:
        self._buffer.set_text(text)
        self._after_edit(changed=True)

    def set_choices(self, choices: Sequence[Choice]) -> None:
        """Replace the choice snapshot used by the overlay."""
        self._choices = tuple(choices)
        self._suggestions.sync(self._buffer, self._choices)

    # -- Input handling ------------------------------------------------------

    def handle_input(self, data: str) -> None:  # noqa: C901
        if self._finished is not None or not data:
            return

        # Bracketed paste
        if data.startswith(BRACKETED_PASTE_START):
            end = data.find(BRACKETED_PASTE_END)
            if end != -1:
                self.handle_paste(data[len(BRACKETED_PASTE_START) : end])
                remaining = data[end + len(BRACKETED_PASTE_END) :]
                if remaining:
                    self.handle_input(remaining)
                return

        kb = self._keybindings
        action = kb.match(data)
        suggesting = self._suggestions.active

        if action == "cancel":
            self._finish("cancelled")
            return

        if action == "autocomplete":
            self._suggestions.toggle(self._buffer, self._choices)
            return

        if action == "cursorUp":
            if suggesting:
                self._suggestions.focus_previous()
                return
            before = self._buffer.content
            self._navigation.line_up()
            self._after_edit(changed=before != self._buffer.content)
            return

        if action == "cursorDown":
            if suggesting:
                self._suggestions.focus_next()
                return
            before = self._buffer.content
            self._navigation.line_down()
            self._after_edit(changed=before != self._buffer.content)
            return

        if action == "lineStart":
            self._navigation.line_start()
            self._after_edit()
            return

        if action == "lineEnd":
            self._navigation.line_end()
            self._after_edit()
            return

        if action == "submit":
            # Submit with a focused suggestion inserts it instead
            if self._suggestions.insert_focused(self._buffer):
                self._after_edit(changed=True)
                return
            self._finish("submitted")
            return

        if action == "newLine":
            if self._options.multiline:
                self._buffer.insert("\n")
                self._after_edit(changed=True)
            return

        if action == "cursorLeft":
            self._navigation.cursor_left()
            self._after_edit()
            return

        if action == "cursorRight":
            self._navigation.cursor_right()
            self._after_edit()
            return

        if action == "deleteCharBackward":
            before = len(self._buffer)
            self._buffer.delete_back()
            self._after_edit(changed=before != len(self._buffer))
            return

        if action == "deleteCharForward":
            before = len(self._buffer)
            self._buffer.delete_forward()
            self._after_edit(changed=before != len(self._buffer))
            return

        if action is None and is_printable_text(data):
            self._buffer.insert(data)
            self._after_edit(changed=True)

    def handle_paste(self, text: str) -> None:
        """Insert pasted text.

        Line endings are normalised to ``\\n`` and tabs expanded to four
        spaces. Other control characters are dropped.
        """
        if self._finished is not None:
            return
        text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", "    ")
        # Escape sequences and other control bytes never reach the buffer
        text = "".join(ch for ch in text if ch == "\n" or is_printable_text(ch))
        if not self._options.multiline:
            text = text.replace("\n", " ")
        if not text:
            return
        self._buffer.insert(text)
        self._after_edit(changed=True)

    def cancel(self) -> None:
        """Abort the edit as if the cancel key had been pressed."""
        if self._finished is None:
            self._finish("cancelled")

    def _after_edit(self, changed: bool = False) -> None:
        self._suggestions.sync(self._buffer, self._choices)
        if changed and self.on_change:
            self.on_change(self._buffer.content)

    def _finish(self, status: Literal["submitted", "cancelled"]) -> None:
        self._finished = status
        self._suggestions.close()
        logger.debug("edit session %s", status)
        if status == "submitted":
            if self.on_submit:
                self.on_submit(self._buffer.content)
        elif self.on_cancel:
            self.on_cancel()

    # -- Rendering -----------------------------------------------------------

    def render(self, columns: int, rows: int) -> Frame:
        """Lay out the editor for a ``columns`` x ``rows`` region.

        Rendering twice with unchanged state produces the same frame.
        """
        if columns < 1 or rows < 1:
            raise ConfigurationError(f"terminal must be at least 1x1, got {columns}x{rows}")

        if self._finished is not None:
            return self._render_final(columns)

        height = self._options.max_height or rows
        # A terminal too small for the footer or the scrollbar loses them
        # rather than the input rows.
        footer = self._footer_text() if height > 1 else None
        if footer is not None:
            height -= 1
        scroll = self._options.scroll and columns > SCROLLBAR_GUTTER
        width = columns - SCROLLBAR_GUTTER if scroll else columns

        if self._viewport is None:
            self._viewport = Viewport(height, width)
        else:
            self._viewport.resize(height, width)
        viewport = self._viewport

        self._navigation.width = width
        wrapped = self._navigation.layout()
        cursor = to_coordinate(wrapped, len(self._prompt) + self._buffer.cursor)

        lines = self._style_rows(wrapped, self._theme.prompt, None)
        lines += self._render_overlay(width)

        viewport.update(cursor.row, len(lines))
        shown = viewport.visible(lines)

        if scroll and len(lines) > viewport.height:
            glyphs = scrollbar(len(lines), viewport.top_line, viewport.height)
            shown = [pad_to_width(line, width) + " " + glyph for line, glyph in zip(shown, glyphs)]

        if footer is not None:
            if len(shown) < height:
                shown.append("")
                # Keep room for the overlay so the footer stays put when it opens
                if not self._suggestions.active:
                    space = min(self._options.suggestion_limit, height - len(shown))
                    shown.extend([""] * space)
            shown.append(truncate_to_width(footer, columns, ""))

        # The end of a row that fills the width has no column of its own
        col = min(visible_width(wrapped[cursor.row][: cursor.col]), width - 1)
        return Frame(
            lines=shown,
            cursor_row=cursor.row - viewport.top_line,
            cursor_col=col,
        )

    def _render_final(self, columns: int) -> Frame:
        wrapped = wrap(self._prompt + self._buffer.content, columns)
        content_style = self._theme.dim if self._finished == "cancelled" else None
        lines = self._style_rows(wrapped, self._theme.prompt, content_style)
        return Frame(
            lines=lines,
            cursor_row=len(lines) - 1,
            cursor_col=min(visible_width(wrapped[len(wrapped) - 1]), columns - 1),
            final=True,
        )

    def _render_overlay(self, width: int) -> list[str]:
        if not self._suggestions.active:
            return []
        theme = self._theme
        filtered = self._suggestions.filtered
        result: list[str] = []
        for index in self._suggestions.visible_window(self._options.suggestion_limit):
            label = self._suggestions.highlight(filtered[index].label, theme.highlight)
            if index == self._suggestions.focused_index:
                line = theme.pointer(POINTER) + theme.focused(label)
            else:
                line = "  " + label
            result.append(truncate_to_width(line, width, ""))
        return result

    def _style_rows(
        self,
        wrapped: WrappedLines,
        prompt_style: Callable[[str], str],
        content_style: Callable[[str], str] | None,
    ) -> list[str]:
        """Style the prompt portion (and optionally the content) of each row."""
        prompt_len = len(self._prompt)
        result: list[str] = []
        for row, text in enumerate(wrapped):
            split = max(0, min(prompt_len - wrapped.start_of(row), len(text)))
            head, tail = text[:split], text[split:]
            if head:
                head = prompt_style(head)
            if tail and content_style is not None:
                tail = content_style(tail)
            result.append(head + tail)
        return result

    def _footer_text(self) -> str | None:
        if self._footer is None:
            return None
        if callable(self._footer):
            return self._footer()
        return self._footer

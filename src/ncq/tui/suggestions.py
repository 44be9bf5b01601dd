"""Inline suggestion list anchored at the cursor.

The engine narrows an externally supplied, already ranked choice list by the
text typed since the overlay was opened (literal, case-insensitive substring
containment), tracks the focused entry, and replaces the typed span with the
chosen label.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from ncq.tui.buffer import TextBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Choice:
    """A catalog item offered as a suggestion.

    ``is_user_entered`` marks free-typed entries, which are never offered.
    """

    id: str
    label: str
    is_user_entered: bool = False


def filter_choices(choices: Sequence[Choice], filter_text: str) -> tuple[Choice, ...]:
    """Keep catalog choices whose label contains *filter_text*, in order."""
    needle = filter_text.casefold()
    return tuple(
        choice
        for choice in choices
        if not choice.is_user_entered and needle in choice.label.casefold()
    )


class SuggestionEngine:
    """Idle / Suggesting state machine for the autocomplete overlay."""

    def __init__(self) -> None:
        self._active = False
        self._anchor = -1
        self._filter_text = ""
        self._filtered: tuple[Choice, ...] = ()
        self._focused_index: int | None = None

    # -- State accessors -----------------------------------------------------

    @property
    def active(self) -> bool:
        return self._active

    @property
    def anchor(self) -> int:
        return self._anchor

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def filtered(self) -> tuple[Choice, ...]:
        return self._filtered

    @property
    def focused_index(self) -> int | None:
        return self._focused_index

    @property
    def focused(self) -> Choice | None:
        if self._focused_index is None:
            return None
        return self._filtered[self._focused_index]

    # -- Transitions ---------------------------------------------------------

    def toggle(self, buffer: TextBuffer, choices: Sequence[Choice]) -> None:
        """Open the overlay at the cursor, or close it if open.

        Opening is a no-op when there are no choices at all.
        """
        if self._active:
            self.close()
            return
        if not choices:
            return
        self._active = True
        self._anchor = buffer.cursor
        logger.debug("suggestions opened at offset %d", self._anchor)
        self._refilter(buffer, choices)

    def close(self) -> None:
        """Return to Idle, dropping anchor, filter and focus."""
        self._active = False
        self._anchor = -1
        self._filter_text = ""
        self._filtered = ()
        self._focused_index = None

    def sync(self, buffer: TextBuffer, choices: Sequence[Choice]) -> None:
        """Recompute the filtered list after an edit or cursor move.

        The overlay closes when the cursor has moved before the anchor or the
        anchor no longer lies inside the buffer.
        """
        if not self._active:
            return
        if buffer.cursor < self._anchor or self._anchor > len(buffer):
            logger.debug("cursor left the suggestion span, closing")
            self.close()
            return
        self._refilter(buffer, choices)

    def _refilter(self, buffer: TextBuffer, choices: Sequence[Choice]) -> None:
        text = buffer.content[self._anchor : buffer.cursor]
        previous = self.focused
        self._filter_text = text.casefold()
        self._filtered = filter_choices(choices, self._filter_text)
        if not self._filtered:
            self._focused_index = None
        elif previous is not None and previous in self._filtered:
            self._focused_index = self._filtered.index(previous)
        else:
            self._focused_index = 0

    # -- Focus ---------------------------------------------------------------

    def focus_previous(self) -> None:
        if not self._active or not self._filtered:
            return
        index = 0 if self._focused_index is None else self._focused_index
        self._focused_index = len(self._filtered) - 1 if index == 0 else index - 1

    def focus_next(self) -> None:
        if not self._active or not self._filtered:
            return
        if self._focused_index is None:
            self._focused_index = 0
            return
        index = self._focused_index
        self._focused_index = 0 if index == len(self._filtered) - 1 else index + 1

    # -- Insertion -----------------------------------------------------------

    def insert_focused(self, buffer: TextBuffer) -> bool:
        """Replace the typed span with the focused label and close.

        Returns ``False`` (and changes nothing) when not suggesting or when
        nothing is focused.
        """
        choice = self.focused
        if not self._active or choice is None:
            return False
        buffer.replace_span(self._anchor, buffer.cursor, choice.label)
        self.close()
        return True

    # -- Presentation --------------------------------------------------------

    def highlight(self, label: str, style: Callable[[str], str]) -> str:
        """Wrap the first occurrence of the filter text in *label* with *style*."""
        folded = label.casefold()
        # Folding can change length (e.g. "ß"), which breaks index mapping.
        if not self._filter_text or len(folded) != len(label):
            return label
        index = folded.find(self._filter_text)
        if index < 0:
            return label
        end = index + len(self._filter_text)
        return label[:index] + style(label[index:end]) + label[end:]

    def visible_window(self, max_visible: int) -> range:
        """Indices of the filtered entries to show, keeping focus in view."""
        total = len(self._filtered)
        if max_visible <= 0 or total == 0:
            return range(0)
        focus = self._focused_index or 0
        start = max(0, min(focus - max_visible // 2, total - max_visible))
        return range(start, min(start + max_visible, total))

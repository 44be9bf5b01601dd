"""Editor key binding table.

Bindings map an editor action to one or more chord descriptors.  The user
configuration is merged over ``DEFAULT_EDITOR_KEYBINDINGS`` and resolved once,
at construction, into a direct chord -> action table.  Ambiguous or
incomplete tables are rejected with ``KeyBindingError``.
"""

from __future__ import annotations

import logging
from typing import Literal, Mapping, Sequence, Union, get_args

from ncq.tui.errors import KeyBindingError
from ncq.tui.keys import ChordDescriptor, KeyChord, chord_from_descriptor, parse_chord

logger = logging.getLogger(__name__)

EditorAction = Literal[
    # Suggestions
    "autocomplete",
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "lineStart",
    "lineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    # Text input
    "newLine",
    "submit",
    # Interrupt
    "cancel",
]

EDITOR_ACTIONS: tuple[str, ...] = get_args(EditorAction)

REQUIRED_ACTIONS: tuple[EditorAction, ...] = (
    "autocomplete",
    "cursorUp",
    "cursorDown",
    "lineStart",
    "lineEnd",
    "submit",
    "cancel",
)

BindingValue = Union[ChordDescriptor, Sequence[ChordDescriptor], None]
EditorKeybindingsConfig = Mapping[str, BindingValue]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, ChordDescriptor | list[ChordDescriptor]] = {
    "autocomplete": "tab",
    # Cursor movement
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "lineStart": ["ctrl+left", "home", "ctrl+a"],
    "lineEnd": ["ctrl+right", "end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    # Text input
    "newLine": ["alt+enter", "shift+enter", "ctrl+j"],
    "submit": "enter",
    # Interrupt
    "cancel": "ctrl+c",
}


def _as_descriptor_list(value: BindingValue) -> list[ChordDescriptor]:
    if value is None:
        return []
    if isinstance(value, (str, Mapping)):
        return [value]
    return list(value)


class KeyBindings:
    """Resolved, validated key binding table for one editor instance."""

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_chords: dict[EditorAction, list[KeyChord]] = {}
        self._chord_to_action: dict[KeyChord, EditorAction] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        merged: dict[str, BindingValue] = dict(DEFAULT_EDITOR_KEYBINDINGS)
        for action, value in config.items():
            if action not in EDITOR_ACTIONS:
                raise KeyBindingError(f"unknown editor action: {action!r}")
            merged[action] = value

        for action, value in merged.items():
            chords: list[KeyChord] = []
            for descriptor in _as_descriptor_list(value):
                try:
                    chord = chord_from_descriptor(descriptor)
                except ValueError as exc:
                    raise KeyBindingError(
                        f"invalid key for action {action!r}: {exc}"
                    ) from exc

                owner = self._chord_to_action.get(chord)
                if owner is not None and owner != action:
                    raise KeyBindingError(
                        f"key {chord} is bound to both {owner!r} and {action!r}"
                    )
                self._chord_to_action[chord] = action  # type: ignore[assignment]
                if chord not in chords:
                    chords.append(chord)
            self._action_to_chords[action] = chords  # type: ignore[index]

        missing = [a for a in REQUIRED_ACTIONS if not self._action_to_chords.get(a)]
        if missing:
            raise KeyBindingError(f"no key bound for required action(s): {', '.join(missing)}")

        logger.debug("resolved %d key bindings", len(self._chord_to_action))

    def action_for(self, chord: KeyChord | None) -> EditorAction | None:
        """Return the action bound to *chord*, if any."""
        if chord is None:
            return None
        return self._chord_to_action.get(chord)

    def match(self, data: str) -> EditorAction | None:
        """Parse raw input and return the bound action, if any."""
        return self.action_for(parse_chord(data))

    def get_keys(self, action: EditorAction) -> list[str]:
        """Get key ids bound to an action."""
        return [chord.key_id for chord in self._action_to_chords.get(action, [])]

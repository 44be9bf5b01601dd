"""Key hint line shown under the prompt."""

from __future__ import annotations

from ncq.tui.keybindings import EditorAction, KeyBindings

_HINTS: tuple[tuple[EditorAction, str], ...] = (
    ("submit", "run"),
    ("newLine", "new line"),
    ("autocomplete", "suggest"),
    ("cancel", "exit"),
)


def build_footer(keybindings: KeyBindings) -> str:
    """Return e.g. ``"enter run · alt+enter new line · tab suggest · ctrl+c exit"``.

    Only the first key of each action is shown; unbound actions are skipped.
    """
    parts: list[str] = []
    for action, label in _HINTS:
        keys = keybindings.get_keys(action)
        if keys:
            parts.append(f"{keys[0]} {label}")
    return " · ".join(parts)

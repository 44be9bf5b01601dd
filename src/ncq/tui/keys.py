"""Keyboard input parsing into typed key chords.

Raw terminal input (legacy xterm / VT escape sequences, control bytes,
ESC-prefixed alt combinations and printable characters) is turned into a
``KeyChord``: a tagged record of the input kind, the key name and the
modifier flags.  Key bindings are expressed in the same form, so matching a
key press against a binding is a plain equality check.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Mapping, Union

ChordKind = Literal["printable", "control", "arrow", "special", "function"]

# A chord descriptor as it appears in configuration: a key id such as
# ``"ctrl+left"`` or a mapping such as ``{"name": "left", "ctrl": true}`` or
# ``{"sequence": "\u0003"}``.
ChordDescriptor = Union[str, Mapping[str, object]]

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ARROW_KEYS = frozenset({"up", "down", "left", "right"})
SPECIAL_KEYS = frozenset(
    {
        "enter",
        "tab",
        "escape",
        "space",
        "backspace",
        "delete",
        "insert",
        "home",
        "end",
        "pageUp",
        "pageDown",
    }
)
FUNCTION_KEYS = frozenset(f"f{i}" for i in range(1, 13))

_NAME_ALIASES: dict[str, str] = {
    "esc": "escape",
    "return": "enter",
    "pageup": "pageUp",
    "pagedown": "pageDown",
    "del": "delete",
    "ins": "insert",
}

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[15~": "f5",
    "\x1b[17~": "f6",
    "\x1b[18~": "f7",
    "\x1b[19~": "f8",
    "\x1b[20~": "f9",
    "\x1b[21~": "f10",
    "\x1b[23~": "f11",
    "\x1b[24~": "f12",
}

# rxvt-style modified arrows: ESC [ a (shift) and ESC O a (ctrl)
LEGACY_RXVT_SEQUENCES: dict[str, tuple[str, int]] = {
    "\x1b[a": ("up", MODIFIERS["shift"]),
    "\x1b[b": ("down", MODIFIERS["shift"]),
    "\x1b[c": ("right", MODIFIERS["shift"]),
    "\x1b[d": ("left", MODIFIERS["shift"]),
    "\x1bOa": ("up", MODIFIERS["ctrl"]),
    "\x1bOb": ("down", MODIFIERS["ctrl"]),
    "\x1bOc": ("right", MODIFIERS["ctrl"]),
    "\x1bOd": ("left", MODIFIERS["ctrl"]),
}

# CSI 1;<mod><final> finals
_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# CSI <code>;<mod>~ codes
_CSI_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

_CSI_MODIFIED_LETTER_RE = re.compile(r"^\x1b\[1;(\d+)([ABCDHFPQRS])$")
_CSI_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")

_CTRL_SYMBOLS: dict[str, str] = {
    "\x1c": "\\",
    "\x1d": "]",
    "\x1e": "^",
    "\x1f": "_",
}


# ---------------------------------------------------------------------------
# KeyChord
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyChord:
    """A single key press: input kind, key name and modifier flags."""

    kind: ChordKind
    name: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @property
    def key_id(self) -> str:
        """The chord in ``ctrl+shift+alt+name`` form."""
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.shift:
            prefix += "shift+"
        if self.alt:
            prefix += "alt+"
        return prefix + self.name

    def __str__(self) -> str:
        return self.key_id


def make_chord(
    name: str,
    *,
    ctrl: bool = False,
    alt: bool = False,
    shift: bool = False,
) -> KeyChord:
    """Build a normalized chord, deriving its kind from the key name.

    Raises ``ValueError`` for names that are neither a known key nor a single
    character.
    """
    if not name:
        raise ValueError("empty key name")

    lowered = name.lower()
    canonical = _NAME_ALIASES.get(lowered, lowered)
    if canonical in ARROW_KEYS or canonical in SPECIAL_KEYS:
        kind: ChordKind = "arrow" if canonical in ARROW_KEYS else "special"
        return KeyChord(kind, canonical, ctrl=ctrl, alt=alt, shift=shift)
    if canonical in FUNCTION_KEYS:
        return KeyChord("function", canonical, ctrl=ctrl, alt=alt, shift=shift)

    if len(name) != 1:
        raise ValueError(f"unknown key name: {name!r}")

    if ctrl or alt:
        # Shifted letters collapse onto the lowercase key plus the flag.
        if name.isupper():
            shift = True
        return KeyChord("control", name.lower(), ctrl=ctrl, alt=alt, shift=shift)
    # Printable characters carry shift in the character itself.
    if shift and name.isalpha():
        name = name.upper()
    return KeyChord("printable", name)


def _chord_from_modifier_param(name: str, param: int) -> KeyChord:
    mod = max(0, param - 1)
    return make_chord(
        name,
        ctrl=bool(mod & MODIFIERS["ctrl"]),
        alt=bool(mod & MODIFIERS["alt"]),
        shift=bool(mod & MODIFIERS["shift"]),
    )


# ---------------------------------------------------------------------------
# parse_chord -- determine what key was pressed from raw input
# ---------------------------------------------------------------------------


def parse_chord(data: str) -> KeyChord | None:  # noqa: C901
    """Parse raw terminal input and return the chord, or ``None``.

    ``None`` is returned for input that is not a single key press, such as
    multi-character text typed through an input method or an unknown escape
    sequence.
    """
    if not data:
        return None

    # --- modifyOtherKeys format: CSI 27;modifier;keycode ~ ---
    mok = _MODIFY_OTHER_KEYS_RE.match(data)
    if mok:
        keycode = int(mok.group(2))
        name = {13: "enter", 9: "tab", 27: "escape", 127: "backspace", 32: "space"}.get(keycode)
        if name is None:
            if keycode <= 32:
                return None
            name = chr(keycode)
        try:
            return _chord_from_modifier_param(name, int(mok.group(1)))
        except ValueError:
            return None

    # --- Modified legacy sequences ---
    m = _CSI_MODIFIED_LETTER_RE.match(data)
    if m:
        return _chord_from_modifier_param(_CSI_LETTER_KEYS[m.group(2)], int(m.group(1)))

    m = _CSI_MODIFIED_TILDE_RE.match(data)
    if m:
        name = _CSI_TILDE_KEYS.get(int(m.group(1)))
        if name is None:
            return None
        return _chord_from_modifier_param(name, int(m.group(2)))

    if data in LEGACY_RXVT_SEQUENCES:
        name, mod = LEGACY_RXVT_SEQUENCES[data]
        return _chord_from_modifier_param(name, mod + 1)

    if data in LEGACY_KEY_SEQUENCES:
        return make_chord(LEGACY_KEY_SEQUENCES[data])

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return make_chord("escape")
    if data == "\x1b[Z":
        return make_chord("tab", shift=True)
    if data == "\r":
        return make_chord("enter")
    if data == "\t":
        return make_chord("tab")
    if data == " ":
        return make_chord("space")
    if data in ("\x7f", "\x08"):
        return make_chord("backspace")
    if data == "\x00":
        return make_chord("space", ctrl=True)

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return make_chord(chr(ord(data) + ord("a") - 1), ctrl=True)
    if len(data) == 1 and data in _CTRL_SYMBOLS:
        return make_chord(_CTRL_SYMBOLS[data], ctrl=True)

    # --- Alt + key (ESC prefix) ---
    if len(data) >= 2 and data[0] == "\x1b":
        rest = data[1:]
        if rest.startswith("\x1b"):
            # ESC ESC [ A style alt+arrow
            inner = parse_chord(rest)
            if inner is None or inner.alt:
                return None
            return KeyChord(inner.kind, inner.name, ctrl=inner.ctrl, alt=True, shift=inner.shift)
        if len(rest) == 1:
            if rest == "\r":
                return make_chord("enter", alt=True)
            if rest == "\t":
                return make_chord("tab", alt=True)
            if rest == " ":
                return make_chord("space", alt=True)
            if rest in ("\x7f", "\x08"):
                return make_chord("backspace", alt=True)
            if 1 <= ord(rest) <= 26:
                return make_chord(chr(ord(rest) + ord("a") - 1), ctrl=True, alt=True)
            if rest.isprintable():
                return make_chord(rest, alt=True)
        return None

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return make_chord(data)

    return None


# ---------------------------------------------------------------------------
# Chord descriptors (configuration)
# ---------------------------------------------------------------------------


def chord_from_id(key_id: str) -> KeyChord:
    """Parse a key identifier like ``"ctrl+shift+left"`` into a chord.

    Raises ``ValueError`` if the identifier has no key or an unknown key.
    """
    if not key_id:
        raise ValueError("empty key id")

    if key_id == "+":
        return make_chord("+")

    parts = key_id.split("+")
    if key_id.endswith("++"):
        # "ctrl++" binds the plus key itself
        parts = parts[:-2] + ["+"]

    flags = {"ctrl": False, "alt": False, "shift": False}
    key_parts: list[str] = []
    last = len(parts) - 1
    for i, part in enumerate(parts):
        lower = part.lower()
        if lower in ("meta", "option"):
            lower = "alt"
        if lower in flags and i < last:
            flags[lower] = True
        else:
            key_parts.append(part)

    if len(key_parts) != 1 or not key_parts[0]:
        raise ValueError(f"invalid key id: {key_id!r}")

    return make_chord(key_parts[0], **flags)


def chord_from_descriptor(descriptor: ChordDescriptor) -> KeyChord:
    """Resolve a configuration descriptor into a chord.

    Accepts a key id string, a mapping with a raw ``sequence`` or a mapping
    with ``name`` plus optional ``ctrl``/``alt``/``meta``/``shift`` flags.
    """
    if isinstance(descriptor, str):
        return chord_from_id(descriptor)

    if not isinstance(descriptor, Mapping):
        raise ValueError(f"invalid key descriptor: {descriptor!r}")

    sequence = descriptor.get("sequence")
    if sequence is not None:
        if not isinstance(sequence, str):
            raise ValueError(f"invalid key sequence: {sequence!r}")
        chord = parse_chord(sequence)
        if chord is None:
            raise ValueError(f"unrecognized key sequence: {sequence!r}")
        return chord

    name = descriptor.get("name")
    if not isinstance(name, str):
        raise ValueError(f"key descriptor has no name: {descriptor!r}")
    return make_chord(
        name,
        ctrl=bool(descriptor.get("ctrl", False)),
        alt=bool(descriptor.get("alt", False) or descriptor.get("meta", False)),
        shift=bool(descriptor.get("shift", False)),
    )

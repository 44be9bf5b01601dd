"""Terminal text utilities: ANSI handling and visible width measurement.

Escape sequences never count toward width, grapheme clusters are measured
as a unit, and wide (East Asian, emoji) clusters take two columns.
"""

from __future__ import annotations

import functools
import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# SGR/cursor CSI sequences, plus OSC and APC strings ended by BEL or ST.
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJ]|\x1b[\]_][^\x07\x1b]*(?:\x07|\x1b\\)")

TAB_SPACES = "   "

_VS16 = 0xFE0F
_ZWJ = 0x200D


def _is_control(cp: int) -> bool:
    return cp < 0x20 or 0x7F <= cp <= 0x9F


def _is_emoji_marker(cp: int) -> bool:
    # Variation selector 16, ZWJ, skin tone modifiers, regional indicators
    return (
        cp in (_VS16, _ZWJ)
        or 0x1F3FB <= cp <= 0x1F3FF
        or 0x1F1E6 <= cp <= 0x1F1FF
    )


# ---------------------------------------------------------------------------
# Width
# ---------------------------------------------------------------------------


def grapheme_width(cluster: str) -> int:
    """Return the number of terminal columns taken by one grapheme cluster."""
    if not cluster:
        return 0

    lead = ord(cluster[0])
    if len(cluster) == 1:
        return 0 if _is_control(lead) else max(_wcwidth.wcwidth(cluster), 0)

    if lead >= 0x1F000 or 0x2600 <= lead <= 0x27BF:
        return 2
    if any(_is_emoji_marker(ord(ch)) for ch in cluster):
        return 2
    category = unicodedata.category(cluster[0])
    if category == "Cf" or category.startswith("M"):
        return 0
    return max(_wcwidth.wcwidth(cluster[0]), 0)


@functools.lru_cache(maxsize=512)
def _cluster_width(plain: str) -> int:
    return sum(grapheme_width(g) for g in grapheme.graphemes(plain))


def visible_width(text: str) -> int:
    """Columns *text* occupies once escape codes are removed.

    Tabs count as three columns.
    """
    plain = strip_ansi(text).replace("\t", TAB_SPACES)
    if plain.isascii() and plain.isprintable():
        return len(plain)
    return _cluster_width(plain)


# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from *text*."""
    return _ANSI_RE.sub("", text)


def split_ansi(text: str) -> list[tuple[str, bool]]:
    """Split *text* into ``(token, is_escape)`` pairs.

    Visible text is split into grapheme clusters; escape sequences are kept
    whole so that they can be copied without being measured.
    """
    tokens: list[tuple[str, bool]] = []
    last = 0
    for match in _ANSI_RE.finditer(text):
        tokens.extend((g, False) for g in grapheme.graphemes(text[last : match.start()]))
        tokens.append((match.group(), True))
        last = match.end()
    tokens.extend((g, False) for g in grapheme.graphemes(text[last:]))
    return tokens


# ---------------------------------------------------------------------------
# Fitting text to a width
# ---------------------------------------------------------------------------


def _take_columns(text: str, max_cols: int) -> str:
    """Longest prefix of *text* within *max_cols* columns, escapes included."""
    kept: list[str] = []
    used = 0
    for token, is_escape in split_ansi(text):
        if not is_escape:
            used += grapheme_width(token)
            if used > max_cols:
                break
        kept.append(token)
    return "".join(kept)


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces to *width* visible columns (never cuts)."""
    return text + " " * max(0, width - visible_width(text))


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Cut *text* to *max_width* columns, ending with *ellipsis* when cut.

    The ellipsis counts toward the width.  With *pad* the result is filled
    with spaces to exactly *max_width* columns.
    """
    if max_width <= 0:
        return ""

    if visible_width(text) <= max_width:
        result = text
    elif visible_width(ellipsis) >= max_width:
        result = _take_columns(ellipsis, max_width)
    else:
        result = _take_columns(text, max_width - visible_width(ellipsis)) + ellipsis

    return pad_to_width(result, max_width) if pad else result


def is_printable_text(data: str) -> bool:
    """Return ``True`` if *data* is non-empty and has no control characters."""
    return bool(data) and not any(_is_control(ord(ch)) for ch in data)

"""Split raw stdin chunks into complete key sequences and paste blocks.

A single ``read`` can return several key presses at once (fast typing, a
paste on a terminal without bracketed paste) or only part of an escape
sequence.  ``StdinBuffer`` re-frames the stream so that every emitted string
is exactly one key press, and bracketed pastes are emitted as one block.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceStatus = Literal["complete", "incomplete", "not-escape"]


def sequence_status(data: str) -> SequenceStatus:
    """Classify *data* as a complete escape sequence, a prefix of one, or text."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    introducer = data[1]

    # CSI: ESC [ params final (final byte in 0x40..0x7E)
    if introducer == "[":
        if len(data) < 3:
            return "incomplete"
        if data.startswith("\x1b[M"):
            # X10 mouse report carries three raw bytes
            return "complete" if len(data) >= 6 else "incomplete"
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"

    # OSC: terminated by BEL or ST
    if introducer == "]":
        return "complete" if data.endswith("\x07") or data.endswith(f"{ESC}\\") else "incomplete"

    # DCS / APC: terminated by ST
    if introducer in "P_":
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"

    # SS3: ESC O <char>
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"

    # ESC ESC ... is an alt-prefixed sequence
    if introducer == ESC:
        return sequence_status(data[1:])

    # Meta key: ESC followed by a single character
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is a trailing
    partial escape sequence that needs more input.
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            status = sequence_status(buffer[pos:end])
            if status == "complete":
                break
            if end >= len(buffer):
                return sequences, buffer[pos:]
            end += 1

        sequences.append(buffer[pos:end])
        pos = end

    return sequences, ""


class StdinBuffer:
    """Buffers stdin input and emits complete sequences.

    A lone ESC (or any partial sequence) is held for *timeout* seconds and
    then flushed as-is, so the escape key still works on its own.
    """

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer: str = ""
        self._timeout = timeout
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._paste_buffer: str | None = None

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        """Set callback for complete sequences."""
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        """Set callback for paste content."""
        self._on_paste = callback

    def process(self, data: str) -> None:
        """Feed input data into the buffer."""
        self._cancel_timeout()

        if self._paste_buffer is not None:
            self._paste_buffer += data
            self._finish_paste()
            return

        self._buffer += data

        start = self._buffer.find(BRACKETED_PASTE_START)
        if start != -1:
            before = self._buffer[:start]
            self._paste_buffer = self._buffer[start + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            sequences, _ = split_sequences(before)
            self._emit(sequences)
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        self._emit(sequences)

        if self._buffer:
            try:
                loop = asyncio.get_running_loop()
                self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)
            except RuntimeError:
                # No event loop - flush immediately
                self._emit(self.flush())

    def _finish_paste(self) -> None:
        assert self._paste_buffer is not None
        end = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        content = self._paste_buffer[:end]
        remaining = self._paste_buffer[end + len(BRACKETED_PASTE_END) :]
        self._paste_buffer = None
        if self._on_paste:
            self._on_paste(content)
        if remaining:
            self.process(remaining)

    def _emit(self, sequences: list[str]) -> None:
        if self._on_data is None:
            return
        for sequence in sequences:
            self._on_data(sequence)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        self._emit(self.flush())

    def flush(self) -> list[str]:
        """Return and clear any buffered partial sequence."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        self._cancel_timeout()
        self._buffer = ""
        self._paste_buffer = None

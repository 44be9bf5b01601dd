"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol, a concrete ``ProcessTerminal`` that manages
raw mode, bracketed paste and resize detection, and ``acquire_terminal``,
which scopes terminal ownership so the original mode is restored on every
exit path.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Iterator, Protocol

from ncq.tui.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START, StdinBuffer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_SHOW_CURSOR = "\x1b[?25h"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin and stdout.

    ``start`` puts stdin into raw mode, enables bracketed paste, watches for
    SIGWINCH and registers a stdin reader, all on the running asyncio loop.
    Each of those steps registers its own undo; ``stop`` runs them in
    reverse order, and a failure half way through ``start`` unwinds the
    steps already taken.
    """

    def __init__(self) -> None:
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None
        self._stdin_buffer: StdinBuffer | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._teardown: contextlib.ExitStack | None = None

    # -- size ---------------------------------------------------------------

    @staticmethod
    def _size() -> os.terminal_size:
        try:
            return os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return os.terminal_size((80, 24))

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        if self._teardown is not None:
            raise RuntimeError("terminal is already started")
        self._on_input = on_input
        self._on_resize = on_resize

        loop = asyncio.get_running_loop()
        fd = sys.stdin.fileno()

        with contextlib.ExitStack() as stack:
            saved_mode = termios.tcgetattr(fd)
            stack.callback(termios.tcsetattr, fd, termios.TCSADRAIN, saved_mode)
            tty.setraw(fd)

            self._control(_BRACKETED_PASTE_ENABLE)
            stack.callback(self._control, _BRACKETED_PASTE_DISABLE + _SHOW_CURSOR)

            loop.add_signal_handler(signal.SIGWINCH, self._handle_resize)
            stack.callback(loop.remove_signal_handler, signal.SIGWINCH)

            self._stdin_buffer = self._make_stdin_buffer()
            stack.callback(self._drop_stdin_buffer)

            loop.add_reader(fd, self._on_stdin_readable)
            stack.callback(self._remove_reader, loop, fd)

            self._teardown = stack.pop_all()

        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Restore the terminal to the state ``start`` found it in."""
        teardown, self._teardown = self._teardown, None
        if teardown is not None:
            teardown.close()
            logger.debug("terminal restored")
        self._on_input = None
        self._on_resize = None

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout.  ``OSError`` propagates to the caller."""
        sys.stdout.write(data)
        sys.stdout.flush()

    # -- input --------------------------------------------------------------

    def _make_stdin_buffer(self) -> StdinBuffer:
        buffer = StdinBuffer(timeout=0.01)
        buffer.on_data(self._dispatch)
        # Pastes reach the editor still wrapped in their markers
        buffer.on_paste(
            lambda text: self._dispatch(BRACKETED_PASTE_START + text + BRACKETED_PASTE_END)
        )
        return buffer

    def _drop_stdin_buffer(self) -> None:
        if self._stdin_buffer is not None:
            self._stdin_buffer.clear()
            self._stdin_buffer = None
        self._decoder.reset()

    def _dispatch(self, data: str) -> None:
        if self._on_input is not None:
            self._on_input(data)

    def _on_stdin_readable(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError as exc:
            logger.debug("stdin read failed: %s", exc)
            return
        # A multi-byte character may be split across reads
        data = self._decoder.decode(raw)
        if data and self._stdin_buffer is not None:
            self._stdin_buffer.process(data)

    @staticmethod
    def _remove_reader(loop: asyncio.AbstractEventLoop, fd: int) -> None:
        try:
            loop.remove_reader(fd)
        except (RuntimeError, ValueError) as exc:
            logger.debug("could not remove stdin reader: %s", exc)

    def _handle_resize(self) -> None:
        if self._on_resize is not None:
            self._on_resize()

    # -- mode switches ------------------------------------------------------

    def _control(self, data: str) -> None:
        """Write a mode switch sequence, ignoring a closed stdout."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as exc:
            logger.debug("terminal control write failed: %s", exc)


# ---------------------------------------------------------------------------
# Scoped acquisition
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def acquire_terminal(
    terminal: Terminal,
    on_input: Callable[[str], None],
    on_resize: Callable[[], None],
) -> Iterator[Terminal]:
    """Own *terminal* for the duration of the ``with`` block.

    The terminal is stopped, and its original mode restored, however the
    block exits, including task cancellation.
    """
    terminal.start(on_input, on_resize)
    try:
        yield terminal
    finally:
        terminal.stop()

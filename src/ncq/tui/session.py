"""Run one prompt editor against a terminal until it is submitted or cancelled."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from ncq.tui.editor import PromptEditor
from ncq.tui.errors import RenderError
from ncq.tui.frame import FrameWriter
from ncq.tui.terminal import ProcessTerminal, Terminal, acquire_terminal

logger = logging.getLogger(__name__)


async def run_prompt(
    editor: PromptEditor,
    terminal: Terminal | None = None,
    *,
    on_render_error: Callable[[RenderError], None] | None = None,
) -> str | None:
    """Edit until submit or cancel, returning the text or ``None``.

    Each key sequence is dispatched and the resulting frame written before
    the next one is handled.  A failed frame write is logged and passed to
    *on_render_error*; the session keeps going and the next frame repaints
    the whole region.  The terminal is released on every exit path, after a
    final frame has been drawn.
    """
    if terminal is None:
        terminal = ProcessTerminal()

    loop = asyncio.get_running_loop()
    result: asyncio.Future[str | None] = loop.create_future()
    writer = FrameWriter(terminal)

    def paint() -> None:
        frame = editor.render(terminal.columns, terminal.rows)
        try:
            if frame.final:
                writer.finish(frame)
            else:
                writer.write(frame)
        except RenderError as exc:
            logger.warning("render failed: %s", exc)
            if on_render_error is not None:
                on_render_error(exc)

    def settle() -> None:
        if editor.done and not result.done():
            result.set_result(editor.get_text() if editor.status == "submitted" else None)

    def on_input(data: str) -> None:
        if result.done():
            return
        try:
            editor.handle_input(data)
            paint()
        except Exception as exc:
            # Callbacks run on the event loop; hand the error to the awaiting task
            logger.exception("error while handling input")
            result.set_exception(exc)
            return
        settle()

    def on_resize() -> None:
        if result.done():
            return
        try:
            paint()
        except Exception as exc:
            logger.exception("error while redrawing after resize")
            result.set_exception(exc)

    with acquire_terminal(terminal, on_input, on_resize):
        paint()
        try:
            return await result
        except asyncio.CancelledError:
            if not editor.done:
                editor.cancel()
                paint()
            raise

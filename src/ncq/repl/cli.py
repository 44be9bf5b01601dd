"""CLI entry point for ncq. Uses Click for argument parsing."""

from __future__ import annotations

import asyncio
import logging
import os
import sys

import click

from ncq.repl.footer import build_footer
from ncq.repl.settings import SettingsManager
from ncq.repl.tasks import TaskIndex
from ncq.tui.editor import EditorOptions, PromptEditor
from ncq.tui.errors import KeyBindingError
from ncq.tui.keybindings import KeyBindings
from ncq.tui.session import run_prompt
from ncq.tui.suggestions import Choice

logger = logging.getLogger("ncq")

PROMPT_SEPARATOR = "›"


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def configure_logging(log_file: str | None, log_level: str) -> None:
    """Send records to *log_file*, or only warnings and up to stderr.

    The terminal is in raw mode while editing, so verbose output only goes
    to a file.
    """
    level = getattr(logging, log_level.upper())
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(
            level=max(level, logging.WARNING),
            format="[%(levelname)s] %(name)s: %(message)s",
        )


def format_prompt(prefix: str, message: str = "") -> str:
    """Build the prompt text, e.g. ``"NCQ [lodash] › "``."""
    parts = [p for p in (prefix, message) if p]
    return " ".join(parts + [PROMPT_SEPARATOR]) + " "


def build_editor(
    settings: SettingsManager,
    keybindings: KeyBindings,
    choices: tuple[Choice, ...],
    message: str = "",
) -> PromptEditor:
    """Create a fresh editor configured from *settings*."""
    options = EditorOptions(
        multiline=settings.get_multiline(),
        scroll=settings.get_scroll(),
        suggestion_limit=settings.get_suggestion_limit(),
    )
    footer = build_footer(keybindings) if settings.get_show_footer() else None
    return PromptEditor(
        keybindings=keybindings,
        choices=choices,
        options=options,
        footer=footer,
        prompt=format_prompt(settings.get_prompt(), message),
    )


async def _repl(
    settings: SettingsManager,
    keybindings: KeyBindings,
    index: TaskIndex,
    message: str,
    once: bool,
) -> int:
    """Prompt repeatedly, echoing each submitted input; returns the count."""
    submitted = 0
    while True:
        editor = build_editor(settings, keybindings, index.choices(), message)
        text = await run_prompt(editor)
        if text is None:
            logger.info("prompt cancelled after %d input(s)", submitted)
            return submitted
        submitted += 1
        click.echo(text)
        if once:
            return submitted


@click.command()
@click.option(
    "--tasks",
    "tasks_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Task list to suggest from (JSON array or one task per line)",
)
@click.option("--message", default="", help="Text shown after the prompt prefix")
@click.option("--once", is_flag=True, help="Exit after the first submitted input")
@click.option("--no-scroll", is_flag=True, help="Disable the scrollbar")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write logs to this file")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Log level",
)
def main(tasks_path, message, once, no_scroll, log_file, log_level):
    """Multi-line prompt with task suggestions."""
    configure_logging(log_file, log_level)

    settings = SettingsManager.create(os.getcwd())
    if settings.load_error is not None:
        logger.warning("ignoring unreadable settings: %s", settings.load_error)
    if no_scroll:
        settings.apply_overrides({"scroll": False})

    try:
        keybindings = KeyBindings(settings.get_keybindings())
    except KeyBindingError as exc:
        raise click.ClickException(f"invalid keybindings: {exc}") from exc

    index = TaskIndex()
    if tasks_path:
        try:
            count = index.load(tasks_path)
        except (OSError, ValueError) as exc:
            raise click.ClickException(f"could not load tasks: {exc}") from exc
        logger.info("loaded %d tasks", count)

    if not sys.stdin.isatty():
        raise click.ClickException("ncq needs an interactive terminal")

    _run(_repl(settings, keybindings, index, message, once))


if __name__ == "__main__":
    main()

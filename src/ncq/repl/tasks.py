"""Task list used as the suggestion catalog."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ncq.tui.suggestions import Choice

logger = logging.getLogger(__name__)

MAX_TASKS = 10000


class TaskIndex:
    """Owned, explicitly loaded set of task strings.

    Nothing is read until ``load`` is called; ``choices`` always returns an
    immutable snapshot, so later loads never affect an editor already running.
    """

    def __init__(self, tasks: list[str] | None = None) -> None:
        self._tasks: tuple[str, ...] = ()
        if tasks:
            self._set_tasks(tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def tasks(self) -> tuple[str, ...]:
        return self._tasks

    def load(self, path: str | Path) -> int:
        """Replace the index with the tasks in *path* and return how many were kept.

        The file is either a JSON array of strings or plain text with one
        task per line.  Raises ``OSError`` if it cannot be read and
        ``ValueError`` if a JSON file does not hold a list of strings.
        """
        text = Path(path).read_text(encoding="utf-8")
        stripped = text.lstrip()
        if stripped.startswith("["):
            data = json.loads(stripped)
            if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
                raise ValueError(f"{path}: expected a JSON array of strings")
            tasks = data
        else:
            tasks = text.splitlines()

        self._set_tasks(tasks)
        logger.debug("loaded %d tasks from %s", len(self._tasks), path)
        return len(self._tasks)

    def _set_tasks(self, tasks: list[str]) -> None:
        cleaned = [t.strip() for t in tasks]
        unique = list(dict.fromkeys(t for t in cleaned if t))
        self._tasks = tuple(sorted(unique[:MAX_TASKS]))

    def choices(self) -> tuple[Choice, ...]:
        return tuple(Choice(id=task, label=task) for task in self._tasks)

"""ncq-repl: command line prompt loop, settings and task suggestions."""

from ncq.repl.footer import build_footer
from ncq.repl.settings import SettingsManager, deep_merge_settings
from ncq.repl.tasks import TaskIndex

__all__ = [
    "SettingsManager",
    "TaskIndex",
    "build_footer",
    "deep_merge_settings",
]

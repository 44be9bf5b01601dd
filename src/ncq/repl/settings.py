"""Layered JSON settings for the ncq prompt.

Global settings (``~/.ncq/settings.json``, or ``$NCQ_CONFIG_DIR``) are
overridden by project settings (``./.ncq/settings.json``), which are
overridden by command line options.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".ncq"
CONFIG_DIR_ENV = "NCQ_CONFIG_DIR"


def _settings_defaults() -> dict[str, Any]:
    """Default settings values."""
    return {
        "keybindings": {},
        "scroll": True,
        "multiline": True,
        "suggestionLimit": 5,
        "prompt": "NCQ",
        "showFooter": True,
    }


# --- Deep merge ---


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    For nested dicts, merge recursively. For primitives and arrays,
    override value wins completely.  ``None`` overrides are ignored.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


# --- SettingsManager ---


class SettingsManager:
    """Merged view of default, global, project and override settings.

    Use factory methods (create, in_memory) instead of calling constructor directly.
    """

    def __init__(
        self,
        *,
        project_settings_path: str | None,
        initial_settings: dict[str, Any],
        load_error: Exception | None = None,
    ) -> None:
        self._project_settings_path = project_settings_path
        self._global_settings = dict(initial_settings)
        self._load_error = load_error
        self._overrides: dict[str, Any] = {}
        self._settings = self._merge()

    # --- Factory methods ---

    @classmethod
    def create(cls, cwd: str, config_dir: str | None = None) -> SettingsManager:
        """Create a settings manager reading global and project files."""
        cdir = config_dir or _default_config_dir()
        settings_path = os.path.join(cdir, "settings.json")
        project_settings_path = os.path.join(cwd, CONFIG_DIR_NAME, "settings.json")

        settings, error = _load_from_file(settings_path)
        return cls(
            project_settings_path=project_settings_path,
            initial_settings=settings,
            load_error=error,
        )

    @classmethod
    def in_memory(cls, settings: dict[str, Any] | None = None) -> SettingsManager:
        """Create an in-memory settings manager for testing."""
        return cls(
            project_settings_path=None,
            initial_settings=settings or {},
        )

    # --- Core operations ---

    def _merge(self) -> dict[str, Any]:
        merged = deep_merge_settings(_settings_defaults(), self._global_settings)
        merged = deep_merge_settings(merged, self._load_project_settings())
        return deep_merge_settings(merged, self._overrides)

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        """Apply CLI-level overrides on top of merged settings."""
        self._overrides = deep_merge_settings(self._overrides, overrides)
        self._settings = self._merge()

    @property
    def settings(self) -> dict[str, Any]:
        """Current merged settings (read-only view)."""
        return self._settings

    @property
    def load_error(self) -> Exception | None:
        """Error from reading the global settings file, if it was unreadable."""
        return self._load_error

    def _load_project_settings(self) -> dict[str, Any]:
        """Load project-level settings from disk."""
        if not self._project_settings_path:
            return {}
        settings, error = _load_from_file(self._project_settings_path)
        if error is not None:
            logger.warning("ignoring project settings %s: %s", self._project_settings_path, error)
        return settings

    # --- Getters ---

    def get_keybindings(self) -> dict[str, Any]:
        value = self._settings.get("keybindings")
        return dict(value) if isinstance(value, dict) else {}

    def get_scroll(self) -> bool:
        return bool(self._settings.get("scroll", True))

    def get_multiline(self) -> bool:
        return bool(self._settings.get("multiline", True))

    def get_suggestion_limit(self) -> int:
        value = self._settings.get("suggestionLimit")
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
        return 5

    def get_prompt(self) -> str:
        value = self._settings.get("prompt")
        return value if isinstance(value, str) else "NCQ"

    def get_show_footer(self) -> bool:
        return bool(self._settings.get("showFooter", True))


# --- File I/O helpers ---


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        content = Path(path).read_text(encoding="utf-8")
        settings = json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError(f"{path}: settings must be a JSON object")
    return settings, None


def _default_config_dir() -> str:
    """Default config directory (~/.ncq), overridable via NCQ_CONFIG_DIR."""
    return os.environ.get(CONFIG_DIR_ENV) or os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)

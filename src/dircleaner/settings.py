"""JSON-backed presentation settings for the CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dircleaner.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "dircleaner"
_SETTINGS_FILE = "settings.json"

DEFAULTS: dict[str, Any] = {
    "display": {
        "time_format": "%Y-%m-%d %H:%M:%S",
        "relative_times": False,
    },
    "prompt": {
        "keep_all_default": True,
    },
}


class Settings:
    """Settings read from a JSON file, falling back to DEFAULTS.

    Uses dot-notation keys for nested access:
        settings.get("display.time_format")  # reads data["display"]["time_format"]
        settings.set("display.relative_times", True)  # writes + saves
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, then from DEFAULTS, then *default*."""
        for source in (self._data, DEFAULTS):
            found, value = _lookup(source, key)
            if found:
                return value
        return default

    def get_typed(self, key: str, expected: type) -> Any:
        """Get *key*, falling back to its DEFAULTS value when the stored type is wrong."""
        value = self.get(key)
        if isinstance(value, expected):
            return value
        fallback = _lookup(DEFAULTS, key)[1]
        log.warning(
            "Ignoring setting %s=%r from %s: expected %s, using %r",
            key,
            value,
            self._path,
            expected.__name__,
            fallback,
        )
        return fallback

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if not isinstance(data, dict):
            log.warning("Ignoring settings in %s: expected a JSON object", self._path)
            return
        self._data = data

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)


def _lookup(data: dict[str, Any], key: str) -> tuple[bool, Any]:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node

"""Configuration loading/saving for quizzer."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

_logging = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.quizzer.json")

# Keys passed through to Questioner
CONFIG_KEYS = ("theme", "animations", "icons", "colors", "fallback_mode")


def load_quizzer_config(path: str = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load config from disk. Returns empty dict if not found or invalid.

    QUIZZER_THEME in the environment overrides the stored theme.
    """
    config: dict[str, Any] = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            config = {key: data[key] for key in CONFIG_KEYS if key in data}
        else:
            _logging.debug("Ignoring non-object config in %s", path)
    except FileNotFoundError:
        pass
    except (OSError, ValueError) as e:
        _logging.debug("Ignoring unreadable config %s: %s", path, e)

    theme = os.environ.get("QUIZZER_THEME")
    if theme:
        config["theme"] = theme
    return config


def save_quizzer_config(config: dict[str, Any], path: str = DEFAULT_CONFIG_PATH) -> None:
    """Persist config to disk."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)

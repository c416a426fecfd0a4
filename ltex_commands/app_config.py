"""Application configuration read from the environment.

Values can be placed in a ``.env`` file; ``load_app_configuration`` loads it
before reading ``os.environ``. Editor-style settings (``ltex.*``) are not
configured here: they live in the JSON settings files of each scope.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .checking.language_tool_manager import DEFAULT_SERVER_CONFIG

DEFAULT_USER_SETTINGS_PATH = Path("~/.config/ltex-commands/settings.json")


@dataclass
class AppConfiguration:
    """Runtime options for the CLI and the LanguageTool service."""

    user_settings_path: Path = DEFAULT_USER_SETTINGS_PATH
    log_level: int = logging.INFO
    remote_server: str | None = None
    max_retries: int = 3
    server_config: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_SERVER_CONFIG))


def _parse_log_level(value: str | None) -> int:
    if not value:
        return logging.INFO
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{value}'")
    return level


def _parse_positive_int(name: str, value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{value}'") from exc
    if parsed < 0:
        raise ValueError(f"{name} must not be negative, got {parsed}")
    return parsed


def load_app_configuration(dotenv_path: str | Path | None = None) -> AppConfiguration:
    """Build an :class:`AppConfiguration` from ``.env`` and the environment.

    Recognised variables:
        LTEX_USER_SETTINGS: path of the global (user) settings file
        LTEX_LOG_LEVEL: logging level name (default INFO)
        LTEX_REMOTE_SERVER: URL of a running LanguageTool server
        LTEX_MAX_CHECK_TIME_MS: server-side time limit per check
        LTEX_MAX_RETRIES: retries for transient LanguageTool failures
    """
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)
    else:
        load_dotenv()

    config = AppConfiguration()
    user_settings = os.environ.get("LTEX_USER_SETTINGS")
    if user_settings:
        config.user_settings_path = Path(user_settings)
    config.user_settings_path = config.user_settings_path.expanduser()
    config.log_level = _parse_log_level(os.environ.get("LTEX_LOG_LEVEL"))
    config.remote_server = os.environ.get("LTEX_REMOTE_SERVER") or None
    config.max_retries = _parse_positive_int(
        "LTEX_MAX_RETRIES", os.environ.get("LTEX_MAX_RETRIES"), config.max_retries
    )
    config.server_config["maxCheckTimeMillis"] = _parse_positive_int(
        "LTEX_MAX_CHECK_TIME_MS",
        os.environ.get("LTEX_MAX_CHECK_TIME_MS"),
        config.server_config["maxCheckTimeMillis"],
    )
    return config

"""Layered key-value configuration backed by JSON settings files.

Three scopes are consulted, most specific first:

- ``workspaceFolder``: ``<folder>/.vscode/settings.json`` of the workspace
  folder that contains the document
- ``workspace``: the ``settings`` object of the workspace file, or the only
  folder's ``.vscode/settings.json`` when no workspace file is used
- ``global``: the user settings file

Keys are dotted (``ltex.configurationTarget.dictionary``) and may be stored
flat or as nested objects (``{"ltex.configurationTarget": {"dictionary": ...}}``).
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..errors import ConfigurationWriteRejectedError
from ..models import ConfigurationScope
from ..workspace import Workspace

LOGGER = logging.getLogger(__name__)

_MISSING = object()

# Lookup order for reads
READ_ORDER = (
    ConfigurationScope.WORKSPACE_FOLDER,
    ConfigurationScope.WORKSPACE,
    ConfigurationScope.GLOBAL,
)


class ConfigurationStore(Protocol):
    """Narrow read/update interface onto externally owned configuration."""

    def get(self, key: str, default: Any = None, *, uri: str | None = None) -> Any:
        ...

    def inspect(
        self, key: str, scope: ConfigurationScope, *, uri: str | None = None
    ) -> Any:
        ...

    def settings_path(
        self, scope: ConfigurationScope, *, uri: str | None = None
    ) -> Path | None:
        ...

    async def update(
        self,
        key: str,
        value: Any,
        scope: ConfigurationScope,
        *,
        uri: str | None = None,
    ) -> None:
        ...


@dataclass(frozen=True)
class _SettingsLocation:
    path: Path
    # Workspace files keep their settings under a "settings" object
    section: str | None = None


def lookup_setting(data: dict[str, Any], key: str) -> Any:
    """Find ``key`` in ``data`` as a flat key or along nested objects.

    Returns the module-level ``_MISSING`` sentinel when the key is absent.
    """
    if key in data:
        return data[key]
    parts = key.split(".")
    for index in range(len(parts) - 1, 0, -1):
        prefix = ".".join(parts[:index])
        nested = data.get(prefix)
        if isinstance(nested, dict):
            value = lookup_setting(nested, ".".join(parts[index:]))
            if value is not _MISSING:
                return value
    return _MISSING


class JsonConfigurationStore:
    """Configuration store reading and writing VS Code style settings files."""

    def __init__(self, workspace: Workspace, user_settings_path: Path) -> None:
        self.workspace = workspace
        self.user_settings_path = Path(user_settings_path).expanduser()

    def _location(
        self, scope: ConfigurationScope, uri: str | None
    ) -> _SettingsLocation | None:
        if scope is ConfigurationScope.GLOBAL:
            return _SettingsLocation(self.user_settings_path)
        if scope is ConfigurationScope.WORKSPACE:
            if self.workspace.workspace_file is not None:
                return _SettingsLocation(self.workspace.workspace_file, section="settings")
            if self.workspace.folders:
                return _SettingsLocation(_folder_settings_path(self.workspace.folders[0]))
            return None
        folder = self.workspace.get_workspace_folder(uri)
        if folder is None:
            return None
        return _SettingsLocation(_folder_settings_path(folder))

    def settings_path(
        self, scope: ConfigurationScope, *, uri: str | None = None
    ) -> Path | None:
        location = self._location(scope, uri)
        return location.path if location is not None else None

    def _read_file(self, path: Path) -> dict[str, Any] | None:
        """Load a settings file; ``None`` means it exists but is unusable."""
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            LOGGER.warning("Could not read settings file %s: %s", path, e)
            return None
        if not isinstance(loaded, dict):
            LOGGER.warning("Settings file %s does not contain a JSON object", path)
            return None
        return loaded

    def _read_settings(self, location: _SettingsLocation) -> dict[str, Any]:
        data = self._read_file(location.path) or {}
        if location.section is None:
            return data
        section = data.get(location.section, {})
        return section if isinstance(section, dict) else {}

    def inspect(
        self, key: str, scope: ConfigurationScope, *, uri: str | None = None
    ) -> Any:
        """Return the value defined at exactly ``scope`` (``None`` if unset)."""
        location = self._location(scope, uri)
        if location is None:
            return None
        value = lookup_setting(self._read_settings(location), key)
        return None if value is _MISSING else copy.deepcopy(value)

    def get(self, key: str, default: Any = None, *, uri: str | None = None) -> Any:
        """Return the most specific value of ``key`` for ``uri``."""
        for scope in READ_ORDER:
            location = self._location(scope, uri)
            if location is None:
                continue
            value = lookup_setting(self._read_settings(location), key)
            if value is not _MISSING:
                return copy.deepcopy(value)
        return copy.deepcopy(default)

    async def update(
        self,
        key: str,
        value: Any,
        scope: ConfigurationScope,
        *,
        uri: str | None = None,
    ) -> None:
        """Write ``value`` for ``key`` at ``scope``; ``None`` removes the key.

        Raises:
            ConfigurationWriteRejectedError: If the scope has no settings file
                for ``uri`` or the file cannot be parsed or written
        """
        location = self._location(scope, uri)
        if location is None:
            if scope is ConfigurationScope.WORKSPACE_FOLDER:
                cause = "the document is not inside a workspace folder"
            else:
                cause = "no workspace is open"
            raise ConfigurationWriteRejectedError(key, scope, cause)
        await asyncio.to_thread(self._write, location, key, value, scope)

    def _write(
        self,
        location: _SettingsLocation,
        key: str,
        value: Any,
        scope: ConfigurationScope,
    ) -> None:
        data = self._read_file(location.path)
        if data is None:
            raise ConfigurationWriteRejectedError(
                key, scope, f"{location.path} is not a valid settings file"
            )
        target = data
        if location.section is not None:
            section = data.setdefault(location.section, {})
            if not isinstance(section, dict):
                raise ConfigurationWriteRejectedError(
                    key, scope, f"'{location.section}' in {location.path} is not an object"
                )
            target = section

        if value is None:
            target.pop(key, None)
        else:
            target[key] = copy.deepcopy(value)

        # Write to temp file then rename (atomic on POSIX)
        temp_file = location.path.with_suffix(location.path.suffix + ".tmp")
        try:
            location.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
            temp_file.replace(location.path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigurationWriteRejectedError(key, scope, str(e)) from e
        LOGGER.debug("Wrote %s to %s settings (%s)", key, scope.value, location.path)


def _folder_settings_path(folder: Path) -> Path:
    return folder / ".vscode" / "settings.json"

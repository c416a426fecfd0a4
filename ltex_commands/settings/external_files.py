"""External files referenced from language-specific settings.

A setting entry such as ``":~/dictionaries/en-US.txt"`` in
``ltex.dictionary["en-US"]`` tells the client to keep that language's words
in a flat text file, one entry per line. Relative paths are resolved against
the directory of the settings file declaring them. The file itself is only
created when the first entry is appended.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..models import ConfigurationScope
from ..settings_config import EXTERNAL_FILE_PREFIX, SETTINGS_SECTION
from .configuration import ConfigurationStore
from .normalization import effective_entries

LOGGER = logging.getLogger(__name__)

# Order in which scope values are concatenated; later scopes may negate entries
MERGE_ORDER = (
    ConfigurationScope.GLOBAL,
    ConfigurationScope.WORKSPACE,
    ConfigurationScope.WORKSPACE_FOLDER,
)


class ExternalFileManager:
    """Resolve, read and append to external setting files."""

    def __init__(self, configuration: ConfigurationStore) -> None:
        self.configuration = configuration

    def resolve_path(
        self, entry: str, scope: ConfigurationScope, *, uri: str | None = None
    ) -> Path:
        raw = entry[len(EXTERNAL_FILE_PREFIX) :].strip()
        path = Path(raw).expanduser()
        if not path.is_absolute():
            settings_path = self.configuration.settings_path(scope, uri=uri)
            if settings_path is not None:
                path = settings_path.parent / path
        return path.resolve()

    def _scope_entries(
        self,
        uri: str | None,
        setting_name: str,
        scope: ConfigurationScope,
        language: str,
    ) -> list[str]:
        value = self.configuration.inspect(
            f"{SETTINGS_SECTION}.{setting_name}", scope, uri=uri
        )
        if not isinstance(value, dict):
            return []
        entries = value.get(language) or []
        if isinstance(entries, str):
            entries = [entries]
        return [str(entry) for entry in entries]

    def get_external_file_paths(
        self,
        uri: str | None,
        setting_name: str,
        scope: ConfigurationScope,
        language: str,
    ) -> list[Path]:
        return [
            self.resolve_path(entry, scope, uri=uri)
            for entry in self._scope_entries(uri, setting_name, scope, language)
            if entry.startswith(EXTERNAL_FILE_PREFIX)
        ]

    def get_first_external_file_path(
        self,
        uri: str | None,
        setting_name: str,
        scope: ConfigurationScope,
        language: str,
    ) -> Path | None:
        """Return the first external file declared at exactly ``scope``."""
        paths = self.get_external_file_paths(uri, setting_name, scope, language)
        return paths[0] if paths else None

    @staticmethod
    def read_entries(path: Path) -> list[str]:
        if not path.is_file():
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            LOGGER.warning("Could not read external file %s: %s", path, e)
            return []
        return [line.strip() for line in text.splitlines() if line.strip()]

    def append_to_file(self, path: Path, setting_name: str, values: Sequence[str]) -> None:
        """Append ``values`` to ``path``, one per line, skipping known entries."""
        existing = set(self.read_entries(path))
        new_values: list[str] = []
        for value in values:
            if value in existing or value in new_values:
                continue
            new_values.append(value)
        if not new_values:
            LOGGER.debug("Nothing new to append to %s", path)
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        needs_newline = False
        if path.is_file() and path.stat().st_size > 0:
            with open(path, "rb") as f:
                f.seek(-1, 2)
                needs_newline = f.read(1) != b"\n"
        with open(path, "a", encoding="utf-8") as f:
            if needs_newline:
                f.write("\n")
            for value in new_values:
                f.write(f"{value}\n")
        LOGGER.info(
            "Appended %d entr%s for %s to %s",
            len(new_values),
            "y" if len(new_values) == 1 else "ies",
            setting_name,
            path,
        )

    def resolve_language_entries(
        self, uri: str | None, setting_name: str, language: str
    ) -> list[str]:
        """Return the effective entries of a language across all scopes.

        Values are concatenated from global to folder scope, external file
        references are replaced by the file contents, and negations are applied.
        """
        combined: list[str] = []
        for scope in MERGE_ORDER:
            for entry in self._scope_entries(uri, setting_name, scope, language):
                if entry.startswith(EXTERNAL_FILE_PREFIX):
                    combined.extend(self.read_entries(self.resolve_path(entry, scope, uri=uri)))
                else:
                    combined.append(entry)
        return effective_entries(combined)


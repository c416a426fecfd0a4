from __future__ import annotations

import logging
import platform
from typing import Any, Callable

from . import __version__
from .checking.file_extensions import get_enabled_file_extensions
from .settings.configuration import ConfigurationStore
from .settings_config import DEFAULT_LANGUAGE, ENABLED_SETTING, LANGUAGE_SETTING
from .workspace import Workspace

LOGGER = logging.getLogger(__name__)


class StatusPrinter:
    """Log a summary of the client state for troubleshooting."""

    def __init__(
        self,
        workspace: Workspace,
        configuration: ConfigurationStore,
        client_provider: Callable[[], Any],
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace = workspace
        self.configuration = configuration
        self._client_provider = client_provider
        self.logger = logger or LOGGER

    def status_lines(self) -> list[str]:
        client = self._client_provider()
        active = self.workspace.active_document
        uri = active.uri if active is not None else None
        extensions = get_enabled_file_extensions(self.configuration.get(ENABLED_SETTING, True))
        lines = [
            f"ltex-commands {__version__} on Python {platform.python_version()}",
            f"Language client: {'initialized' if client is not None else 'not initialized'}",
            "Workspace folders: " + (", ".join(str(f) for f in self.workspace.folders) or "none"),
            f"Workspace file: {self.workspace.workspace_file or 'none'}",
            f"Active document: {uri or 'none'}",
            "Enabled file extensions: " + (", ".join(extensions) or "none"),
            f"Language: {self.configuration.get(LANGUAGE_SETTING, DEFAULT_LANGUAGE, uri=uri)}",
        ]
        diagnostics = getattr(client, "diagnostics", None)
        if diagnostics is not None:
            lines.append(f"Documents with diagnostics: {len(diagnostics)}")
        return lines

    def print(self) -> None:
        for line in self.status_lines():
            self.logger.info("%s", line)

"""Workspace model: open folders, the active document and file discovery."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote, urlparse

from .progress import CancellationToken
from .settings_config import FILE_EXTENSION_CODE_LANGUAGES

LOGGER = logging.getLogger(__name__)

_BRACE_PATTERN = re.compile(r"\{([^{}]*)\}")


def path_to_uri(path: Path) -> str:
    return path.resolve().as_uri()


def uri_to_path(uri: str) -> Path:
    """Convert a ``file://`` URI (or a plain path) to a :class:`Path`."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ValueError(f"Unsupported URI scheme '{parsed.scheme}' in {uri}")
    return Path(uri)


def infer_code_language_id(path: Path) -> str:
    return FILE_EXTENSION_CODE_LANGUAGES.get(path.suffix.lstrip(".").lower(), "plaintext")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives in a glob pattern.

    ``**/*.{bib,md}`` becomes ``["**/*.bib", "**/*.md"]``. Nested braces are
    expanded from the innermost group outwards.
    """
    match = _BRACE_PATTERN.search(pattern)
    if match is None:
        return [pattern]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        candidate = pattern[: match.start()] + option + pattern[match.end() :]
        for item in expand_braces(candidate):
            if item not in expanded:
                expanded.append(item)
    return expanded


@dataclass
class TextDocument:
    """A document open in the editor."""

    uri: str
    language_id: str
    text: str

    @classmethod
    def from_path(cls, path: Path, *, language_id: str | None = None) -> "TextDocument":
        return cls(
            uri=path_to_uri(path),
            language_id=language_id or infer_code_language_id(path),
            text=path.read_text(encoding="utf-8"),
        )


@dataclass
class Workspace:
    """Folders opened in the editor plus an optional multi-root workspace file.

    Attributes:
        folders: Workspace folder roots (empty when nothing is open)
        workspace_file: JSON file carrying workspace-level ``settings``
        active_document: Document shown in the focused editor, if any
    """

    folders: list[Path] = field(default_factory=list)
    workspace_file: Path | None = None
    active_document: TextDocument | None = None

    def __post_init__(self) -> None:
        self.folders = [Path(folder).resolve() for folder in self.folders]
        if self.workspace_file is not None:
            self.workspace_file = Path(self.workspace_file).resolve()

    @property
    def has_folders(self) -> bool:
        return bool(self.folders)

    def get_workspace_folder(self, uri: str | None) -> Path | None:
        """Return the innermost workspace folder containing ``uri``."""
        if uri is None:
            return None
        try:
            path = uri_to_path(uri).resolve()
        except ValueError:
            return None
        containing = [
            folder for folder in self.folders if folder == path or folder in path.parents
        ]
        if not containing:
            return None
        return max(containing, key=lambda folder: len(folder.parts))

    def find_files(
        self,
        glob_pattern: str,
        token: CancellationToken | None = None,
    ) -> list[str]:
        """Return URIs of files in any folder matching ``glob_pattern``.

        Files inside hidden directories (``.git``, ``.vscode``...) are skipped.
        The result is unordered; callers sort it as needed.
        """
        patterns = expand_braces(glob_pattern)
        found: set[Path] = set()
        for folder in self.folders:
            if token is not None and token.is_cancellation_requested:
                LOGGER.info("File discovery cancelled")
                break
            if not folder.is_dir():
                LOGGER.warning("Workspace folder %s does not exist", folder)
                continue
            for pattern in patterns:
                for path in folder.glob(pattern):
                    if path.is_file() and not _is_hidden(path, folder):
                        found.add(path.resolve())
        return [path_to_uri(path) for path in found]


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts[:-1])

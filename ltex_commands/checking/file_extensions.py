from __future__ import annotations

from typing import Any, Iterable

from ..settings_config import CODE_LANGUAGE_FILE_EXTENSIONS, LEGACY_ENABLED_CODE_LANGUAGES


def enabled_code_languages(enabled: Any) -> list[str]:
    """Interpret ``ltex.enabled`` as a list of code language ids.

    The legacy boolean form expands to a fixed set of languages; ``None`` and
    ``False`` disable checking.
    """
    if enabled is True:
        return list(LEGACY_ENABLED_CODE_LANGUAGES)
    if enabled is None or enabled is False:
        return []
    if isinstance(enabled, str):
        return [enabled]
    if isinstance(enabled, Iterable):
        return [str(language) for language in enabled]
    return []


def get_enabled_file_extensions(enabled: Any) -> list[str]:
    """Return the sorted, deduplicated file extensions for ``ltex.enabled``.

    Unknown code languages contribute no extension.

    >>> get_enabled_file_extensions(True)
    ['bib', 'md', 'tex']
    >>> get_enabled_file_extensions(["latex", "rsweave"])
    ['tex']
    """
    extensions: set[str] = set()
    for language in enabled_code_languages(enabled):
        extensions.update(CODE_LANGUAGE_FILE_EXTENSIONS.get(language, ()))
    return sorted(extensions)


def build_glob_pattern(extensions: Iterable[str]) -> str:
    """``["md", "tex"]`` becomes ``**/*.{md,tex}``."""
    return "**/*.{" + ",".join(extensions) + "}"

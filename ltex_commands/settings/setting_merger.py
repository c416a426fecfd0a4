"""Merge new entries into language-specific list settings.

``ltex.dictionary``, ``ltex.disabledRules`` and ``ltex.hiddenFalsePositives``
map a language code to a list of entries. The commands that extend them
(add-to-dictionary, disable-rules, hide-false-positives) go through
:class:`SettingMerger`, which

1. works out the scope chain and storage medium from
   ``ltex.configurationTarget.<setting>`` (or its deprecated alias),
2. appends to an existing external file when one is declared somewhere in the
   chain, language by language,
3. otherwise writes the merged mapping into the first scope that accepts it.

Configuration is re-read on every call; nothing is cached between commands.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Mapping, Sequence

from ..errors import ConfigurationWriteRejectedError, InvalidScopeConfigurationError
from ..messages import message
from ..models import (
    ConfigurationScope,
    LanguageSpecificSettingValue,
    ScopeChain,
    StorageMedium,
)
from ..settings_config import (
    CONFIGURATION_TARGET_SECTION,
    DEPRECATED_CONFIGURATION_TARGET_ALIASES,
    EXTERNAL_FILE_PREFIX,
    SETTINGS_SECTION,
)
from .configuration import READ_ORDER, ConfigurationStore
from .external_files import ExternalFileManager
from .normalization import clean_up_string_array

LOGGER = logging.getLogger(__name__)

EXTERNAL_FILE_SUFFIX = "ExternalFile"


@dataclass(frozen=True)
class SettingCandidate:
    """One key consulted when resolving the scope preference."""

    key: str
    is_deprecated: bool = False


def scope_preference_candidates(setting_name: str) -> list[SettingCandidate]:
    """Return the keys to consult for ``setting_name`` in priority order."""
    candidates = [SettingCandidate(f"{CONFIGURATION_TARGET_SECTION}.{setting_name}")]
    alias = DEPRECATED_CONFIGURATION_TARGET_ALIASES.get(setting_name)
    if alias is not None:
        candidates.append(
            SettingCandidate(f"{CONFIGURATION_TARGET_SECTION}.{alias}", is_deprecated=True)
        )
    return candidates


def resolve_scope_preference(
    configuration: ConfigurationStore, uri: str | None, setting_name: str
) -> str | None:
    """Return the first non-null scope preference for ``setting_name``."""
    for candidate in scope_preference_candidates(setting_name):
        value = configuration.get(candidate.key, uri=uri)
        if value is None:
            continue
        if candidate.is_deprecated:
            LOGGER.warning(
                "%s",
                message(
                    "deprecatedConfigurationTarget",
                    candidate.key.rsplit(".", 1)[-1],
                    setting_name,
                ),
            )
        return str(value)
    return None


def scope_chain_for(preference: str | None) -> ScopeChain:
    """Map a scope preference to the scopes to try, most specific first.

    Raises:
        InvalidScopeConfigurationError: If ``preference`` is not recognised
    """
    if preference is None or preference.startswith("workspaceFolder"):
        return ScopeChain.full()
    if preference.startswith("workspace"):
        return ScopeChain((ConfigurationScope.WORKSPACE, ConfigurationScope.GLOBAL))
    # 'global' is deprecated since 7.0.0 but still accepted
    if preference.startswith("user") or preference.startswith("global"):
        return ScopeChain((ConfigurationScope.GLOBAL,))
    raise InvalidScopeConfigurationError(preference)


def storage_medium_for(preference: str | None) -> StorageMedium:
    if preference is None or preference.endswith(EXTERNAL_FILE_SUFFIX):
        return StorageMedium.EXTERNAL_FILE
    return StorageMedium.INLINE


class SettingMerger:
    """Persist new entries of language-specific settings."""

    def __init__(
        self,
        configuration: ConfigurationStore,
        external_files: ExternalFileManager,
    ) -> None:
        self.configuration = configuration
        self.external_files = external_files

    async def add_entries(
        self,
        uri: str,
        setting_name: str,
        entries: Mapping[str, Sequence[str]],
    ) -> bool:
        """Add ``entries`` to ``ltex.<setting_name>`` for the document ``uri``.

        Returns:
            True when every language's entries were persisted somewhere;
            False when the scope preference is invalid or every scope
            rejected the inline write
        """
        preference = resolve_scope_preference(self.configuration, uri, setting_name)
        try:
            scopes = scope_chain_for(preference)
        except InvalidScopeConfigurationError as exc:
            LOGGER.error("%s", message("invalidValueForConfigurationTarget", exc.value))
            return False

        if not entries:
            return True

        medium = storage_medium_for(preference)
        LOGGER.debug(
            "Adding %s entries using %s storage (scopes: %s)",
            setting_name,
            medium.value,
            scopes,
        )
        if medium is StorageMedium.EXTERNAL_FILE:
            return await self._add_to_external_file(uri, setting_name, scopes, entries)
        return await self._add_to_internal_setting(uri, setting_name, scopes, entries)

    async def _add_to_external_file(
        self,
        uri: str,
        setting_name: str,
        scopes: ScopeChain,
        entries: Mapping[str, Sequence[str]],
    ) -> bool:
        success = True
        for language, language_entries in entries.items():
            written = False
            for scope in scopes:
                path = self.external_files.get_first_external_file_path(
                    uri, setting_name, scope, language
                )
                if path is None:
                    continue
                await asyncio.to_thread(
                    self.external_files.append_to_file,
                    path,
                    setting_name,
                    list(language_entries),
                )
                written = True
                break

            if not written:
                # No file declared anywhere: keep this language's entries inline
                success &= await self._add_to_internal_setting(
                    uri, setting_name, scopes, {language: language_entries}
                )
        return success

    async def _add_to_internal_setting(
        self,
        uri: str,
        setting_name: str,
        scopes: ScopeChain,
        entries: Mapping[str, Sequence[str]],
    ) -> bool:
        key = f"{SETTINGS_SECTION}.{setting_name}"
        current: Any = self.configuration.get(key, {}, uri=uri)
        setting_value: LanguageSpecificSettingValue = (
            dict(current) if isinstance(current, dict) else {}
        )

        for language, language_entries in entries.items():
            existing = setting_value.get(language) or []
            if isinstance(existing, str):
                existing = [existing]
            setting_value[language] = clean_up_string_array(
                list(existing) + list(language_entries)
            )

        source_scope = self._declaring_scope(key, uri)
        last_error: ConfigurationWriteRejectedError | None = None
        for scope in scopes:
            try:
                await self.configuration.update(
                    key,
                    self._anchor_external_files(setting_value, source_scope, scope, uri),
                    scope,
                    uri=uri,
                )
            except ConfigurationWriteRejectedError as exc:
                last_error = exc
                LOGGER.debug("Write of %s rejected at %s scope: %s", key, scope.value, exc.cause)
                continue
            LOGGER.info("Updated %s in %s settings", key, scope.value)
            return True

        LOGGER.error(
            "%s %s",
            message("couldNotSetConfiguration", setting_name),
            last_error.cause if last_error is not None else "",
        )
        return False

    def _declaring_scope(self, key: str, uri: str | None) -> ConfigurationScope | None:
        """Return the scope whose value ``configuration.get`` reports for ``key``."""
        for scope in READ_ORDER:
            if self.configuration.inspect(key, scope, uri=uri) is not None:
                return scope
        return None

    def _anchor_external_files(
        self,
        setting_value: LanguageSpecificSettingValue,
        source_scope: ConfigurationScope | None,
        target_scope: ConfigurationScope,
        uri: str | None,
    ) -> LanguageSpecificSettingValue:
        """Make relative external file entries absolute when changing scope.

        Relative references resolve against the directory of the settings file
        declaring them.
        """
        if source_scope is None or source_scope is target_scope:
            return setting_value
        anchored: LanguageSpecificSettingValue = {}
        for language, language_entries in setting_value.items():
            if isinstance(language_entries, str):
                language_entries = [language_entries]
            if not isinstance(language_entries, list):
                anchored[language] = language_entries
                continue
            anchored[language] = [
                self._anchor_entry(entry, source_scope, uri) for entry in language_entries
            ]
        return anchored

    def _anchor_entry(self, entry: Any, scope: ConfigurationScope, uri: str | None) -> Any:
        if not isinstance(entry, str) or not entry.startswith(EXTERNAL_FILE_PREFIX):
            return entry
        raw = entry[len(EXTERNAL_FILE_PREFIX) :].strip()
        if raw.startswith("~") or PurePath(raw).is_absolute():
            return entry
        path = self.external_files.resolve_path(entry, scope, uri=uri)
        LOGGER.debug("Rewriting %s as %s for a different scope", entry, path)
        return f"{EXTERNAL_FILE_PREFIX}{path}"

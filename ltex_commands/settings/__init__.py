"""Resolution and persistence of language-specific settings."""

from __future__ import annotations

from .configuration import ConfigurationStore, JsonConfigurationStore
from .external_files import ExternalFileManager
from .normalization import clean_up_string_array, effective_entries
from .setting_merger import (
    SettingMerger,
    resolve_scope_preference,
    scope_chain_for,
    storage_medium_for,
)

__all__ = [
    "ConfigurationStore",
    "ExternalFileManager",
    "JsonConfigurationStore",
    "SettingMerger",
    "clean_up_string_array",
    "effective_entries",
    "resolve_scope_preference",
    "scope_chain_for",
    "storage_medium_for",
]

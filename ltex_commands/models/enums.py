"""Enumerations shared by the setting resolver and the configuration store."""

from __future__ import annotations

from enum import Enum


class ConfigurationScope(str, Enum):
    """Level of configuration specificity, most specific first.

    Values match the names used by ``ltex.configurationTarget`` so they can
    be logged and compared against user input directly.
    """

    WORKSPACE_FOLDER = "workspaceFolder"
    WORKSPACE = "workspace"
    GLOBAL = "global"


class StorageMedium(str, Enum):
    """Where new entries of a language-specific setting are persisted."""

    INLINE = "inline"
    EXTERNAL_FILE = "externalFile"

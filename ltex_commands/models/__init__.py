"""Public model exports.

Other modules should import ``from ltex_commands.models import CheckRequest, ScopeChain``.
"""

from __future__ import annotations

from .check import (
    CHECK_DOCUMENT_COMMAND,
    EXECUTE_COMMAND_METHOD,
    CheckRequest,
    CheckResult,
    Diagnostic,
)
from .command_params import (
    AddToDictionaryParams,
    DisableRulesParams,
    HideFalsePositivesParams,
    LanguageSpecificSettingValue,
)
from .enums import ConfigurationScope, StorageMedium
from .scope_chain import ScopeChain

__all__ = [
    "AddToDictionaryParams",
    "CHECK_DOCUMENT_COMMAND",
    "CheckRequest",
    "CheckResult",
    "ConfigurationScope",
    "Diagnostic",
    "DisableRulesParams",
    "EXECUTE_COMMAND_METHOD",
    "HideFalsePositivesParams",
    "LanguageSpecificSettingValue",
    "ScopeChain",
    "StorageMedium",
]

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ltex_commands.checking.file_extensions import (
    build_glob_pattern,
    enabled_code_languages,
    get_enabled_file_extensions,
)
from ltex_commands.workspace import expand_braces


def test_legacy_true_enables_default_languages() -> None:
    assert get_enabled_file_extensions(True) == ["bib", "md", "tex"]


@pytest.mark.parametrize("enabled", [False, None, []])
def test_disabled_values_yield_no_extensions(enabled) -> None:
    assert get_enabled_file_extensions(enabled) == []


def test_latex_and_rsweave_share_one_extension() -> None:
    assert get_enabled_file_extensions(["latex", "rsweave"]) == ["tex"]


def test_unknown_languages_are_ignored() -> None:
    assert get_enabled_file_extensions(["markdown", "cobol"]) == ["md"]


def test_single_string_is_treated_as_one_language() -> None:
    assert enabled_code_languages("markdown") == ["markdown"]


def test_glob_pattern_uses_brace_alternatives() -> None:
    pattern = build_glob_pattern(["bib", "md"])

    assert pattern == "**/*.{bib,md}"
    assert expand_braces(pattern) == ["**/*.bib", "**/*.md"]

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ltex_commands.settings.normalization import clean_up_string_array, effective_entries


def test_duplicates_are_removed_and_sorted() -> None:
    assert clean_up_string_array(["foo", "bar", "foo"]) == ["bar", "foo"]


def test_later_negation_cancels_entry() -> None:
    assert clean_up_string_array(["foo", "-foo"]) == ["-foo"]


def test_later_entry_cancels_negation() -> None:
    assert clean_up_string_array(["-foo", "foo"]) == ["foo"]


def test_negated_entries_come_first() -> None:
    assert clean_up_string_array(["b", "-c", "a", "-d"]) == ["-c", "-d", "a", "b"]


def test_blank_entries_are_dropped() -> None:
    assert clean_up_string_array(["", "  ", "-", " word "]) == ["word"]


def test_effective_entries_drop_negations() -> None:
    assert effective_entries(["foo", "bar", "-foo", "-baz"]) == ["bar"]

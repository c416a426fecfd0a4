from __future__ import annotations

import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ltex_commands.models import ConfigurationScope
from ltex_commands.settings.configuration import JsonConfigurationStore
from ltex_commands.settings.external_files import ExternalFileManager
from ltex_commands.workspace import Workspace, path_to_uri


def _setup(tmp_path: Path, user: dict, folder_settings: dict | None = None):
    tmp_path = tmp_path.resolve()
    folder = tmp_path / "project"
    (folder / ".vscode").mkdir(parents=True)
    if folder_settings is not None:
        (folder / ".vscode" / "settings.json").write_text(
            json.dumps(folder_settings), encoding="utf-8"
        )
    user_settings = tmp_path / "user" / "settings.json"
    user_settings.parent.mkdir()
    user_settings.write_text(json.dumps(user), encoding="utf-8")
    store = JsonConfigurationStore(Workspace(folders=[folder]), user_settings)
    return ExternalFileManager(store), path_to_uri(folder / "doc.md"), tmp_path


def test_relative_paths_resolve_against_settings_directory(tmp_path) -> None:
    manager, uri, root = _setup(
        tmp_path, {"ltex.dictionary": {"en-US": ["word", ":dictionaries/en.txt"]}}
    )

    path = manager.get_first_external_file_path(
        uri, "dictionary", ConfigurationScope.GLOBAL, "en-US"
    )

    assert path == root / "user" / "dictionaries" / "en.txt"


def test_no_external_file_at_scope(tmp_path) -> None:
    manager, uri, _ = _setup(tmp_path, {"ltex.dictionary": {"en-US": [":en.txt"]}})

    assert (
        manager.get_first_external_file_path(
            uri, "dictionary", ConfigurationScope.WORKSPACE_FOLDER, "en-US"
        )
        is None
    )
    assert (
        manager.get_first_external_file_path(uri, "dictionary", ConfigurationScope.GLOBAL, "de-DE")
        is None
    )


def test_absolute_paths_are_kept(tmp_path) -> None:
    target = tmp_path.resolve() / "shared" / "words.txt"
    manager, uri, _ = _setup(tmp_path, {})

    assert manager.resolve_path(f":{target}", ConfigurationScope.GLOBAL, uri=uri) == target


def test_append_creates_file_and_skips_known_entries(tmp_path) -> None:
    manager, _, root = _setup(tmp_path, {})
    path = root / "nested" / "dir" / "words.txt"

    manager.append_to_file(path, "dictionary", ["alpha", "beta"])
    manager.append_to_file(path, "dictionary", ["beta", "gamma", "gamma"])

    assert path.read_text(encoding="utf-8") == "alpha\nbeta\ngamma\n"


def test_append_adds_missing_trailing_newline(tmp_path) -> None:
    manager, _, root = _setup(tmp_path, {})
    path = root / "words.txt"
    path.write_text("alpha", encoding="utf-8")

    manager.append_to_file(path, "dictionary", ["beta"])

    assert path.read_text(encoding="utf-8") == "alpha\nbeta\n"


def test_resolve_language_entries_merges_scopes_and_files(tmp_path) -> None:
    manager, uri, root = _setup(
        tmp_path,
        {"ltex.dictionary": {"en-US": ["foo", ":words.txt"], "de-DE": ["Haus"]}},
        folder_settings={"ltex.dictionary": {"en-US": ["-foo", "qux"]}},
    )
    (root / "user" / "words.txt").write_text("bar\n\nbaz\n", encoding="utf-8")

    assert manager.resolve_language_entries(uri, "dictionary", "en-US") == [
        "bar",
        "baz",
        "qux",
    ]
    assert manager.resolve_language_entries(uri, "dictionary", "de-DE") == ["Haus"]


def test_missing_external_file_reads_as_empty(tmp_path) -> None:
    manager, uri, _ = _setup(tmp_path, {"ltex.dictionary": {"en-US": [":missing.txt"]}})

    assert manager.resolve_language_entries(uri, "dictionary", "en-US") == []

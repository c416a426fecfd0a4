"""Tests for scope resolution and persistence of language-specific settings."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ltex_commands.errors import ConfigurationWriteRejectedError, InvalidScopeConfigurationError
from ltex_commands.models import ConfigurationScope, StorageMedium
from ltex_commands.settings.configuration import JsonConfigurationStore
from ltex_commands.settings.external_files import ExternalFileManager
from ltex_commands.settings.setting_merger import (
    SettingMerger,
    resolve_scope_preference,
    scope_chain_for,
    storage_medium_for,
)
from ltex_commands.workspace import Workspace, path_to_uri

FULL_CHAIN = [
    ConfigurationScope.WORKSPACE_FOLDER,
    ConfigurationScope.WORKSPACE,
    ConfigurationScope.GLOBAL,
]


class Project:
    """A workspace folder, a workspace file and a user settings file on disk."""

    def __init__(self, root: Path) -> None:
        root = root.resolve()
        self.folder = root / "project"
        self.folder.mkdir()
        self.document = self.folder / "doc.md"
        self.document.write_text("Some text.", encoding="utf-8")
        self.folder_settings = self.folder / ".vscode" / "settings.json"
        self.workspace_file = root / "project.code-workspace"
        self.workspace_file.write_text(json.dumps({"folders": [{"path": "project"}]}))
        self.user_settings = root / "user" / "settings.json"
        self.store = JsonConfigurationStore(
            Workspace(folders=[self.folder], workspace_file=self.workspace_file),
            self.user_settings,
        )
        self.external_files = ExternalFileManager(self.store)
        self.merger = SettingMerger(self.store, self.external_files)

    @property
    def uri(self) -> str:
        return path_to_uri(self.document)

    def write_user(self, data: dict) -> None:
        self.user_settings.parent.mkdir(parents=True, exist_ok=True)
        self.user_settings.write_text(json.dumps(data), encoding="utf-8")

    def write_folder(self, data: dict) -> None:
        self.folder_settings.parent.mkdir(parents=True, exist_ok=True)
        self.folder_settings.write_text(json.dumps(data), encoding="utf-8")

    def write_workspace(self, settings: dict) -> None:
        self.workspace_file.write_text(
            json.dumps({"folders": [{"path": "project"}], "settings": settings})
        )

    def workspace_settings(self) -> dict:
        return json.loads(self.workspace_file.read_text()).get("settings", {})

    def add(self, setting_name: str, entries: dict[str, list[str]]) -> bool:
        return asyncio.run(self.merger.add_entries(self.uri, setting_name, entries))


@pytest.fixture
def project(tmp_path: Path) -> Project:
    return Project(tmp_path)


class RecordingStore:
    """Configuration store double with scripted values and write outcomes."""

    def __init__(self, values: dict[str, Any] | None = None, reject: set | None = None) -> None:
        self.values = values or {}
        self.reject = reject if reject is not None else set(ConfigurationScope)
        self.attempts: list[ConfigurationScope] = []
        self.writes: list[tuple[str, Any, ConfigurationScope]] = []

    def get(self, key: str, default: Any = None, *, uri: str | None = None) -> Any:
        return self.values.get(key, default)

    def inspect(self, key: str, scope: ConfigurationScope, *, uri: str | None = None) -> Any:
        return None

    def settings_path(self, scope: ConfigurationScope, *, uri: str | None = None):
        return None

    async def update(self, key, value, scope, *, uri=None) -> None:
        self.attempts.append(scope)
        if scope in self.reject:
            raise ConfigurationWriteRejectedError(key, scope, f"{scope.value} is read-only")
        self.writes.append((key, value, scope))


class TestScopeResolution:
    @pytest.mark.parametrize(
        "preference, expected",
        [
            (None, FULL_CHAIN),
            ("workspaceFolder", FULL_CHAIN),
            ("workspaceFolderExternalFile", FULL_CHAIN),
            ("workspace", [ConfigurationScope.WORKSPACE, ConfigurationScope.GLOBAL]),
            (
                "workspaceExternalFile",
                [ConfigurationScope.WORKSPACE, ConfigurationScope.GLOBAL],
            ),
            ("user", [ConfigurationScope.GLOBAL]),
            ("userExternalFile", [ConfigurationScope.GLOBAL]),
            ("global", [ConfigurationScope.GLOBAL]),
        ],
    )
    def test_scope_chain_for(self, preference, expected) -> None:
        assert list(scope_chain_for(preference)) == expected

    def test_unknown_preference_is_rejected(self) -> None:
        with pytest.raises(InvalidScopeConfigurationError) as excinfo:
            scope_chain_for("nowhere")
        assert excinfo.value.value == "nowhere"

    @pytest.mark.parametrize(
        "preference, expected",
        [
            (None, StorageMedium.EXTERNAL_FILE),
            ("userExternalFile", StorageMedium.EXTERNAL_FILE),
            ("workspaceFolderExternalFile", StorageMedium.EXTERNAL_FILE),
            ("user", StorageMedium.INLINE),
            ("workspaceFolder", StorageMedium.INLINE),
        ],
    )
    def test_storage_medium_for(self, preference, expected) -> None:
        assert storage_medium_for(preference) is expected

    def test_current_key_wins_over_deprecated_alias(self) -> None:
        store = RecordingStore(
            {
                "ltex.configurationTarget.dictionary": "workspace",
                "ltex.configurationTarget.addToDictionary": "user",
            }
        )

        assert resolve_scope_preference(store, None, "dictionary") == "workspace"

    def test_deprecated_alias_is_used_with_warning(self, caplog) -> None:
        store = RecordingStore({"ltex.configurationTarget.ignoreRuleInSentence": "user"})

        with caplog.at_level(logging.WARNING):
            preference = resolve_scope_preference(store, None, "hiddenFalsePositives")

        assert preference == "user"
        assert "deprecated" in caplog.text


def test_external_file_preference_without_file_falls_back_inline(project) -> None:
    project.write_user({"ltex.configurationTarget.dictionary": "workspaceExternalFile"})

    assert project.add("dictionary", {"en-US": ["foo"]}) is True

    assert project.workspace_settings() == {"ltex.dictionary": {"en-US": ["foo"]}}
    assert not project.folder_settings.exists()
    assert "ltex.dictionary" not in json.loads(project.user_settings.read_text())


def test_inline_merge_combines_with_existing_entries(project) -> None:
    project.write_user({"ltex.configurationTarget.dictionary": "workspace"})
    project.write_workspace({"ltex.dictionary": {"en-US": ["foo"], "de-DE": ["Haus"]}})

    assert project.add("dictionary", {"en-US": ["foo", "bar"]}) is True

    assert project.workspace_settings()["ltex.dictionary"] == {
        "en-US": ["bar", "foo"],
        "de-DE": ["Haus"],
    }


def test_new_entry_replaces_earlier_negation(project) -> None:
    project.write_user(
        {
            "ltex.configurationTarget.disabledRules": "user",
            "ltex.disabledRules": {"en-US": ["-OXFORD_SPELLING", "PASSIVE_VOICE"]},
        }
    )

    assert project.add("disabledRules", {"en-US": ["OXFORD_SPELLING"]}) is True

    data = json.loads(project.user_settings.read_text())
    assert data["ltex.disabledRules"] == {"en-US": ["OXFORD_SPELLING", "PASSIVE_VOICE"]}


def test_invalid_preference_writes_nothing_and_logs_once(project, caplog) -> None:
    project.write_user({"ltex.configurationTarget.dictionary": "nowhere"})
    before = project.user_settings.read_text()

    with caplog.at_level(logging.ERROR):
        assert project.add("dictionary", {"en-US": ["foo"]}) is False

    errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert "nowhere" in errors[0].getMessage()
    assert project.user_settings.read_text() == before
    assert project.workspace_settings() == {}
    assert not project.folder_settings.exists()


def test_deprecated_alias_selects_scope(project, caplog) -> None:
    project.write_user({"ltex.configurationTarget.addToDictionary": "user"})

    with caplog.at_level(logging.WARNING):
        assert project.add("dictionary", {"en-US": ["foo"]}) is True

    data = json.loads(project.user_settings.read_text())
    assert data["ltex.dictionary"] == {"en-US": ["foo"]}
    assert "deprecated" in caplog.text


def test_declared_external_file_is_appended(project) -> None:
    project.write_folder({"ltex.dictionary": {"en-US": [":dictionary.txt"]}})
    external = project.folder_settings.parent / "dictionary.txt"
    external.write_text("alpha\n", encoding="utf-8")
    settings_before = project.folder_settings.read_text()

    assert project.add("dictionary", {"en-US": ["beta"]}) is True

    assert external.read_text(encoding="utf-8") == "alpha\nbeta\n"
    assert project.folder_settings.read_text() == settings_before
    assert project.workspace_settings() == {}


def test_external_file_append_runs_in_worker_thread(project, monkeypatch) -> None:
    project.write_folder({"ltex.dictionary": {"en-US": [":dictionary.txt"]}})
    offloaded = []
    original_to_thread = asyncio.to_thread

    async def recording_to_thread(func, /, *args, **kwargs):
        offloaded.append(getattr(func, "__name__", repr(func)))
        return await original_to_thread(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)

    assert project.add("dictionary", {"en-US": ["beta"]}) is True

    assert offloaded == ["append_to_file"]
    assert (project.folder_settings.parent / "dictionary.txt").read_text() == "beta\n"


def test_external_file_found_further_up_the_chain(project) -> None:
    project.write_user({"ltex.dictionary": {"en-US": [":words.txt"]}})

    assert project.add("dictionary", {"en-US": ["beta"], "de-DE": ["Haus"]}) is True

    external = project.user_settings.parent / "words.txt"
    assert external.read_text(encoding="utf-8") == "beta\n"
    # de-DE declares no file, so it lands inline in the most specific scope
    folder_data = json.loads(project.folder_settings.read_text())
    assert folder_data["ltex.dictionary"]["de-DE"] == ["Haus"]


def test_relative_external_file_keeps_pointing_at_declaring_scope(project) -> None:
    project.write_user({"ltex.dictionary": {"en-US": [":words.txt"]}})
    user_file = project.user_settings.parent / "words.txt"

    assert project.add("dictionary", {"en-US": ["beta"], "de-DE": ["Haus"]}) is True
    assert project.add("dictionary", {"en-US": ["gamma"]}) is True

    assert user_file.read_text(encoding="utf-8") == "beta\ngamma\n"
    assert not (project.folder_settings.parent / "words.txt").exists()
    folder_data = json.loads(project.folder_settings.read_text())
    assert folder_data["ltex.dictionary"]["en-US"] == [f":{user_file}"]
    assert json.loads(project.user_settings.read_text())["ltex.dictionary"] == {
        "en-US": [":words.txt"]
    }


def test_external_file_written_in_declaring_scope_stays_relative(project) -> None:
    project.write_folder({"ltex.dictionary": {"en-US": [":words.txt"]}})

    assert project.add("dictionary", {"de-DE": ["Haus"]}) is True

    folder_data = json.loads(project.folder_settings.read_text())
    assert folder_data["ltex.dictionary"] == {"en-US": [":words.txt"], "de-DE": ["Haus"]}


def test_rejected_folder_scope_falls_back_to_workspace(project, tmp_path) -> None:
    project.write_user({"ltex.configurationTarget.dictionary": "workspaceFolder"})
    outside = path_to_uri(tmp_path / "notes.md")

    result = asyncio.run(
        project.merger.add_entries(outside, "dictionary", {"en-US": ["foo"]})
    )

    assert result is True
    assert project.workspace_settings() == {"ltex.dictionary": {"en-US": ["foo"]}}


def test_every_scope_rejected_is_logged(caplog) -> None:
    store = RecordingStore({"ltex.configurationTarget.dictionary": "workspaceFolder"})
    merger = SettingMerger(store, ExternalFileManager(store))

    with caplog.at_level(logging.ERROR):
        result = asyncio.run(merger.add_entries("file:///doc.md", "dictionary", {"en-US": ["foo"]}))

    assert result is False
    assert store.attempts == FULL_CHAIN
    assert "Could not set configuration 'ltex.dictionary'" in caplog.text
    assert "global is read-only" in caplog.text


def test_first_accepting_scope_stops_the_chain() -> None:
    store = RecordingStore(
        {"ltex.configurationTarget.disabledRules": "workspaceFolder"},
        reject={ConfigurationScope.WORKSPACE_FOLDER},
    )
    merger = SettingMerger(store, ExternalFileManager(store))

    assert asyncio.run(
        merger.add_entries("file:///doc.md", "disabledRules", {"en-US": ["RULE"]})
    ) is True

    assert store.attempts == [ConfigurationScope.WORKSPACE_FOLDER, ConfigurationScope.WORKSPACE]
    assert store.writes == [
        ("ltex.disabledRules", {"en-US": ["RULE"]}, ConfigurationScope.WORKSPACE)
    ]


def test_empty_entries_are_a_no_op() -> None:
    store = RecordingStore({"ltex.configurationTarget.dictionary": "user"})
    merger = SettingMerger(store, ExternalFileManager(store))

    assert asyncio.run(merger.add_entries("file:///doc.md", "dictionary", {})) is True
    assert store.attempts == []

"""Parameter objects for the add-to-dictionary style commands.

Each command receives a structured mapping from the checking service
(``{"uri": ..., "words": {"en-US": [...]}}``). The models validate the shape
and expose the language mapping uniformly through ``entries``.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

LanguageSpecificSettingValue = Dict[str, List[str]]


def _clean_language_mapping(value: object) -> LanguageSpecificSettingValue:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("expected a mapping from language to a list of entries")
    cleaned: LanguageSpecificSettingValue = {}
    for language, items in value.items():
        language_key = str(language).strip()
        if not language_key:
            raise ValueError("language keys must not be empty")
        if isinstance(items, str):
            items = [items]
        if not isinstance(items, list):
            raise ValueError(f"entries for language '{language_key}' must be a list")
        cleaned[language_key] = [str(item).strip() for item in items if str(item).strip()]
    return cleaned


class _LanguageEntriesParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uri: str

    @field_validator("uri", mode="before")
    def _strip_uri(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("uri must not be empty")
        return result


class AddToDictionaryParams(_LanguageEntriesParams):
    words: LanguageSpecificSettingValue = Field(default_factory=dict)

    @field_validator("words", mode="before")
    def _clean_words(cls, value: object) -> LanguageSpecificSettingValue:
        return _clean_language_mapping(value)

    @property
    def entries(self) -> LanguageSpecificSettingValue:
        return self.words


class DisableRulesParams(_LanguageEntriesParams):
    rule_ids: LanguageSpecificSettingValue = Field(default_factory=dict, alias="ruleIds")

    @field_validator("rule_ids", mode="before")
    def _clean_rule_ids(cls, value: object) -> LanguageSpecificSettingValue:
        return _clean_language_mapping(value)

    @property
    def entries(self) -> LanguageSpecificSettingValue:
        return self.rule_ids


class HideFalsePositivesParams(_LanguageEntriesParams):
    false_positives: LanguageSpecificSettingValue = Field(
        default_factory=dict, alias="falsePositives"
    )

    @field_validator("false_positives", mode="before")
    def _clean_false_positives(cls, value: object) -> LanguageSpecificSettingValue:
        return _clean_language_mapping(value)

    @property
    def entries(self) -> LanguageSpecificSettingValue:
        return self.false_positives

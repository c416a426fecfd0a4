"""In-process checking service backed by LanguageTool.

``LanguageToolClient`` answers the same ``workspace/executeCommand`` request
an LTeX language server would: ``ltex.checkDocument`` with a ``uri`` and
optional ``codeLanguageId``/``text``. It resolves the document's language and
its dictionary, disabled rules and hidden false positives from the workspace
settings (external files included), runs LanguageTool and publishes the
findings into :attr:`LanguageToolClient.diagnostics`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
import time
from dataclasses import dataclass
from typing import Any, Iterable

from language_tool_python.utils import LanguageToolError

from ..models import (
    CHECK_DOCUMENT_COMMAND,
    EXECUTE_COMMAND_METHOD,
    CheckResult,
    Diagnostic,
)
from ..settings.configuration import ConfigurationStore
from ..settings.external_files import ExternalFileManager
from ..settings_config import (
    DEFAULT_LANGUAGE,
    DICTIONARY,
    DISABLED_RULES,
    HIDDEN_FALSE_POSITIVES,
    LANGUAGE_SETTING,
)
from ..workspace import uri_to_path
from .document_checker import DiagnosticCollection
from .language_tool_manager import LanguageToolManager

LOGGER = logging.getLogger(__name__)

# Transient errors that should trigger a retry.
# language_tool_python wraps connection-level failures of its server in
# LanguageToolError, so that counts as transient too.
TRANSIENT_ERRORS = (
    ConnectionError,
    TimeoutError,
    OSError,
    LanguageToolError,
)


def _retry_with_backoff(
    func: Any,
    func_arg: Any,
    max_retries: int = 3,
    base_delay: float = 3.0,
    max_delay: float = 60.0,
) -> Any:
    """Call ``func(func_arg)``, retrying :data:`TRANSIENT_ERRORS` with jittered backoff.

    ``max_retries`` counts retries, not attempts. The last transient error is
    re-raised once they are used up.
    """
    for attempt in range(max_retries + 1):
        try:
            return func(func_arg)
        except TRANSIENT_ERRORS as exc:
            if attempt >= max_retries:
                LOGGER.error(
                    "Language check failed after %d attempt(s): %s",
                    attempt + 1,
                    exc,
                )
                raise

            delay = base_delay * (2**attempt)
            # Jitter avoids every retry hitting the server at the same instant
            delay = min(delay * random.uniform(0.75, 1.25), max_delay)
            LOGGER.warning(
                "Language check attempt %d failed (transient error: %s); "
                "retrying in %.1f second(s)...",
                attempt + 1,
                type(exc).__name__,
                delay,
            )
            time.sleep(delay)
    raise RuntimeError("Retry logic completed without returning or raising")


@dataclass(frozen=True)
class HiddenFalsePositive:
    """A rule match to suppress when the sentence matches ``sentence``."""

    rule_id: str
    sentence: re.Pattern[str]

    def hides(self, match: Any) -> bool:
        if (getattr(match, "ruleId", None) or "") != self.rule_id:
            return False
        sentence = str(getattr(match, "sentence", "") or "")
        return self.sentence.search(sentence) is not None


def parse_hidden_false_positives(entries: Iterable[str]) -> list[HiddenFalsePositive]:
    """Parse ``{"rule": ..., "sentence": ...}`` JSON entries, skipping bad ones."""
    parsed: list[HiddenFalsePositive] = []
    for entry in entries:
        try:
            data = json.loads(entry)
            rule_id = str(data["rule"])
            pattern = re.compile(str(data["sentence"]))
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            LOGGER.warning("Ignoring malformed hidden false positive %r: %s", entry, exc)
            continue
        except re.error as exc:
            LOGGER.warning("Ignoring hidden false positive with invalid regex %r: %s", entry, exc)
            continue
        parsed.append(HiddenFalsePositive(rule_id=rule_id, sentence=pattern))
    return parsed


def _matched_text(match: Any) -> str:
    matched = getattr(match, "matchedText", None)
    if matched:
        return str(matched).strip()
    context = str(getattr(match, "context", "") or "")
    offset = int(getattr(match, "offsetInContext", 0) or 0)
    length = int(getattr(match, "errorLength", 0) or 0)
    return context[offset : offset + length].strip()


def filter_matches(
    matches: Iterable[Any],
    dictionary: set[str],
    hidden: Iterable[HiddenFalsePositive] = (),
) -> list[Any]:
    """Drop matches on dictionary words and hidden false positives.

    Dictionary matching is case-sensitive, except that acronym forms such as
    ``NICs`` are also accepted when the singular acronym is in the dictionary.
    """
    hidden = list(hidden)
    kept: list[Any] = []
    for match in matches:
        if any(item.hides(match) for item in hidden):
            continue
        original_text = _matched_text(match)
        if original_text and dictionary:
            letters = "".join(ch for ch in original_text if ch.isalpha())
            if letters and (letters.isupper() or letters.rstrip("s").isupper()):
                if letters in dictionary or letters.rstrip("s") in dictionary:
                    continue
            elif original_text in dictionary:
                continue
        kept.append(match)
    return kept


def make_diagnostic(uri: str, match: Any) -> Diagnostic:
    return Diagnostic(
        uri=uri,
        rule_id=getattr(match, "ruleId", "UNKNOWN") or "UNKNOWN",
        message=str(getattr(match, "message", "") or "").strip() or "(no message)",
        offset=int(getattr(match, "offset", 0) or 0),
        length=int(getattr(match, "errorLength", 0) or 0),
        replacements=list(getattr(match, "replacements", []) or []),
        matched_text=_matched_text(match),
        sentence=str(getattr(match, "sentence", "") or ""),
        context=str(getattr(match, "context", "") or ""),
    )


class LanguageToolClient:
    """Language client that checks documents with LanguageTool."""

    def __init__(
        self,
        configuration: ConfigurationStore,
        external_files: ExternalFileManager,
        *,
        manager: LanguageToolManager | None = None,
        max_retries: int = 3,
        base_delay: float = 3.0,
    ) -> None:
        self.configuration = configuration
        self.external_files = external_files
        self.manager = manager or LanguageToolManager(logger=LOGGER)
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.diagnostics: DiagnosticCollection | None = DiagnosticCollection()
        # LanguageTool instances are shared per language; one check at a time
        self._lock = asyncio.Lock()

    async def send_request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        if method != EXECUTE_COMMAND_METHOD:
            return CheckResult.failure(f"Unsupported request '{method}'").to_response()
        command = params.get("command")
        if command != CHECK_DOCUMENT_COMMAND:
            return CheckResult.failure(f"Unknown command '{command}'").to_response()
        arguments = params.get("arguments") or []
        if not arguments or not isinstance(arguments[0], dict) or not arguments[0].get("uri"):
            return CheckResult.failure("Missing document URI").to_response()
        return (await self.check_document(arguments[0])).to_response()

    async def check_document(self, arguments: dict[str, Any]) -> CheckResult:
        uri = str(arguments["uri"])
        text = arguments.get("text")
        async with self._lock:
            try:
                diagnostics = await asyncio.to_thread(self._check, uri, text)
            except Exception as exc:
                LOGGER.exception("Language check failed for %s", uri)
                return CheckResult.failure(str(exc) or type(exc).__name__)
        if self.diagnostics is not None:
            self.diagnostics.set(uri, diagnostics)
        LOGGER.info("Checked %s: %d diagnostic(s)", uri, len(diagnostics))
        return CheckResult(success=True)

    def _check(self, uri: str, text: str | None) -> list[Diagnostic]:
        if text is None:
            text = uri_to_path(uri).read_text(encoding="utf-8")

        language = str(self.configuration.get(LANGUAGE_SETTING, DEFAULT_LANGUAGE, uri=uri))
        dictionary = set(self.external_files.resolve_language_entries(uri, DICTIONARY, language))
        disabled_rules = set(
            self.external_files.resolve_language_entries(uri, DISABLED_RULES, language)
        )
        hidden = parse_hidden_false_positives(
            self.external_files.resolve_language_entries(uri, HIDDEN_FALSE_POSITIVES, language)
        )

        tool = self.manager.get_tool(language)
        tool.disabled_rules = disabled_rules
        matches = _retry_with_backoff(
            tool.check, text, max_retries=self.max_retries, base_delay=self.base_delay
        )
        kept = filter_matches(matches or [], dictionary, hidden)
        LOGGER.debug(
            "%s: %d match(es), %d after dictionary and false-positive filtering",
            uri,
            len(matches or []),
            len(kept),
        )
        return [make_diagnostic(uri, match) for match in kept]

    def close(self) -> None:
        self.manager.close()

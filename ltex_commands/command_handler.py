"""Commands exposed to the editor's command dispatcher.

Every command is a coroutine returning ``True`` on success. Failures are
reported through the :class:`~ltex_commands.notifications.Notifier` and never
propagate past :meth:`CommandHandler.execute`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from .checking.batch_checker import BatchChecker
from .checking.document_checker import DocumentChecker, LanguageClient
from .errors import LtexCommandError, NotInitializedError
from .messages import message
from .models import (
    AddToDictionaryParams,
    CheckRequest,
    DisableRulesParams,
    HideFalsePositivesParams,
    LanguageSpecificSettingValue,
)
from .notifications import Notifier
from .progress import CancellationTokenSource, ProgressReporter
from .settings.configuration import ConfigurationStore
from .settings.external_files import ExternalFileManager
from .settings.setting_merger import SettingMerger
from .settings_config import DICTIONARY, DISABLED_RULES, HIDDEN_FALSE_POSITIVES
from .status import StatusPrinter
from .workspace import Workspace, uri_to_path

LOGGER = logging.getLogger(__name__)

Command = Callable[[Any], Awaitable[bool]]


class CommandHandler:
    """Implements the ``ltex.*`` commands on top of the checking and settings layers."""

    def __init__(
        self,
        workspace: Workspace,
        configuration: ConfigurationStore,
        notifier: Notifier,
        *,
        external_files: ExternalFileManager | None = None,
        language_client: LanguageClient | None = None,
        progress_reporter: ProgressReporter | None = None,
        status_printer: StatusPrinter | None = None,
        recheck_after_update: bool = True,
    ) -> None:
        self.workspace = workspace
        self.configuration = configuration
        self.notifier = notifier
        self.external_files = external_files or ExternalFileManager(configuration)
        self.progress_reporter = progress_reporter
        self.recheck_after_update = recheck_after_update
        self._language_client = language_client
        self._checker = DocumentChecker(lambda: self._language_client)
        self._setting_merger = SettingMerger(configuration, self.external_files)
        self._batch_checker = BatchChecker(
            self._check_uri, workspace, configuration, notifier
        )
        self._status_printer = status_printer or StatusPrinter(
            workspace, configuration, lambda: self._language_client
        )
        self._batch_cancellation: CancellationTokenSource | None = None
        self._background_tasks: set[asyncio.Task[bool]] = set()

        self.commands: dict[str, Command] = {
            "ltex.checkCurrentDocument": self.check_current_document,
            "ltex.checkAllDocumentsInWorkspace": self.check_all_documents_in_workspace,
            "ltex.clearDiagnosticsInCurrentDocument": self.clear_diagnostics_in_current_document,
            "ltex.clearAllDiagnostics": self.clear_all_diagnostics,
            "ltex.showStatusInformation": self.show_status_information,
            "ltex.addToDictionary": self.add_to_dictionary,
            "ltex.disableRules": self.disable_rules,
            "ltex.hideFalsePositives": self.hide_false_positives,
        }

    @property
    def language_client(self) -> LanguageClient | None:
        return self._language_client

    @language_client.setter
    def language_client(self, language_client: LanguageClient | None) -> None:
        self._language_client = language_client

    async def execute(self, command_id: str, params: Any = None) -> bool:
        """Run the command registered as ``command_id``.

        Raises:
            KeyError: If no command is registered under ``command_id``
        """
        command = self.commands[command_id]
        try:
            return await command(params)
        except ValidationError as exc:
            self.notifier.show_error_message(
                message("invalidCommandParameters", command_id, exc)
            )
        except LtexCommandError as exc:
            self.notifier.show_error_message(str(exc))
        return False

    def _require_client(self) -> LanguageClient | None:
        if self._language_client is None:
            self.notifier.show_error_message(message("ltexNotInitialized"))
        return self._language_client

    async def check_document(
        self,
        uri: str,
        code_language_id: str | None = None,
        text: str | None = None,
    ) -> bool:
        """Check one document and report a failure to the user."""
        request = CheckRequest(document_uri=uri, code_language_id=code_language_id, text=text)
        try:
            result = await self._checker.check(request)
        except NotInitializedError:
            self.notifier.show_error_message(message("ltexNotInitialized"))
            return False

        if result.success:
            return True
        self.notifier.show_error_message(
            message("couldNotCheckDocument", uri_to_path(uri), result.error_message)
        )
        return False

    async def _check_uri(self, uri: str) -> bool:
        return await self.check_document(uri)

    async def check_current_document(self, params: Any = None) -> bool:
        if self._require_client() is None:
            return False
        document = self.workspace.active_document
        if document is None:
            self.notifier.show_error_message(message("noEditorOpenToCheckDocument"))
            return False
        return await self.check_document(document.uri, document.language_id, document.text)

    async def check_all_documents_in_workspace(self, params: Any = None) -> bool:
        if self._require_client() is None:
            return False
        source = CancellationTokenSource()
        self._batch_cancellation = source
        try:
            return await self._batch_checker.check_all(source.token, self.progress_reporter)
        finally:
            self._batch_cancellation = None

    def cancel_batch_check(self) -> None:
        """Request cancellation of the running batch check, if any."""
        if self._batch_cancellation is not None:
            self._batch_cancellation.cancel()

    async def clear_diagnostics_in_current_document(self, params: Any = None) -> bool:
        client = self._require_client()
        if client is None:
            return False
        if client.diagnostics is None:
            return True
        document = self.workspace.active_document
        if document is not None:
            client.diagnostics.set(document.uri, None)
        return True

    async def clear_all_diagnostics(self, params: Any = None) -> bool:
        client = self._require_client()
        if client is None:
            return False
        if client.diagnostics is not None:
            client.diagnostics.clear()
        return True

    async def show_status_information(self, params: Any = None) -> bool:
        self._status_printer.print()
        return True

    async def add_to_dictionary(self, params: Any) -> bool:
        parsed = AddToDictionaryParams.model_validate(params)
        return await self._add_to_language_specific_setting(parsed.uri, DICTIONARY, parsed.entries)

    async def disable_rules(self, params: Any) -> bool:
        parsed = DisableRulesParams.model_validate(params)
        return await self._add_to_language_specific_setting(
            parsed.uri, DISABLED_RULES, parsed.entries
        )

    async def hide_false_positives(self, params: Any) -> bool:
        parsed = HideFalsePositivesParams.model_validate(params)
        return await self._add_to_language_specific_setting(
            parsed.uri, HIDDEN_FALSE_POSITIVES, parsed.entries
        )

    async def _add_to_language_specific_setting(
        self,
        uri: str,
        setting_name: str,
        entries: LanguageSpecificSettingValue,
    ) -> bool:
        success = await self._setting_merger.add_entries(uri, setting_name, entries)
        if self.recheck_after_update:
            self._schedule_recheck()
        return success

    def _schedule_recheck(self) -> None:
        # The re-check's outcome is reported by the check itself, not awaited here
        task = asyncio.get_running_loop().create_task(self.check_current_document())
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_task_done)

    def _on_background_task_done(self, task: asyncio.Task[bool]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Background re-check failed", exc_info=exc)

    async def drain_background_tasks(self) -> None:
        """Wait for scheduled re-checks to finish."""
        while self._background_tasks:
            await asyncio.wait(set(self._background_tasks))

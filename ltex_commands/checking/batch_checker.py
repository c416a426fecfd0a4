"""Check every eligible document in the workspace, one at a time.

Documents are discovered from the enabled file extensions, sorted by path and
checked strictly sequentially because the checking service keeps diagnostic
state per document and must not receive overlapping requests. The first
failed document aborts the batch. Cancellation is polled between steps and
ends the batch early with success.
"""

from __future__ import annotations

import asyncio
import locale
import logging
from typing import Awaitable, Callable

from ..messages import message
from ..notifications import Notifier
from ..progress import CancellationToken, ProgressReporter, ProgressStack
from ..settings.configuration import ConfigurationStore
from ..settings_config import ENABLED_SETTING
from ..workspace import Workspace, uri_to_path
from .file_extensions import build_glob_pattern, get_enabled_file_extensions

LOGGER = logging.getLogger(__name__)

DISCOVERY_WEIGHT = 0.1
CHECKING_WEIGHT = 0.9

CheckDocument = Callable[[str], Awaitable[bool]]


def document_sort_key(uri: str) -> tuple[str, str]:
    """Case-insensitive, locale-aware ordering key for a document's path.

    The raw path breaks ties so the order is total whatever the process locale.
    """
    path = str(uri_to_path(uri))
    return locale.strxfrm(path.casefold()), path


class BatchChecker:
    """Run ``check_document`` over all documents of a workspace.

    Args:
        check_document: Coroutine function checking one URI and returning
            whether it succeeded (it reports its own failures)
        workspace: Source of workspace folders and file discovery
        configuration: Store providing ``ltex.enabled``
        notifier: Channel for the "nothing to check" errors
    """

    def __init__(
        self,
        check_document: CheckDocument,
        workspace: Workspace,
        configuration: ConfigurationStore,
        notifier: Notifier,
    ) -> None:
        self._check_document = check_document
        self.workspace = workspace
        self.configuration = configuration
        self.notifier = notifier

    async def check_all(
        self,
        token: CancellationToken,
        reporter: ProgressReporter | None = None,
    ) -> bool:
        progress = ProgressStack(message("checkingAllDocumentsInWorkspace"), reporter)

        progress.start_task(DISCOVERY_WEIGHT, message("findingAllDocumentsInWorkspace"))
        if token.is_cancellation_requested:
            return True

        extensions = get_enabled_file_extensions(
            self.configuration.get(ENABLED_SETTING, True)
        )
        if not extensions:
            LOGGER.info("Checking is disabled for all file types; nothing to do")
            return True

        uris = await asyncio.to_thread(
            self.workspace.find_files, build_glob_pattern(extensions), token
        )
        uris.sort(key=document_sort_key)
        progress.finish_task()
        LOGGER.info("Found %d document(s) to check", len(uris))

        if token.is_cancellation_requested:
            return True

        progress.start_task(CHECKING_WEIGHT, message("checkingAllDocumentsInWorkspace"))
        total = len(uris)

        for index, uri in enumerate(uris):
            progress.update_task(
                index / total,
                message("checkingDocumentN", index + 1, total, uri_to_path(uri).name),
            )
            if token.is_cancellation_requested:
                LOGGER.info("Batch check cancelled after %d of %d document(s)", index, total)
                return True
            if not await self._check_document(uri):
                LOGGER.warning(
                    "Stopping batch check at document %d of %d (%s)", index + 1, total, uri
                )
                return False

        progress.finish_task()

        if total > 0:
            return True

        if not self.workspace.has_folders:
            self.notifier.show_error_message(
                message("couldNotCheckDocumentsAsNoFoldersWereOpened")
            )
        else:
            self.notifier.show_error_message(
                message("couldNotCheckDocumentsAsNoDocumentsWereFound")
            )
        return False

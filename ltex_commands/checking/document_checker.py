"""Single-document check against the checking service."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from pydantic import ValidationError

from ..errors import NotInitializedError
from ..models import EXECUTE_COMMAND_METHOD, CheckRequest, CheckResult

LOGGER = logging.getLogger(__name__)


class DiagnosticCollection:
    """Diagnostics published by the checking service, keyed by document URI."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Any]] = {}

    def set(self, uri: str, diagnostics: list[Any] | None) -> None:
        if diagnostics is None:
            self._entries.pop(uri, None)
        else:
            self._entries[uri] = list(diagnostics)

    def get(self, uri: str) -> list[Any]:
        return list(self._entries.get(uri, []))

    def clear(self) -> None:
        self._entries.clear()

    def items(self) -> list[tuple[str, list[Any]]]:
        return sorted((uri, list(diagnostics)) for uri, diagnostics in self._entries.items())

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class LanguageClient(Protocol):
    """Connection to the checking service."""

    diagnostics: DiagnosticCollection | None

    async def send_request(self, method: str, params: dict[str, Any]) -> Any:
        ...


class DocumentChecker:
    """Send one ``ltex.checkDocument`` request and interpret the response.

    The client is looked up through ``client_provider`` on every call so the
    checker follows the client being attached or replaced after start-up.
    """

    def __init__(self, client_provider: Callable[[], LanguageClient | None]) -> None:
        self._client_provider = client_provider

    async def check(self, request: CheckRequest) -> CheckResult:
        """Check a single document.

        Raises:
            NotInitializedError: If no language client is attached
        """
        client = self._client_provider()
        if client is None:
            raise NotInitializedError()

        LOGGER.debug("Requesting check of %s", request.document_uri)
        response = await client.send_request(
            EXECUTE_COMMAND_METHOD, request.to_command_params()
        )
        try:
            return CheckResult.model_validate(response)
        except ValidationError as exc:
            LOGGER.warning(
                "Unexpected response to check of %s: %r", request.document_uri, response
            )
            return CheckResult.failure(f"Invalid response from checking service: {exc}")

"""Request/response models exchanged with the checking service.

``CheckRequest`` is what the client sends for a single document and
``CheckResult`` is what comes back. ``Diagnostic`` captures one finding
published by the checker for a document.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

CHECK_DOCUMENT_COMMAND = "ltex.checkDocument"
EXECUTE_COMMAND_METHOD = "workspace/executeCommand"


class CheckRequest(BaseModel):
    """Immutable request to check one document.

    When ``code_language_id`` and ``text`` are omitted the checking service
    reads the document itself.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    document_uri: str
    code_language_id: str | None = None
    text: str | None = None

    @field_validator("document_uri", mode="before")
    def _strip_uri(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("document_uri must not be empty")
        return result

    def to_arguments(self) -> dict[str, str]:
        """Return the wire payload, leaving out fields that were not supplied."""
        args = {"uri": self.document_uri}
        if self.code_language_id is not None:
            args["codeLanguageId"] = self.code_language_id
        if self.text is not None:
            args["text"] = self.text
        return args

    def to_command_params(self) -> dict[str, Any]:
        return {"command": CHECK_DOCUMENT_COMMAND, "arguments": [self.to_arguments()]}


class CheckResult(BaseModel):
    """Outcome of a single check; produced once per request and never retried."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool
    error_message: str | None = Field(default=None, alias="errorMessage")

    @classmethod
    def failure(cls, message: str) -> "CheckResult":
        return cls(success=False, error_message=message)

    def to_response(self) -> dict[str, Any]:
        response: dict[str, Any] = {"success": self.success}
        if self.error_message is not None:
            response["errorMessage"] = self.error_message
        return response


class Diagnostic(BaseModel):
    """One finding reported by the checking service for a document."""

    model_config = ConfigDict(extra="forbid")

    uri: str
    rule_id: str
    message: str
    offset: int = Field(default=0, ge=0)
    length: int = Field(default=0, ge=0)
    replacements: List[str] = Field(default_factory=list)
    matched_text: str = ""
    sentence: str = ""
    context: str = ""

    @field_validator("rule_id", "message", mode="before")
    def _strip_strings(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("replacements", mode="before")
    def _normalise_replacements(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(x) for x in value if str(x).strip()]
        return [str(value)]

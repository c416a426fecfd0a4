"""Document checking: single-document requests, batch runs and the LanguageTool service."""

from __future__ import annotations

from .batch_checker import BatchChecker
from .document_checker import DiagnosticCollection, DocumentChecker, LanguageClient
from .file_extensions import build_glob_pattern, get_enabled_file_extensions

__all__ = [
    "BatchChecker",
    "DiagnosticCollection",
    "DocumentChecker",
    "LanguageClient",
    "build_glob_pattern",
    "get_enabled_file_extensions",
]

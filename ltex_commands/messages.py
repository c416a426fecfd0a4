"""User-facing message templates.

All notifications go through :func:`message` so wording lives in one place.
"""

from __future__ import annotations

MESSAGES = {
    "ltexNotInitialized": "LTeX has not been initialized yet. Please wait a few seconds and try again.",
    "noEditorOpenToCheckDocument": "No editor is open, so no document can be checked.",
    "couldNotCheckDocument": "Could not check document '{0}': {1}",
    "checkingAllDocumentsInWorkspace": "Checking all documents in workspace...",
    "findingAllDocumentsInWorkspace": "Finding all documents in workspace...",
    "checkingDocumentN": "Checking document {0} of {1}: {2}",
    "couldNotCheckDocumentsAsNoFoldersWereOpened": (
        "Could not check documents, as no folders were opened."
    ),
    "couldNotCheckDocumentsAsNoDocumentsWereFound": (
        "Could not check documents, as no documents were found."
    ),
    "invalidValueForConfigurationTarget": "Invalid value '{0}' for ltex.configurationTarget.",
    "couldNotSetConfiguration": "Could not set configuration 'ltex.{0}'.",
    "deprecatedConfigurationTarget": (
        "ltex.configurationTarget.{0} is deprecated, use ltex.configurationTarget.{1} instead."
    ),
    "invalidCommandParameters": "Invalid parameters for command '{0}': {1}",
}


def message(key: str, *args: object) -> str:
    """Format the message template ``key`` with positional ``args``."""
    return MESSAGES[key].format(*args)

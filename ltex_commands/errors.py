from __future__ import annotations

from .models.enums import ConfigurationScope


class LtexCommandError(Exception):
    """Generic failure raised while handling an LTeX command."""


class NotInitializedError(LtexCommandError):
    """Raised when no connection to the checking service exists yet."""

    def __init__(self, message: str = "LTeX has not been initialized yet") -> None:
        super().__init__(message)


class InvalidScopeConfigurationError(LtexCommandError):
    """Raised when ``ltex.configurationTarget`` holds an unrecognised value."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid value for ltex.configurationTarget: '{value}'")
        self.value = value


class ConfigurationWriteRejectedError(LtexCommandError):
    """Raised when a configuration scope refuses a write.

    The setting merger catches this and retries at the next scope in the
    chain, so it only surfaces in logs once every scope has rejected.
    """

    def __init__(
        self,
        key: str,
        scope: ConfigurationScope,
        cause: str,
    ) -> None:
        super().__init__(f"Could not write '{key}' to {scope.value} settings: {cause}")
        self.key = key
        self.scope = scope
        self.cause = cause

"""LanguageTool setup helpers.

One LanguageTool instance is kept per language for the lifetime of the
client. Rules and dictionary words come from the workspace settings on every
check, so instances carry only the server configuration.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import language_tool_python

from .language_tool_patch import apply_post_request_patch

# The LanguageTool default maxCheckTimeMillis aborts long LaTeX documents;
# two minutes covers typical theses and papers.
DEFAULT_SERVER_CONFIG = {
    "requestLimitPeriodInSeconds": 60,
    "maxCheckTimeMillis": 120000,
}

ToolFactory = Callable[..., Any]


class LanguageToolManager:
    """Build and cache LanguageTool instances by language code."""

    def __init__(
        self,
        *,
        config: dict[str, Any] | None = None,
        remote_server: str | None = None,
        tool_factory: ToolFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.config = dict(config) if config is not None else dict(DEFAULT_SERVER_CONFIG)
        self.remote_server = remote_server
        self._tool_factory = tool_factory
        self._tools: dict[str, Any] = {}

    def _build_tool(self, language: str) -> Any:
        if self._tool_factory is not None:
            return self._tool_factory(language)

        apply_post_request_patch()
        kwargs: dict[str, Any] = {}
        if self.remote_server:
            kwargs["remote_server"] = self.remote_server
        elif self.config:
            # Server config only applies to a locally started server
            kwargs["config"] = self.config
        try:
            return language_tool_python.LanguageTool(language, **kwargs)
        except TypeError:
            if "config" not in kwargs:
                raise
            kwargs.pop("config")
            self.logger.info(
                "LanguageTool does not accept 'config'; falling back to default constructor",
            )
            return language_tool_python.LanguageTool(language, **kwargs)

    def get_tool(self, language: str) -> Any:
        """Return the cached tool for ``language``, creating it on first use."""
        tool = self._tools.get(language)
        if tool is None:
            self.logger.info("Starting LanguageTool for language: %s", language)
            tool = self._build_tool(language)
            self._tools[language] = tool
        return tool

    @property
    def languages(self) -> list[str]:
        return sorted(self._tools)

    def close(self) -> None:
        for language, tool in list(self._tools.items()):
            if hasattr(tool, "close"):
                try:
                    tool.close()
                except Exception:
                    self.logger.exception("Failed to close LanguageTool for %s", language)
        self._tools.clear()

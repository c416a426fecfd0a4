from __future__ import annotations

import logging
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget channel for messages shown to the user."""

    def show_error_message(self, message: str) -> None:
        ...

    def show_information_message(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes user messages to the log and remembers them."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER
        self.errors: list[str] = []
        self.infos: list[str] = []

    def show_error_message(self, message: str) -> None:
        self.errors.append(message)
        self.logger.error("%s", message)

    def show_information_message(self, message: str) -> None:
        self.infos.append(message)
        self.logger.info("%s", message)

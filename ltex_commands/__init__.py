"""Command handling for an LTeX-style grammar and spelling checker client."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "cli",
    "checking",
    "command_handler",
    "models",
    "settings",
    "workspace",
]

"""Ordered chain of configuration scopes used for scope fallback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .enums import ConfigurationScope


@dataclass(frozen=True)
class ScopeChain:
    """Immutable, non-empty sequence of scopes, most specific first.

    Attributes:
        scopes: The scopes to try in order (e.g. workspaceFolder, workspace, global)
    """

    scopes: tuple[ConfigurationScope, ...]

    def __post_init__(self) -> None:
        if not self.scopes:
            raise ValueError("ScopeChain must contain at least one scope")

    @classmethod
    def full(cls) -> "ScopeChain":
        return cls(
            (
                ConfigurationScope.WORKSPACE_FOLDER,
                ConfigurationScope.WORKSPACE,
                ConfigurationScope.GLOBAL,
            )
        )

    def __iter__(self) -> Iterator[ConfigurationScope]:
        return iter(self.scopes)

    def __len__(self) -> int:
        return len(self.scopes)

    def __str__(self) -> str:
        return " -> ".join(scope.value for scope in self.scopes)

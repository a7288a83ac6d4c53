"""Per-session explorer context passed explicitly to collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .path_resolver import ConfinementBoundary


@dataclass(frozen=True)
class ExplorerContext:
    """Session-fixed values shared by the resolver, cache and session."""

    boundary: ConfinementBoundary
    show_hidden: bool = True

    @classmethod
    def for_root(
        cls,
        root: Path | str,
        *,
        case_sensitive: bool | None = None,
        show_hidden: bool = True,
    ) -> ExplorerContext:
        return cls(
            boundary=ConfinementBoundary.for_root(root, case_sensitive=case_sensitive),
            show_hidden=show_hidden,
        )

    @property
    def root(self) -> Path:
        return self.boundary.root


__all__ = ["ExplorerContext"]

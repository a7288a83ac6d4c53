"""Public package surface for foldering.

Exports ``main`` for programmatic CLI invocation and the explorer session
types for embedding the tree in other front ends.
"""

from __future__ import annotations

from .context import ExplorerContext
from .session import ExplorerSession


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["ExplorerContext", "ExplorerSession", "main"]

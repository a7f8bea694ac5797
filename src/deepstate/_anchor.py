"""Root anchor: the context shared by every wrapper of one state tree.

A root is created once per create_reactive() call. Every ReactiveProxy derived
from that root, at any depth, holds the same Anchor, so the observer, the
mutation log and the write lock are reached by reference instead of being
re-registered per level or kept in module globals.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any, Callable

from deepstate.history import MutationLog

# ID generation: itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


class Anchor:
    """Observer, optional log and lock for one root."""

    __slots__ = ("id", "observer", "log", "full_paths", "lock")

    def __init__(
        self,
        observer: Callable[[Any, Any], None],
        *,
        track_history: bool = True,
        full_paths: bool = False,
    ) -> None:
        self.id = new_id()
        self.observer = observer
        self.log: MutationLog | None = MutationLog() if track_history else None
        self.full_paths = full_paths
        # Re-entrant: an observer may write back into the same tree.
        self.lock = threading.RLock()

    def qualify(self, path: tuple, name: Any) -> str:
        """Log path for a write of `name` on the node at `path`."""
        if self.full_paths:
            return ".".join(str(part) for part in (*path, name))
        if path:
            return f"nested.{name}"
        return str(name)

    def __repr__(self) -> str:
        history = "history" if self.log is not None else "no history"
        return f"Anchor({self.id}, {history})"

"""Mutation history: an append-only, write-ordered log of state changes.

Every wrapper derived from one root appends to the same MutationLog before
the observer fires. Snapshots are independent tuples, so entries recorded
after a snapshot is taken never show up in it.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@dataclass(frozen=True)
class MutationEntry:
    """One write: where it happened, what it replaced, what it stored, and when.

    `sequence` is the entry's position in its log. Timestamps can repeat for
    writes landing in the same microsecond; sequence never does.
    """
    property: str
    old_value: Any
    new_value: Any
    timestamp: str
    sequence: int

    def to_dict(self) -> Dict:
        """Export using the camelCase field names of the log format."""
        return {
            "property": self.property,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "timestamp": self.timestamp,
            "sequence": self.sequence,
        }


class MutationLog:
    """Append-only list of MutationEntry, shared by reference across a tree."""

    __slots__ = ("_entries", "_counter", "_lock")

    def __init__(self) -> None:
        self._entries: list[MutationEntry] = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def record(self, path: str, old_value: Any, new_value: Any) -> MutationEntry:
        """Append an entry for one write and return it."""
        with self._lock:
            entry = MutationEntry(
                property=path,
                old_value=old_value,
                new_value=new_value,
                timestamp=_now(),
                sequence=next(self._counter),
            )
            self._entries.append(entry)
        return entry

    def snapshot(self) -> tuple[MutationEntry, ...]:
        """Copy of the log as it stands now."""
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MutationLog({len(self._entries)} entries)"

"""deepstate: deep reactive state for Python: one observer, lazy nested wrapping, mutation history."""

from importlib.metadata import version as _version

__version__ = _version("deepstate")

from deepstate.errors import InvalidArgument
from deepstate.history import MutationEntry, MutationLog
from deepstate.reactive import (
    ReactiveProxy,
    ReactiveHandle,
    HistoryHandle,
    create_reactive,
    is_structured,
    raw,
)

__all__ = [
    "ReactiveProxy",
    "ReactiveHandle",
    "HistoryHandle",
    "create_reactive",
    "is_structured",
    "raw",
    "MutationEntry",
    "MutationLog",
    "InvalidArgument",
]

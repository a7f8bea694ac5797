"""Reactive proxies: transparent interception over a nested state tree.

create_reactive() wraps a structured value (mapping, list, or plain object)
in a ReactiveProxy. Reads go straight to the underlying node; any structured
value read back is wrapped in a fresh proxy on the way out, so reactivity
reaches nested nodes lazily, only when they are actually visited. Writes
assign on the underlying node, append to the root's mutation log (when
history is on), then call the root's observer, all before returning.

The tree is never copied. A proxy is a thin handle: (node, anchor, path).
Every proxy derived from one root shares that root's Anchor.

Usage:
    seen = []
    h = create_reactive({"user": {"name": "Alice"}}, lambda k, v: seen.append((k, v)))
    h.proxy.user.name = "Bob"
    # seen == [("name", "Bob")]
    # h.get_state_history()[0].property == "nested.name"
"""

from __future__ import annotations

import enum
import logging
import numbers
from collections.abc import Mapping, MutableSequence
from types import ModuleType
from typing import Any, Callable, Iterator

from deepstate._anchor import Anchor
from deepstate.errors import InvalidArgument
from deepstate.history import MutationEntry

logger = logging.getLogger("deepstate.reactive")

Observer = Callable[[Any, Any], None]


def _declares_slots(cls: type) -> bool:
    return any(vars(klass).get("__slots__") for klass in cls.__mro__[:-1])


def is_structured(value: Any) -> bool:
    """Can this value be wrapped? Mappings, lists and attribute-bearing objects can.

    Attribute-bearing means an instance `__dict__` or non-empty `__slots__`
    somewhere in the class hierarchy, so slotted dataclasses count.
    """
    if value is None or isinstance(value, ReactiveProxy):
        return False
    if isinstance(value, (Mapping, MutableSequence)):
        return True
    if isinstance(value, (type, ModuleType, enum.Enum, numbers.Number)) or callable(value):
        return False
    return hasattr(value, "__dict__") or _declares_slots(type(value))


def raw(value: Any) -> Any:
    """The underlying node behind a proxy. Non-proxies pass through."""
    if isinstance(value, ReactiveProxy):
        return value._node
    return value


class ReactiveProxy:
    """Interception layer over one node of a state tree.

    Supports three access styles over the same node:
        proxy.get("count") / proxy.set("count", 1)
        proxy["count"] / proxy["count"] = 1
        proxy.count / proxy.count = 1

    Attribute style resolves the proxy's own methods first, so keys named
    get, set, keys, values or items are only reachable by index or get().
    On mapping and list nodes attributes are state keys only, so the node's
    own methods (append, update, ...) are unreachable; mutate through
    indexing. On object nodes attributes are forwarded as-is, so calling a
    node method mutates without notifying.
    """

    __slots__ = ("_node", "_anchor", "_path")

    def __init__(self, node: Any, anchor: Anchor, path: tuple = ()) -> None:
        object.__setattr__(self, "_node", node)
        object.__setattr__(self, "_anchor", anchor)
        object.__setattr__(self, "_path", path)

    def _keyed(self) -> bool:
        return isinstance(self._node, (Mapping, MutableSequence))

    def _wrap(self, name: Any, value: Any) -> Any:
        if is_structured(value):
            return ReactiveProxy(value, self._anchor, (*self._path, name))
        return value

    def _read(self, name: Any) -> Any:
        if self._keyed():
            return self._node[name]
        return getattr(self._node, name)

    def _lookup(self, name: Any, default: Any) -> Any:
        node = self._node
        if isinstance(node, Mapping):
            return node.get(name, default)
        if isinstance(node, MutableSequence):
            try:
                return node[name]
            except (IndexError, TypeError):
                return default
        return getattr(node, name, default)

    def _assign(self, name: Any, value: Any) -> None:
        if self._keyed():
            self._node[name] = value
        else:
            setattr(self._node, name, value)

    # --- Read interception ---

    def get(self, name: Any, default: Any = None) -> Any:
        """Read a property. Absent properties yield `default` instead of raising."""
        return self._wrap(name, self._lookup(name, default))

    def __getitem__(self, name: Any) -> Any:
        return self._wrap(name, self._read(name))

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: slots unset, dunders, or state keys.
        if name.startswith("__") or name in ReactiveProxy.__slots__:
            raise AttributeError(name)
        node = self._node
        if isinstance(node, Mapping):
            try:
                value = node[name]
            except KeyError:
                raise AttributeError(name) from None
        elif isinstance(node, MutableSequence):
            raise AttributeError(name)
        else:
            value = getattr(node, name)
        return self._wrap(name, value)

    def __len__(self) -> int:
        return len(self._node)

    def __iter__(self) -> Iterator:
        node = self._node
        if isinstance(node, MutableSequence):
            return (self._wrap(index, value) for index, value in enumerate(node))
        return iter(node)

    def __contains__(self, item: Any) -> bool:
        return raw(item) in self._node

    def __bool__(self) -> bool:
        return bool(self._node)

    def _pairs(self):
        node = self._node
        if isinstance(node, Mapping):
            return node.items()
        if isinstance(node, MutableSequence):
            return enumerate(node)
        raise TypeError(f"{type(node).__name__} node has no keys or items")

    def keys(self):
        return [key for key, _ in self._pairs()]

    def values(self) -> list:
        return [self._wrap(key, value) for key, value in self._pairs()]

    def items(self) -> list:
        return [(key, self._wrap(key, value)) for key, value in self._pairs()]

    # --- Write interception ---

    def set(self, name: Any, value: Any) -> None:
        """Assign, record, then notify. Every call notifies, even for an unchanged value."""
        value = raw(value)
        anchor = self._anchor
        with anchor.lock:
            log = anchor.log
            old_value = self._lookup(name, None) if log is not None else None
            self._assign(name, value)
            path = anchor.qualify(self._path, name)
            if log is not None:
                log.record(path, old_value, value)
            logger.debug("Root %d: set %s = %r", anchor.id, path, value)
            anchor.observer(name, value)

    def __setitem__(self, name: Any, value: Any) -> None:
        self.set(name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ReactiveProxy.__slots__:
            raise AttributeError(f"{name} is read-only on ReactiveProxy")
        if isinstance(self._node, MutableSequence):
            raise AttributeError(f"cannot set attribute {name!r} on a list node")
        self.set(name, value)

    def __delitem__(self, name: Any) -> None:
        raise TypeError("deletion is not intercepted; use raw(proxy)")

    def __delattr__(self, name: str) -> None:
        raise TypeError("deletion is not intercepted; use raw(proxy)")

    # --- Identity ---

    def __eq__(self, other: object) -> bool:
        return self._node == raw(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ReactiveProxy({self._node!r})"


class ReactiveHandle:
    """The root proxy of one reactive state tree."""

    __slots__ = ("proxy",)

    def __init__(self, proxy: ReactiveProxy) -> None:
        self.proxy = proxy

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.proxy._anchor.id})"


class HistoryHandle(ReactiveHandle):
    """ReactiveHandle whose tree records every write. Adds get_state_history()."""

    __slots__ = ()

    def get_state_history(self) -> tuple[MutationEntry, ...]:
        """Snapshot of the mutation log. Later writes never change it."""
        return self.proxy._anchor.log.snapshot()


def create_reactive(
    initial_state: Any,
    on_change: Observer,
    *,
    track_history: bool = True,
    full_paths: bool = False,
) -> ReactiveHandle:
    """Wrap initial_state so every write through it calls on_change(name, value).

    With track_history (the default) the result is a HistoryHandle. Without it,
    the handle has no get_state_history at all.

    full_paths records log paths as "user.address.city" instead of the
    compatible default, which names every non-root write "nested.<name>"
    whatever its depth.

    Raises InvalidArgument for a non-structured initial_state or a
    non-callable on_change. Nothing is allocated in that case.
    """
    initial_state = raw(initial_state)
    if not is_structured(initial_state):
        raise InvalidArgument("Initial state must be a non-null object.")
    if not callable(on_change):
        raise InvalidArgument("Callback must be a function.")

    anchor = Anchor(on_change, track_history=track_history, full_paths=full_paths)
    logger.debug(
        "Created root %d over %s (history=%s, full_paths=%s)",
        anchor.id, type(initial_state).__name__, track_history, full_paths,
    )
    proxy = ReactiveProxy(initial_state, anchor)
    if track_history:
        return HistoryHandle(proxy)
    return ReactiveHandle(proxy)

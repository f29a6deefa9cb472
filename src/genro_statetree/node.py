# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ModelNode - composable views over a single shared Store.

Nodes form a tree. Only the root's Store is live: every other node reads and
writes the slice of the root value found at its own path, so attaching a node
under a parent makes it operate on ``root value[parent path][key]``.

A node belongs to at most one parent. Attaching it somewhere else first
detaches it from where it was, and evicts any node already mounted at the
target key. Detaching turns the node into the root of its own tree, with a
fresh, empty Store: data written while it was attached stays in the old
root's value and is not copied along.

Nodes also carry a small event system: listeners per event type, and
dispatch_event() bubbling from the target up through the ancestors.

Example:
    >>> root = ModelNode()
    >>> todo = ModelNode()
    >>> root.attach_child('todo', todo)
    >>> todo.set('items.0.name', 'milk')
    >>> root.get('todo.items.0.name')
    'milk'
    >>> todo.path
    ('todo',)
"""

from __future__ import annotations

import logging
import warnings
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

from .deep import ABSENT
from .event import Event, EventPhase
from .exceptions import (
    InvalidArgumentError,
    InvalidChildError,
    InvalidKeyError,
    NotRootError,
)
from .path import Path, PathLike, format_path, parse_path
from .scheduling import Scheduler
from .store import Store, SubscriberCallback

logger = logging.getLogger(__name__)

Listener = Callable[[Event], Any]


class ModelNode:
    """A node in a state tree.

    Each node has:
    - key: Its key in the parent's children (None for the root)
    - parent: The parent node (None for the root)
    - root: The root of its tree (itself for the root)
    - path: Tuple of keys from the root down to this node
    - children: Read-only mapping of key -> child node

    Data access (has/get/set/delete and the *_value variants) is always
    relative to the node's path and goes through the root's Store.

    Subclass it to attach behaviour to a slice of state::

        class TodoModel(ModelNode):
            def add(self, name):
                self.set(['items', len(self.get('items', ()))], {'name': name})
    """

    __slots__ = (
        '_key', '_parent', '_children', '_listeners', '_path', '_root', '_store',
    )

    def __init__(self, value: Any = ABSENT, *, scheduler: Scheduler | None = None) -> None:
        """Initialize a ModelNode.

        Args:
            value: Deprecated initial value. Construct the node empty and call
                set_value() instead.
            scheduler: Optional callable deferring notifications to the next
                microtask boundary (see ``scheduling.call_soon``).
        """
        self._key: str | None = None
        self._parent: ModelNode | None = None
        self._children: dict[str, ModelNode] = {}
        self._listeners: dict[str, dict[Listener, None]] = {}
        self._path: Path = ()
        self._root: ModelNode = self
        self._store = Store(scheduler)
        if value is not ABSENT:
            warnings.warn(
                'Initializing value on construction is deprecated. '
                'Set value after construction.',
                DeprecationWarning,
                stacklevel=2,
            )
            self.set_value(value)

    def __repr__(self) -> str:
        if self._parent is None:
            return f"{type(self).__name__}(root, children={list(self._children)})"
        return f"{type(self).__name__}(path={format_path(self._path)!r})"

    # ==================== Identity ====================

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def parent(self) -> ModelNode | None:
        return self._parent

    @property
    def root(self) -> ModelNode:
        return self._root

    @property
    def path(self) -> Path:
        """Tuple of keys locating this node from the root (() for the root)."""
        return self._path

    @property
    def depth(self) -> int:
        """Depth of this node in its tree (root=0)."""
        return len(self._path)

    def is_root(self) -> bool:
        return self._parent is None

    def resolve_path(self, path: PathLike) -> Path:
        """Return the absolute key tuple for a path relative to this node.

        Raises:
            InvalidPathError: If path is None or malformed.
        """
        return self._path + parse_path(path)

    # ==================== Data access ====================

    @property
    def _live_store(self) -> Store:
        return self._root._store

    @property
    def value(self) -> Any:
        """Convenience accessor, same as get_value() / set_value()."""
        return self.get_value()

    @value.setter
    def value(self, value: Any) -> None:
        self.set_value(value)

    def has_value(self) -> bool:
        """Strict check for a value at this node (a stored None counts)."""
        return self._live_store.has(self._path)

    def get_value(self) -> Any:
        """Return the value at this node, or ABSENT."""
        return self._live_store.get(self._path)

    def set_value(self, value: Any) -> None:
        """Replace the value at this node."""
        self._live_store.set(self._path, value)

    def delete_value(self) -> None:
        """Remove the value at this node. No-op if there is none."""
        self._live_store.remove(self._path)

    def has(self, path: PathLike) -> bool:
        """Check if a key exists at path, relative to this node."""
        return self._live_store.has(self.resolve_path(path))

    def get(self, path: PathLike, default: Any = ABSENT) -> Any:
        """Return the value at path relative to this node, or default."""
        return self._live_store.get(self.resolve_path(path), default)

    def set(self, path: PathLike, value: Any) -> None:
        """Set value at path relative to this node, creating missing containers."""
        self._live_store.set(self.resolve_path(path), value)

    def delete(self, path: PathLike) -> None:
        """Delete the key at path relative to this node. No-op if absent."""
        self._live_store.remove(self.resolve_path(path))

    def subscribe(self, callback: SubscriberCallback) -> None:
        """Subscribe to changes of the whole tree value (root only).

        Latest subscriber wins. The callback runs immediately with
        (ABSENT, current value), then once per coalesced burst of changes.

        Raises:
            NotRootError: If this node is not the root.
            InvalidArgumentError: If callback is not callable.
        """
        if self._parent is not None:
            raise NotRootError('Subscriptions are not allowed on children.')
        self._store.subscribe(callback)

    # ==================== Children ====================

    @staticmethod
    def _check_key(key: Any) -> None:
        if not isinstance(key, str):
            raise InvalidKeyError('Child keys must be strings.')

    @property
    def children(self) -> Mapping[str, ModelNode]:
        """Read-only view of the direct children, in attachment order."""
        return MappingProxyType(self._children)

    def has_child(self, key: str) -> bool:
        self._check_key(key)
        return key in self._children

    def get_child(self, key: str) -> ModelNode | None:
        """Return the child mounted at key, or None."""
        self._check_key(key)
        return self._children.get(key)

    def attach_child(self, key: str, child: ModelNode) -> None:
        """Mount child at key.

        The child is first detached from its current parent, and any other
        node mounted at key is detached. Paths and roots of the whole moved
        subtree are recomputed.

        Raises:
            InvalidKeyError: If key is not a string.
            InvalidChildError: If child is not a ModelNode, or is this node
                or one of its ancestors.
        """
        self._check_key(key)
        if not isinstance(child, ModelNode):
            raise InvalidChildError('Child must inherit from "ModelNode".')
        if self._children.get(key) is child:
            return
        node: ModelNode | None = self
        while node is not None:
            if node is child:
                raise InvalidChildError('Cannot attach a node under itself or its descendants.')
            node = node._parent

        child.detach()
        self.detach_child(key)
        self._children[key] = child
        child._key = key
        child._parent = self
        child._relocate()
        logger.debug("Attached %r", child)

    def detach_child(self, key: str) -> None:
        """Unmount the child at key, making it the root of its own tree.

        The detached node gets a fresh, empty Store. No-op if nothing is
        mounted at key.

        Raises:
            InvalidKeyError: If key is not a string.
        """
        self._check_key(key)
        child = self._children.pop(key, None)
        if child is None:
            return
        logger.debug("Detaching %r", child)
        child._key = None
        child._parent = None
        child._store = Store(child._store.scheduler)
        child._relocate()

    def attach(self, key: str, parent: ModelNode) -> None:
        """Mount this node into parent at key (mirror of attach_child).

        Raises:
            InvalidKeyError: If key is not a string.
            InvalidChildError: If parent is not a ModelNode.
        """
        self._check_key(key)
        if not isinstance(parent, ModelNode):
            raise InvalidChildError('Parent must inherit from "ModelNode".')
        parent.attach_child(key, self)

    def detach(self) -> None:
        """Unmount this node from its parent. No-op for a root."""
        if self._parent is not None:
            self._parent.detach_child(self._key)

    def _relocate(self) -> None:
        """Recompute path and root for this node and all its descendants."""
        parent = self._parent
        if parent is None:
            self._path = ()
            self._root = self
        else:
            self._path = parent._path + (self._key,)
            self._root = parent._root
        for child in self._children.values():
            child._relocate()

    def iter_children(self) -> Iterator[tuple[str, ModelNode]]:
        """Yield (key, child) pairs in attachment order."""
        yield from self._children.items()

    def walk(self) -> Iterator[tuple[Path, ModelNode]]:
        """Yield (relative path, node) for every descendant, depth-first.

        Example:
            >>> for path, node in root.walk():
            ...     print(path, node)
        """
        def _walk_gen(node: ModelNode, prefix: Path) -> Iterator[tuple[Path, ModelNode]]:
            for key, child in node._children.items():
                path = prefix + (key,)
                yield path, child
                yield from _walk_gen(child, path)

        return _walk_gen(self, ())

    # ==================== Events ====================

    @staticmethod
    def _check_listener_args(type: Any, callback: Any, extra: tuple, options: dict) -> None:
        if extra or options:
            raise InvalidArgumentError('Expected exactly two arguments.')
        if not isinstance(type, str):
            raise InvalidArgumentError('Expected "type" argument to be a "str".')
        if not callable(callback):
            raise InvalidArgumentError('Expected "callback" argument to be callable.')

    def add_event_listener(self, type: str, callback: Listener, *args: Any, **kwargs: Any) -> None:
        """Register callback for events of the given type on this node.

        Only the two-argument form is accepted: there are no capture, once or
        passive options. Registering the same callback twice keeps one entry.

        Raises:
            InvalidArgumentError: On a non-str type, a non-callable callback,
                or any extra argument.
        """
        self._check_listener_args(type, callback, args, kwargs)
        self._listeners.setdefault(type, {})[callback] = None

    def remove_event_listener(self, type: str, callback: Listener, *args: Any, **kwargs: Any) -> None:
        """Unregister callback. No-op if it was not registered.

        Raises:
            InvalidArgumentError: Same rules as add_event_listener().
        """
        self._check_listener_args(type, callback, args, kwargs)
        listeners = self._listeners.get(type)
        if listeners is None:
            return
        listeners.pop(callback, None)
        if not listeners:
            del self._listeners[type]

    def dispatch_event(self, event: Event) -> None:
        """Dispatch event on this node and bubble it up through the ancestors.

        At each node current_target is set to that node and its listeners for
        event.type run in registration order. The event moves on to the
        parent only if it bubbles, is composed, and propagation was not
        stopped.

        Raises:
            InvalidArgumentError: If event is not an Event, or was already
                dispatched.
        """
        if not isinstance(event, Event):
            raise InvalidArgumentError('Expected "event" argument to be an "Event".')
        if event._phase is not EventPhase.CREATED:
            raise InvalidArgumentError('Events cannot be dispatched more than once.')

        event._target = self
        event._phase = EventPhase.DISPATCHING
        try:
            node: ModelNode | None = self
            while node is not None:
                event._current_target = node
                node._invoke_listeners(event)
                if not (event.bubbles and event.composed) or event._stop_propagation:
                    break
                node = node._parent
        finally:
            event._current_target = None
            event._phase = EventPhase.SETTLED

    def _invoke_listeners(self, event: Event) -> None:
        listeners = self._listeners.get(event.type)
        if not listeners:
            return
        for callback in list(listeners):
            if event._stop_immediate_propagation:
                break
            # Skip listeners removed by an earlier listener of this dispatch.
            if callback in listeners:
                callback(event)

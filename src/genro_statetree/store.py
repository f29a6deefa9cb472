# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Store - single-slot container for an immutable, path-addressable value.

A Store holds at most one value. Every write computes a new top-level value
with the deep operations, freezes it, swaps it in with a single assignment
and schedules a debounced notification. Readers therefore always observe a
complete snapshot, old or new.

Notifications are coalesced: any number of writes in the same synchronous
turn produce one callback, fired at the next microtask boundary, carrying the
value before the first write and the value after the last one.

Example:
    >>> store = Store()
    >>> store.subscribe(lambda old, new: print(old, dict(new or {})))
    ABSENT {}
    >>> store.set('a', 1)
    >>> store.set('b', 2)
    >>> scheduling.flush()
    ABSENT {'a': 1, 'b': 2}
    1
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from . import deep
from .deep import ABSENT
from .exceptions import InvalidArgumentError
from .path import PathLike
from .scheduling import Scheduler, call_soon

logger = logging.getLogger(__name__)

SubscriberCallback = Callable[[Any, Any], Any]


def _noop(old_value: Any, new_value: Any) -> None:
    pass


class Store:
    """A single-slot value container with debounced change notification.

    Store provides:
    - has_value() / get_value() / set_value(v) / remove_value(): whole value
    - has(path) / get(path) / set(path, v) / remove(path): path-relative
    - subscribe(callback): latest subscriber wins
    - invalidate(): schedule a coalesced notification

    The empty path () addresses the whole value, so has(), get() and remove()
    without arguments behave like their *_value counterparts.

    Attributes:
        scheduler: Callable used to defer notifications to the next
            microtask boundary (defaults to ``scheduling.call_soon``).
    """

    __slots__ = ('_value', '_callback', '_pending', 'scheduler')

    def __init__(self, scheduler: Scheduler | None = None) -> None:
        self._value: Any = ABSENT
        self._callback: SubscriberCallback = _noop
        self._pending = False
        self.scheduler: Scheduler = scheduler or call_soon

    def __repr__(self) -> str:
        return f"Store({self._value!r})"

    @property
    def value(self) -> Any:
        """The stored value, or ABSENT."""
        return self._value

    @property
    def is_pending(self) -> bool:
        """True while a notification is scheduled but not yet delivered."""
        return self._pending

    # ==================== Whole value ====================

    def has_value(self) -> bool:
        """Strict check for existence (a stored None counts)."""
        return self._value is not ABSENT

    def get_value(self) -> Any:
        """Return the stored value, or ABSENT."""
        return self._value

    def set_value(self, value: Any) -> None:
        """Replace the whole stored value."""
        self._commit(value)

    def remove_value(self) -> None:
        """Unset the stored value. No-op if there is none."""
        self._commit(ABSENT)

    # ==================== Path access ====================

    def has(self, path: PathLike = ()) -> bool:
        """Check if a key exists at path."""
        return deep.has(self._value, path)

    def get(self, path: PathLike = (), default: Any = ABSENT) -> Any:
        """Return the value at path, or default."""
        return deep.get(self._value, path, default)

    def set(self, path: PathLike, value: Any) -> None:
        """Set value at path, creating missing containers."""
        self._commit(deep.set(self._value, path, value))

    def remove(self, path: PathLike = ()) -> None:
        """Remove the key at path. No-op if it does not exist."""
        self._commit(deep.delete(self._value, path))

    def _commit(self, new_value: Any) -> None:
        """Freeze and store new_value, then schedule a notification.

        Skipped entirely when new_value is the current value.
        """
        if new_value is self._value:
            return
        if new_value is not ABSENT:
            new_value = deep.freeze(new_value)
        self.invalidate()
        self._value = new_value

    # ==================== Subscription ====================

    def subscribe(self, callback: SubscriberCallback) -> None:
        """Subscribe to changes, replacing any previous subscriber.

        The callback is invoked immediately with (ABSENT, current value), then
        once per coalesced burst of changes with (old value, new value).

        Raises:
            InvalidArgumentError: If callback is not callable.
        """
        if not callable(callback):
            raise InvalidArgumentError("Subscribe callback must be callable.")
        self._callback = callback
        callback(ABSENT, self._value)

    def invalidate(self) -> None:
        """Schedule a notification unless one is already pending.

        The value at scheduling time is captured as the old value; the new
        value is read when the notification is delivered.
        """
        if self._pending:
            return
        old_value = self._value
        self._pending = True
        self.scheduler(lambda: self._notify(old_value))

    def _notify(self, old_value: Any) -> None:
        self._pending = False
        logger.debug("Notifying subscriber of %r", self)
        self._callback(old_value, self._value)

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Non-mutating deep operations over JSON-like values.

Values are scalars, sequences (any ``Sequence`` except str/bytes) and
mappings (any ``Mapping`` with string keys). None of the functions in this
module mutate their inputs: ``set`` and ``delete`` return a new top-level
value, copying only the containers along the edited path and sharing every
other subtree by reference.

Key Features:
    - **Presence, not truthiness**: ``has`` is True for keys holding None
    - **Idempotence**: setting the identical object, or deleting an absent
      key, returns the original top-level value unchanged
    - **Container inference**: a missing intermediate becomes a list when the
      next key is an int, a dict otherwise
    - **Freezing**: ``freeze`` returns an immutable equivalent
      (FrozenMap / FrozenList), reusing already-frozen subtrees

Example:
    >>> value = set({}, 'a.0.b', 1)
    >>> value
    {'a': [{'b': 1}]}
    >>> delete(value, 'a.0.b')
    {'a': [{}]}
    >>> get(value, 'a.1', 'nope')
    'nope'
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from .exceptions import InvalidPathError
from .path import Key, Path, PathLike, parse_path

__all__ = [
    'ABSENT', 'FrozenList', 'FrozenMap',
    'clone', 'delete', 'equal', 'freeze', 'get', 'has', 'set',
]


class _Absent:
    """Marker for 'no value here' (distinct from None)."""

    __slots__ = ()
    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'ABSENT'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return 'ABSENT'


ABSENT = _Absent()

_STRINGS = (str, bytes, bytearray)


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, _STRINGS)


def is_container(value: Any) -> bool:
    return is_mapping(value) or is_sequence(value)


class FrozenMap(Mapping):
    """Read-only mapping produced by ``freeze``.

    The constructor copies its source into a private dict and freezes every
    item, so an instance never shares mutable state with its caller. This is
    what lets ``freeze`` return a FrozenMap by reference without looking
    inside it. A ``MappingProxyType`` gives no such guarantee: whoever holds
    the dict behind it can still change it.
    """

    __slots__ = ('_data',)

    def __init__(self, source: Any = ()) -> None:
        items = source.items() if is_mapping(source) else source
        self._data = MappingProxyType({key: freeze(item) for key, item in items})

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenMap({dict(self._data)!r})"


class FrozenList(tuple):
    """Tuple produced by ``freeze``: every item is frozen on construction."""

    __slots__ = ()

    def __new__(cls, source: Any = ()) -> FrozenList:
        return super().__new__(cls, [freeze(item) for item in source])


def _keys(path: PathLike) -> Path:
    if path is None:
        raise InvalidPathError("Path is required")
    return parse_path(path)


def _lookup(container: Any, key: Key) -> Any:
    """Return container[key], or ABSENT if the key is not present."""
    if is_mapping(container):
        key = str(key) if isinstance(key, int) else key
        if key in container:
            return container[key]
        return ABSENT
    if is_sequence(container) and isinstance(key, int):
        if 0 <= key < len(container):
            return container[key]
    return ABSENT


def _new_container(key: Key) -> list | dict:
    return [] if isinstance(key, int) else {}


def _assign(container: list | dict, key: Key, value: Any) -> None:
    """Set key on a freshly copied (mutable) container."""
    if isinstance(container, dict):
        container[str(key) if isinstance(key, int) else key] = value
        return
    if not isinstance(key, int) or key < 0:
        raise InvalidPathError(f"Cannot address a sequence with key {key!r}")
    if key < len(container):
        container[key] = value
    else:
        container.extend([None] * (key - len(container)))
        container.append(value)


def _remove(container: list | dict, key: Key) -> None:
    if isinstance(container, dict):
        del container[str(key) if isinstance(key, int) else key]
    else:
        del container[key]


# ==================== Queries ====================

def has(value: Any, path: PathLike) -> bool:
    """Check if a key exists at path (presence, not truthiness).

    Args:
        value: The top-level value to inspect.
        path: Path expression (see ``parse_path``). The empty path checks the
            top-level value itself.

    Returns:
        True if every key along the path exists.

    Raises:
        InvalidPathError: If path is None or malformed.
    """
    keys = _keys(path)
    if not keys:
        return value is not ABSENT
    reference = value
    for key in keys:
        reference = _lookup(reference, key)
        if reference is ABSENT:
            return False
    return True


def get(value: Any, path: PathLike, default: Any = ABSENT) -> Any:
    """Get the value at path.

    Args:
        value: The top-level value to read from.
        path: Path expression. The empty path returns value itself.
        default: Returned when any key along the path is missing, or when
            the addressed value is ABSENT.

    Returns:
        The value found at path, or default.
    """
    keys = _keys(path)
    reference = value
    for key in keys:
        reference = _lookup(reference, key)
        if reference is ABSENT:
            break
    return default if reference is ABSENT else reference


# ==================== Updates ====================

def set(value: Any, path: PathLike, new_value: Any) -> Any:
    """Return a copy of value with new_value installed at path.

    Only the containers along the path are copied (shallowly); siblings keep
    their original references. Missing or scalar intermediates are replaced by
    a list (next key is an int) or a dict.

    If the object already at path *is* new_value, value is returned as is.

    A sequence index past the end pads the gap with None. The padding is
    allocated eagerly, so index n costs a list of n + 1 items.

    Raises:
        InvalidPathError: If path is None, malformed, or uses a string key to
            address an existing sequence.
    """
    keys = _keys(path)
    if not keys:
        return new_value

    if _lookup(get(value, keys[:-1]), keys[-1]) is new_value:
        return value

    top = clone(value, shallow=True) if is_container(value) else _new_container(keys[0])
    reference = top
    for i, key in enumerate(keys[:-1]):
        child = _lookup(reference, key)
        if is_container(child):
            child = clone(child, shallow=True)
        else:
            child = _new_container(keys[i + 1])
        _assign(reference, key, child)
        reference = child
    _assign(reference, keys[-1], new_value)
    return top


def delete(value: Any, path: PathLike) -> Any:
    """Return a copy of value with the key at path removed.

    Deleting a key that does not exist returns value itself. Deleting the
    empty path yields ABSENT. Removing a sequence slot shifts the following
    items down, as ``del list[i]`` does.
    """
    keys = _keys(path)
    if not has(value, keys):
        return value
    if not keys:
        return ABSENT

    top = clone(value, shallow=True)
    reference = top
    for key in keys[:-1]:
        child = clone(_lookup(reference, key), shallow=True)
        _assign(reference, key, child)
        reference = child
    _remove(reference, keys[-1])
    return top


# ==================== Copies and freezing ====================

def clone(value: Any, shallow: bool = False) -> Any:
    """Copy value into mutable containers (dict/list).

    Args:
        value: Any value; scalars are returned unchanged.
        shallow: If True, copy only the top level.
    """
    if is_mapping(value):
        if shallow:
            return dict(value)
        return {key: clone(item) for key, item in value.items()}
    if is_sequence(value):
        if shallow:
            return list(value)
        return [clone(item) for item in value]
    return value


def freeze(value: Any) -> Any:
    """Return an immutable equivalent of value.

    Mappings become FrozenMap, sequences become FrozenList, recursively.
    FrozenMap and FrozenList instances are returned by reference without
    being visited. Refreezing an edited value therefore only walks the
    containers copied since the last freeze. Any other container is copied,
    read-only views and plain tuples included.
    """
    if isinstance(value, (FrozenMap, FrozenList)):
        return value
    if is_mapping(value):
        return FrozenMap(value)
    if is_sequence(value):
        return FrozenList(value)
    return value


def is_frozen(value: Any) -> bool:
    """True if value is a scalar or a container built by ``freeze``."""
    if isinstance(value, (FrozenMap, FrozenList)):
        return True
    return not is_container(value)


# ==================== Comparison ====================

def equal(a: Any, b: Any) -> bool:
    """Structural equality.

    Identical objects are equal. Two mappings are equal when they have the
    same keys and pairwise equal values (order is ignored); two sequences
    when they have the same length and pairwise equal items, regardless of
    list/tuple. Scalars compare with ``==``. Cyclic values are not supported.
    """
    if a is b:
        return True
    if is_mapping(a) and is_mapping(b):
        if len(a) != len(b):
            return False
        for key, item in a.items():
            if key not in b or not equal(item, b[key]):
                return False
        return True
    if is_sequence(a) and is_sequence(b):
        return len(a) == len(b) and all(equal(x, y) for x, y in zip(a, b))
    if is_container(a) or is_container(b):
        return False
    return a == b

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path parsing for StateTree.

A path is a tuple of keys locating a value inside nested containers. Each key
is either a non-negative integer (sequence index) or a string (mapping key).

Path Syntax:
    - Dotted strings: 'a.0.b' -> ('a', 0, 'b')
    - Integer literals become integer keys: 'one.two.3' -> ('one', 'two', 3)
    - The empty string is a one-key path: '' -> ('',)
    - A bare integer is a one-key path: 3 -> (3,)
    - Pre-parsed lists/tuples pass through as tuples, untouched:
      ['b.a.r', 0] -> ('b.a.r', 0)

Parsed string paths are cached for the lifetime of the process. The cache is
not guarded by a lock: StateTree assumes a single-threaded event loop.

Example:
    >>> parse_path('a.0.b')
    ('a', 0, 'b')
    >>> parse_path(['x', 1])
    ('x', 1)
"""

from __future__ import annotations

from typing import Union

from .exceptions import InvalidPathError

Key = Union[str, int]
Path = tuple[Key, ...]
PathLike = Union[str, int, list, tuple]

_path_cache: dict[str, Path] = {}


def _is_key(key: object) -> bool:
    """True if key is a str or a (non-bool) int."""
    if isinstance(key, bool):
        return False
    return isinstance(key, (str, int))


def _parse_segment(segment: str) -> Key:
    """Canonicalize a non-negative integer literal to an int key.

    Only canonical literals are converted ('3' but not '03', '+3' or '-3'),
    so that str(int(segment)) == segment always holds.
    """
    if segment.isdigit() and segment.isascii():
        index = int(segment)
        if str(index) == segment:
            return index
    return segment


def parse_path(path: PathLike) -> Path:
    """Parse a path expression into a tuple of keys.

    Args:
        path: Dotted string, int, or list/tuple of str/int keys.

    Returns:
        Tuple of keys. String inputs are memoized, so parsing the same string
        twice returns the same tuple.

    Raises:
        InvalidPathError: If path is None or not a valid path expression.
    """
    if isinstance(path, str):
        keys = _path_cache.get(path)
        if keys is None:
            keys = tuple(_parse_segment(segment) for segment in path.split('.'))
            _path_cache[path] = keys
        return keys

    if _is_key(path):
        return (path,)

    if isinstance(path, (list, tuple)):
        for key in path:
            if not _is_key(key):
                raise InvalidPathError(
                    f"Path keys must be str or int, not {type(key).__name__}"
                )
        return tuple(path)

    raise InvalidPathError(
        f"Path must be a str, int, list or tuple, not {type(path).__name__}"
    )


# Alias kept for callers used to the dotted-path vocabulary.
path_to_keys = parse_path


def format_path(keys: Path) -> str:
    """Render a key tuple back into dotted notation (for messages and logs)."""
    return '.'.join(str(key) for key in keys)

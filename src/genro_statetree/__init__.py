# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-StateTree - Immutable, path-addressable state organized as a tree of nodes.

A lightweight, zero-dependency library providing a frozen value store with
debounced change notification, composable model nodes sharing one root value,
and a small bubbling event system for the Genro ecosystem (Genro Kyō).
"""

__version__ = "0.1.0"

from . import deep, scheduling
from .deep import ABSENT
from .event import CustomEvent, Event, EventPhase
from .exceptions import (
    InvalidArgumentError,
    InvalidChildError,
    InvalidKeyError,
    InvalidPathError,
    NotRootError,
    NotSupportedError,
    StateTreeError,
)
from .node import ModelNode
from .path import parse_path, path_to_keys
from .scheduling import flush
from .store import Store

__all__ = [
    # Core classes
    "ModelNode",
    "Store",
    # Events
    "Event",
    "CustomEvent",
    "EventPhase",
    # Paths and deep operations
    "ABSENT",
    "deep",
    "parse_path",
    "path_to_keys",
    # Scheduling
    "scheduling",
    "flush",
    # Exceptions
    "StateTreeError",
    "InvalidPathError",
    "InvalidKeyError",
    "InvalidChildError",
    "InvalidArgumentError",
    "NotRootError",
    "NotSupportedError",
]

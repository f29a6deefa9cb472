# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree exceptions."""

from __future__ import annotations


class StateTreeError(Exception):
    """Base exception for StateTree errors."""

    pass


class InvalidPathError(StateTreeError, TypeError):
    """Raised when a path argument is missing or has the wrong shape."""

    pass


class InvalidKeyError(StateTreeError, TypeError):
    """Raised when a child key is not a string."""

    pass


class InvalidChildError(StateTreeError, TypeError):
    """Raised when a node is attached to (or under) something that is not a ModelNode."""

    pass


class InvalidArgumentError(StateTreeError, TypeError):
    """Raised on a wrong argument type or call signature."""

    pass


class NotRootError(StateTreeError, RuntimeError):
    """Raised when a root-only operation is invoked on a child node."""

    pass


class NotSupportedError(StateTreeError, NotImplementedError):
    """Raised when an unsupported event accessor is invoked."""

    pass

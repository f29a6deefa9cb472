# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Synthetic events dispatched through a ModelNode tree."""

from __future__ import annotations

import enum
from typing import Any, TYPE_CHECKING

from .exceptions import InvalidArgumentError, NotSupportedError

if TYPE_CHECKING:
    from .node import ModelNode


class EventPhase(enum.Enum):
    """Lifecycle of an event: dispatched at most once."""

    CREATED = 'created'
    DISPATCHING = 'dispatching'
    SETTLED = 'settled'


class Event:
    """An event travelling from its target up through its ancestors.

    The event bubbles from the target to the parent only when it was created
    with both ``bubbles`` and ``composed`` set. Listeners can stop it:

    - stop_propagation(): remaining listeners on the current node still run,
      ancestors are not reached
    - stop_immediate_propagation(): no further listener runs at all

    Both flags only go from False to True.

    Example:
        >>> event = Event('changed', bubbles=True, composed=True)
        >>> child.dispatch_event(event)
        >>> event.target is child
        True
    """

    __slots__ = (
        '_type', '_bubbles', '_composed', '_target', '_current_target',
        '_stop_propagation', '_stop_immediate_propagation', '_phase',
    )

    def __init__(self, type: str, *, bubbles: bool = False, composed: bool = False) -> None:
        if not isinstance(type, str):
            raise InvalidArgumentError('Expected "type" argument to be a "str".')
        self._type = type
        self._bubbles = bool(bubbles)
        self._composed = bool(composed)
        self._target: ModelNode | None = None
        self._current_target: ModelNode | None = None
        self._stop_propagation = False
        self._stop_immediate_propagation = False
        self._phase = EventPhase.CREATED

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._type!r}, phase={self._phase.value})"

    @property
    def type(self) -> str:
        return self._type

    @property
    def bubbles(self) -> bool:
        return self._bubbles

    @property
    def composed(self) -> bool:
        return self._composed

    @property
    def target(self) -> ModelNode | None:
        """The node dispatch_event was called on."""
        return self._target

    @property
    def current_target(self) -> ModelNode | None:
        """The node whose listeners are currently running."""
        return self._current_target

    @property
    def phase(self) -> EventPhase:
        return self._phase

    @property
    def propagation_stopped(self) -> bool:
        return self._stop_propagation

    @property
    def immediate_propagation_stopped(self) -> bool:
        return self._stop_immediate_propagation

    def stop_propagation(self) -> None:
        """Do not deliver the event to ancestors."""
        self._stop_propagation = True

    def stop_immediate_propagation(self) -> None:
        """Do not deliver the event to any further listener."""
        self._stop_propagation = True
        self._stop_immediate_propagation = True

    def composed_path(self) -> list[ModelNode]:
        """Not supported: only target and current_target are tracked."""
        raise NotSupportedError('The composed_path method is not yet supported.')


class CustomEvent(Event):
    """An Event carrying an arbitrary ``detail`` payload."""

    __slots__ = ('detail',)

    def __init__(
        self,
        type: str,
        *,
        bubbles: bool = False,
        composed: bool = False,
        detail: Any = None,
    ) -> None:
        super().__init__(type, bubbles=bubbles, composed=composed)
        self.detail = detail
